# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/jobs/__init__.py

Jobs programados del sistema.
"""

from .store_sweep_job import register_store_sweep_job, sweep_store

__all__ = [
    "register_store_sweep_job",
    "sweep_store",
]
