# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/__init__.py

Jobs periódicos usando APScheduler.
"""

from .scheduler_service import SchedulerService, get_scheduler

__all__ = [
    "SchedulerService",
    "get_scheduler",
]
