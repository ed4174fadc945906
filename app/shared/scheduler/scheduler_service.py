# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/scheduler_service.py

Servicio de programación de tareas periódicas usando APScheduler.

Autor: YourPixels
Fecha: 2026-10-17
"""

import logging
from typing import Callable, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class SchedulerService:
    """
    Servicio de programación de tareas periódicas.

    Funcionalidades:
    - Jobs a intervalos regulares
    - Registro y eliminación dinámica de jobs
    - Una sola instancia concurrente por job
    """

    def __init__(self):
        job_defaults = {
            'coalesce': True,  # Combinar ejecuciones perdidas
            'max_instances': 1,
            'misfire_grace_time': 30
        }

        self._scheduler = AsyncIOScheduler(
            jobstores={'default': MemoryJobStore()},
            executors={'default': AsyncIOExecutor()},
            job_defaults=job_defaults,
            timezone='UTC'
        )
        self._started = False

    def start(self):
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("SchedulerService iniciado")

    def shutdown(self, wait: bool = True):
        """
        Detiene el scheduler.

        Args:
            wait: Si True, espera a que terminen los jobs en ejecución
        """
        if self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False
            logger.info("SchedulerService detenido")

    def add_interval_job(
        self,
        func: Callable,
        job_id: str,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        **kwargs
    ) -> str:
        """
        Agrega un job que se ejecuta a intervalos regulares.

        Args:
            func: Corrutina o función a ejecutar
            job_id: ID único del job (reemplaza uno existente)
            hours / minutes / seconds: Intervalo
            **kwargs: Argumentos para func

        Returns:
            ID del job agregado
        """
        trigger = IntervalTrigger(hours=hours, minutes=minutes, seconds=seconds)
        self._scheduler.add_job(
            func=func,
            trigger=trigger,
            id=job_id,
            name=job_id,
            replace_existing=True,
            kwargs=kwargs
        )
        logger.info("Job '%s' agregado: cada %dh %dm %ds", job_id, hours, minutes, seconds)
        return job_id

    def remove_job(self, job_id: str) -> bool:
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            logger.warning("No se pudo eliminar job '%s': no existe", job_id)
            return False
        logger.info("Job '%s' eliminado", job_id)
        return True

    def get_jobs(self) -> list:
        return [
            {
                'id': job.id,
                'name': job.name,
                'next_run': job.next_run_time,
                'trigger': str(job.trigger)
            }
            for job in self._scheduler.get_jobs()
        ]

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler.running


# Singleton global del scheduler
_scheduler_instance: Optional[SchedulerService] = None


def get_scheduler() -> SchedulerService:
    global _scheduler_instance
    if _scheduler_instance is None:
        _scheduler_instance = SchedulerService()
    return _scheduler_instance


# Fin del archivo backend/app/shared/scheduler/scheduler_service.py
