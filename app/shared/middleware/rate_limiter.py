# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/rate_limiter.py

Rate limiter por IP para webhooks de pago y heartbeats de presencia.

Implementa ventana deslizante en memoria; cada endpoint protegido
tiene su propio limitador con nombre.

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from fastapi import HTTPException, Request, status

from app.shared.config import get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SlidingWindowRateLimiter:
    """
    Rate limiter con ventana deslizante en memoria.

    Sin await entre lectura y escritura, así que es seguro bajo asyncio.
    """

    def __init__(self, max_requests: int, window_seconds: int, clock: Optional[Clock] = None):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock: Clock = clock or time.monotonic
        # Dict[ip_address] -> List[timestamp]
        self._requests: Dict[str, List[float]] = defaultdict(list)

    def _cleanup_old_requests(self, ip: str, current_time: float) -> None:
        cutoff = current_time - self.window_seconds
        recent = [ts for ts in self._requests[ip] if ts > cutoff]
        if recent:
            self._requests[ip] = recent
        else:
            self._requests.pop(ip, None)

    def is_allowed(self, ip: str) -> Tuple[bool, int]:
        """
        Verifica si una IP puede hacer una request y la registra.

        Returns:
            Tuple[is_allowed, remaining_requests]
        """
        current_time = self._clock()
        self._cleanup_old_requests(ip, current_time)

        current_count = len(self._requests.get(ip, ()))
        if current_count >= self.max_requests:
            return False, 0

        self._requests[ip].append(current_time)
        return True, self.max_requests - current_count - 1

    def get_retry_after(self, ip: str) -> int:
        """Segundos hasta que la IP pueda volver a hacer requests."""
        timestamps = self._requests.get(ip)
        if not timestamps:
            return 0
        retry_after = int(min(timestamps) + self.window_seconds - self._clock()) + 1
        return max(1, retry_after)

    def reset(self) -> None:
        self._requests.clear()


_limiters: Dict[str, SlidingWindowRateLimiter] = {}


def get_rate_limiter(name: str, max_requests: int) -> SlidingWindowRateLimiter:
    """Obtiene (o crea) el limitador global identificado por `name`."""
    limiter = _limiters.get(name)
    if limiter is None:
        limiter = SlidingWindowRateLimiter(
            max_requests=max_requests,
            window_seconds=get_settings().rate_limit_window_seconds,
        )
        _limiters[name] = limiter
    return limiter


def reset_rate_limiters() -> None:
    """Resetea todos los limitadores (útil para tests)."""
    for limiter in _limiters.values():
        limiter.reset()


def _get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def rate_limit(name: str, max_requests: int) -> Callable[[Request], Awaitable[None]]:
    """
    Construye una dependencia FastAPI que aplica el limitador `name`.

    Uso en rutas:
        @router.post("/x", dependencies=[Depends(rate_limit("webhooks", 120))])

    Un max_requests <= 0 desactiva el límite.
    """

    async def _check(request: Request) -> None:
        if max_requests <= 0:
            return

        client_ip = _get_client_ip(request)
        limiter = get_rate_limiter(name, max_requests)
        allowed, _remaining = limiter.is_allowed(client_ip)
        if allowed:
            return

        retry_after = limiter.get_retry_after(client_ip)
        logger.warning("rate_limit_exceeded limiter=%s ip=%s retry_after=%ds", name, client_ip, retry_after)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error_code": "RATE_LIMIT_EXCEEDED",
                "message": f"Too many requests. Retry after {retry_after} seconds.",
                "retry_after_seconds": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )

    return _check


__all__ = [
    "SlidingWindowRateLimiter",
    "get_rate_limiter",
    "rate_limit",
    "reset_rate_limiters",
]

# Fin del archivo backend/app/shared/middleware/rate_limiter.py
