# -*- coding: utf-8 -*-
"""
backend/app/modules/presence/routes.py

Endpoints:
- POST /presence/heartbeat

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.shared.config import get_settings
from app.shared.middleware.rate_limiter import rate_limit

from .dependencies import get_presence_tracker
from .schemas import HeartbeatRequest, HeartbeatResponse
from .tracker import PresenceTracker

router = APIRouter(prefix="/presence", tags=["Presence"])


@router.post(
    "/heartbeat",
    response_model=HeartbeatResponse,
    dependencies=[Depends(rate_limit("presence_heartbeat", get_settings().heartbeat_rate_limit))],
)
async def heartbeat(
    body: HeartbeatRequest,
    tracker: PresenceTracker = Depends(get_presence_tracker),
) -> HeartbeatResponse:
    if not body.sessionId or not body.sessionId.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error_code": "INVALID_REQUEST", "message": "sessionId is required"},
        )
    await tracker.touch(body.sessionId, body.isSelecting, body.selectionPixels)
    return HeartbeatResponse()


__all__ = ["router"]
