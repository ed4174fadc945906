# -*- coding: utf-8 -*-
"""
backend/app/modules/presence/schemas.py

Esquemas del heartbeat de presencia.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class HeartbeatRequest(BaseModel):
    # Tolerante: los valores se normalizan en el tracker
    model_config = ConfigDict(extra="ignore")

    sessionId: Optional[str] = None
    isSelecting: Any = False
    selectionPixels: Any = 0


class HeartbeatResponse(BaseModel):
    status: str = "ok"


__all__ = ["HeartbeatRequest", "HeartbeatResponse"]
