# -*- coding: utf-8 -*-
"""
backend/app/modules/checkout/selection.py

Resolución de la selección comprada a partir de la sesión.

Orden de búsqueda:
- rect:  selectionArea.rect  -> metadata.rect
- tiles: selectionArea.tiles -> metadata.tiles -> [rect]
- area:  selectionArea.area  -> metadata.area  -> suma de tiles

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from app.modules.purchases.validators import (
    Selection,
    build_selection,
    parse_area,
    parse_rect,
    parse_tiles,
)


def _first(key: str, *sources: Optional[Mapping[str, Any]]) -> Any:
    for source in sources:
        if source and source.get(key) is not None:
            return source[key]
    return None


def resolve_selection(
    selection_area: Optional[Mapping[str, Any]],
    metadata: Optional[Mapping[str, Any]] = None,
) -> Selection:
    """
    Raises:
        InvalidSelection: rect ausente o geometría inconsistente
    """
    rect = parse_rect(_first("rect", selection_area, metadata))
    tiles = parse_tiles(_first("tiles", selection_area, metadata))
    area = parse_area(_first("area", selection_area, metadata))
    return build_selection(rect, tiles, area)


__all__ = ["resolve_selection"]
