# -*- coding: utf-8 -*-
"""
backend/app/modules/purchases/validators.py

Validación de la selección comprada y del contenido publicado.

- Geometría: rect {x, y, w, h}, tiles que particionan el área, área en píxeles
- Transformación de imagen: escala y rotación acotadas, offsets finitos
- Contenido: enlace normalizado y escaneo básico de la imagen subida

Los valores pueden llegar como objetos o como JSON serializado
(los metadatos de checkout viajan como strings).

Autor: YourPixels
Fecha: 2026-10-17
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from app.shared.utils.image_safety import analyze
from app.shared.utils.url_validator import InvalidLinkError, validate_link

from .enums import ModerationStatus

logger = logging.getLogger(__name__)

SCALE_MIN, SCALE_MAX = 0.1, 3.0
ROTATE_MIN, ROTATE_MAX = -180.0, 180.0


class InvalidSelection(ValueError):
    """La geometría de la selección no es consistente."""


class InvalidTransform(ValueError):
    """La transformación de imagen contiene valores no finitos."""


# =============================================================================
# GEOMETRÍA
# =============================================================================

@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    @property
    def area(self) -> int:
        return self.w * self.h

    def contains(self, other: "Rect") -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.x + other.w <= self.x + self.w
            and other.y + other.h <= self.y + self.h
        )

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


def _maybe_json(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidSelection(f"Malformed JSON: {e.msg}") from e
    return value


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidSelection(f"{name} must be a finite number")
    if int(value) != value:
        raise InvalidSelection(f"{name} must be an integer")
    return int(value)


def parse_rect(value: Any) -> Optional[Rect]:
    """
    Convierte {x, y, w, h} (acepta width/height) en Rect.

    Returns:
        Rect o None si no hay valor

    Raises:
        InvalidSelection: Si faltan campos o no son enteros válidos
    """
    value = _maybe_json(value)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise InvalidSelection("rect must be an object")

    w = value.get("w", value.get("width"))
    h = value.get("h", value.get("height"))
    rect = Rect(
        x=_as_int(value.get("x"), "x"),
        y=_as_int(value.get("y"), "y"),
        w=_as_int(w, "w"),
        h=_as_int(h, "h"),
    )
    if rect.x < 0 or rect.y < 0:
        raise InvalidSelection("rect origin must be non-negative")
    if rect.w <= 0 or rect.h <= 0:
        raise InvalidSelection("rect dimensions must be positive")
    return rect


def parse_tiles(value: Any) -> Optional[list[Rect]]:
    """Lista de sub-rectángulos; None si no hay valor, error si está vacía."""
    value = _maybe_json(value)
    if value is None:
        return None
    if not isinstance(value, list):
        raise InvalidSelection("tiles must be a list")
    if not value:
        raise InvalidSelection("tiles must not be empty")
    return [parse_rect(tile) for tile in value]


def parse_area(value: Any) -> Optional[int]:
    value = _maybe_json(value)
    if value is None:
        return None
    area = _as_int(value, "area")
    if area <= 0:
        raise InvalidSelection("area must be positive")
    return area


@dataclass(frozen=True)
class Selection:
    """Selección ya validada: rect, tiles y área consistentes."""
    rect: Rect
    tiles: tuple[Rect, ...]
    area: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "rect": self.rect.to_dict(),
            "tiles": [t.to_dict() for t in self.tiles],
            "area": self.area,
        }


def build_selection(rect: Optional[Rect], tiles: Optional[list[Rect]], area: Optional[int]) -> Selection:
    """
    Arma una Selection consistente.

    - Sin tiles se usa [rect]
    - Sin área se deriva de la suma de tiles
    - Cada tile debe caer dentro de rect y el área debe coincidir con los tiles

    Raises:
        InvalidSelection: Si falta rect o la geometría es inconsistente
    """
    if rect is None:
        raise InvalidSelection("rect is required")
    tiles = tiles or [rect]
    for tile in tiles:
        if not rect.contains(tile):
            raise InvalidSelection("tile outside of bounding rect")

    tiles_area = sum(t.area for t in tiles)
    if tiles_area > rect.area:
        raise InvalidSelection("tiles overlap or exceed the bounding rect")
    if area is None:
        area = tiles_area
    elif area != tiles_area:
        raise InvalidSelection(f"area {area} does not match tiles area {tiles_area}")
    return Selection(rect=rect, tiles=tuple(tiles), area=area)


# =============================================================================
# TRANSFORMACIÓN DE IMAGEN
# =============================================================================

def _finite(value: Any, name: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidTransform(f"Invalid transform: {name}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidTransform(f"Invalid transform: {name}") from e
    if not math.isfinite(number):
        raise InvalidTransform(f"Invalid transform: {name}")
    return number


def safe_image_transform(value: Any) -> Optional[dict[str, float]]:
    """
    Normaliza la transformación {offsetX, offsetY, scale, rotate}.

    Returns:
        dict normalizado o None si el valor no es un objeto

    Raises:
        InvalidTransform: Si algún valor no es finito
    """
    try:
        value = _maybe_json(value)
    except InvalidSelection as e:
        raise InvalidTransform("Invalid transform: malformed JSON") from e
    if not isinstance(value, Mapping):
        return None

    scale = _finite(value.get("scale"), "scale", 1.0)
    rotate = _finite(value.get("rotate"), "rotate", 0.0)
    return {
        "offsetX": _finite(value.get("offsetX"), "offsetX", 0.0),
        "offsetY": _finite(value.get("offsetY"), "offsetY", 0.0),
        "scale": min(SCALE_MAX, max(SCALE_MIN, scale)),
        "rotate": min(ROTATE_MAX, max(ROTATE_MIN, rotate)),
    }


# =============================================================================
# CONTENIDO PUBLICADO
# =============================================================================

@dataclass
class ScreenedContent:
    """Contenido depurado listo para persistir."""
    link: Optional[str] = None
    uploaded_image: Optional[str] = None
    image_transform: Optional[dict[str, float]] = None
    preview_data: Optional[dict[str, Any]] = None
    moderation_status: ModerationStatus = ModerationStatus.UNMODERATED
    warnings: list[str] = field(default_factory=list)


def screen_content(content: Mapping[str, Any], *, strict: bool = False) -> ScreenedContent:
    """
    Depura link, imagen, transformación y preview.

    Args:
        content: Campos link / uploadedImage / imageTransform / previewData
        strict: Si True, un enlace o transformación inválidos lanzan error
                (edición del propietario); si False se descartan con warning
                (finalización de pago, que nunca debe fallar por contenido)

    Raises:
        InvalidLinkError / InvalidTransform: Solo en modo strict
    """
    result = ScreenedContent()

    raw_link = content.get("link")
    if raw_link:
        try:
            result.link = validate_link(raw_link)
        except InvalidLinkError as e:
            if strict:
                raise
            result.warnings.append(f"link_dropped: {e}")

    try:
        result.image_transform = safe_image_transform(content.get("imageTransform"))
    except InvalidTransform as e:
        if strict:
            raise
        result.warnings.append(f"transform_dropped: {e}")

    preview = content.get("previewData")
    try:
        preview = _maybe_json(preview)
    except InvalidSelection:
        preview = None
        result.warnings.append("preview_dropped: malformed JSON")
    result.preview_data = preview if isinstance(preview, Mapping) else None

    image = content.get("uploadedImage")
    if image:
        result.uploaded_image = str(image)
        verdict = analyze(result.uploaded_image)
        if not verdict.safe:
            result.moderation_status = ModerationStatus.FLAGGED
            logger.warning(
                "content_flagged reason=%s confidence=%.2f",
                verdict.reason,
                verdict.confidence,
            )

    return result


__all__ = [
    "InvalidSelection",
    "InvalidTransform",
    "Rect",
    "ScreenedContent",
    "Selection",
    "build_selection",
    "parse_area",
    "parse_rect",
    "parse_tiles",
    "safe_image_transform",
    "screen_content",
]
