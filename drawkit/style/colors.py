from __future__ import annotations

from functools import lru_cache
import re

from PIL import ImageColor

from drawkit.errors import ColorParseError


RGBA = tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)

_CSS_RGBA = re.compile(r"^rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d*\.?\d+)\s*\)$")


def is_transparent(value: str | None) -> bool:
    return isinstance(value, str) and value.strip().lower() == "transparent"


@lru_cache(maxsize=512)
def parse_color(value: str) -> RGBA:
    """CSS color (hex, rgb(), rgba(), hsl(), named) to an RGBA tuple."""

    if not isinstance(value, str) or not value.strip():
        raise ColorParseError(f"color must be a non-empty string, got {value!r}")
    raw = value.strip().lower()
    if raw == "transparent":
        return TRANSPARENT
    css = _CSS_RGBA.match(raw)
    if css is not None and ("." in css.group(4) or float(css.group(4)) <= 1.0):
        alpha = max(0.0, min(1.0, float(css.group(4))))
        r, g, b = (max(0, min(255, int(css.group(i)))) for i in (1, 2, 3))
        return (r, g, b, int(round(alpha * 255)))
    try:
        r, g, b, a = ImageColor.getcolor(raw, "RGBA")
    except ValueError as exc:
        raise ColorParseError(f"unknown color: {value}") from exc
    return (int(r), int(g), int(b), int(a))


def with_opacity(color: RGBA, opacity: float) -> RGBA:
    return (color[0], color[1], color[2], int(round(color[3] * max(0.0, min(1.0, opacity)))))
