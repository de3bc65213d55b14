from __future__ import annotations

import math

import numpy as np
from PIL import Image

from drawkit.raster.canvas import solid_paint
from drawkit.style.colors import parse_color
from drawkit.style.gradient import Gradient, box_endpoints, render_gradient


def paint_for(color: str | None, gradient: Gradient | None, width: int, height: int) -> np.ndarray | None:
    """Float RGBA paint for a box; a gradient takes precedence over a flat color."""

    if gradient is not None:
        start, end = box_endpoints(gradient, float(width), float(height))
        return render_gradient(gradient, width, height, start, end)
    if color is None:
        return None
    rgba = parse_color(color)
    if rgba[3] == 0:
        return None
    return solid_paint(rgba, width, height)


def cover_fit(bitmap: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale to fill (width, height) keeping aspect ratio, centered, cropping overflow."""

    src_h, src_w = bitmap.shape[:2]
    scale = max(width / src_w, height / src_h)
    scaled_w = max(width, int(math.ceil(src_w * scale)))
    scaled_h = max(height, int(math.ceil(src_h * scale)))
    image = Image.fromarray(bitmap, mode="RGBA").resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)
    left = (scaled_w - width) // 2
    top = (scaled_h - height) // 2
    image = image.crop((left, top, left + width, top + height))
    return np.asarray(image, dtype=np.uint8)


def resize_bitmap(bitmap: np.ndarray, width: int, height: int) -> np.ndarray:
    if bitmap.shape[1] == width and bitmap.shape[0] == height:
        return bitmap
    image = Image.fromarray(bitmap, mode="RGBA").resize((max(1, width), max(1, height)), Image.Resampling.LANCZOS)
    return np.asarray(image, dtype=np.uint8)
