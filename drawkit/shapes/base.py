from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence

import numpy as np

from drawkit.cache.render_cache import Bitmap, Transient
from drawkit.geometry import CENTER, GeometryDescriptor
from drawkit.layout.position import ResolvedPosition
from drawkit.raster.canvas import apply_opacity, blit, new_canvas, offscreen_size, paint_through_mask
from drawkit.raster.masks import dash_segments, fill_mask, polyline_mask, ring_mask
from drawkit.raster.paint import cover_fit, paint_for
from drawkit.style.records import FillStyle, ShapeStyle, StrokeStyle, style_payload

if TYPE_CHECKING:
    from drawkit.session import DrawSession


LOGGER = logging.getLogger(__name__)

Point = tuple[float, float]
OutlineAt = Callable[[float], Sequence[Point]]


def cache_key(
    kind: str,
    width: float,
    height: float,
    style: ShapeStyle,
    extra: dict[str, Any] | None = None,
    *,
    supersample: int = 1,
) -> str:
    """Canonical JSON over everything that changes the rendered pixels.

    The antialiasing factor is part of the key since sessions sharing a cache
    may be configured differently. Position and the session's last reference
    are left out so one bitmap can be composited anywhere.
    """

    payload: dict[str, Any] = {
        "kind": kind,
        "size": [round(float(width), 4), round(float(height), 4)],
        "style": style_payload(style),
        "aa": int(supersample),
    }
    if extra:
        payload["extra"] = extra
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def axis_value(value: Any, *, field: str) -> float | str:
    """An already-resolved `x`/`y`: a float or the `center` sentinel."""

    if value is None:
        return 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, str) and value.strip().lower() == CENTER:
        return CENTER
    LOGGER.warning("invalid `%s` position %r; using 0", field, value)
    return 0.0


def pixel_round(value: float) -> int:
    """Round half up, so half-pixel positions snap the same way everywhere."""

    return int(math.floor(value + 0.5))


async def place(
    session: DrawSession,
    kind: str,
    key: str,
    resolved: ResolvedPosition,
    render: Callable[[], Bitmap | Transient | Awaitable[Bitmap | Transient]],
    *,
    bleed_left: float = 0.0,
) -> GeometryDescriptor:
    """Fetch or render the bitmap, composite it and record the descriptor.

    `bleed_left` is how far the bitmap reaches left of the shape's box.
    """

    bitmap = await session.cache.get_or_render(key, render)
    blit(session.canvas, bitmap, pixel_round(resolved.left - bleed_left), pixel_round(resolved.top))
    descriptor = resolved.descriptor(kind)
    session.remember(descriptor)
    return descriptor


async def render_filled_shape(
    session: DrawSession,
    width: float,
    height: float,
    outline_at: OutlineAt,
    fill: FillStyle,
    stroke: StrokeStyle,
    opacity: float,
) -> Bitmap | Transient:
    """Offscreen draw of a closed shape: image, fill, then border.

    `outline_at(d)` returns the outline inset by `d` pixels. A result drawn
    over a placeholder image comes back as `Transient` so the cache retries it.
    """

    pixel_w, pixel_h = offscreen_size(width, height)
    supersample = session.config.supersample
    canvas = new_canvas(pixel_w, pixel_h)
    outline = outline_at(0.0)
    shape_mask = fill_mask(outline, pixel_w, pixel_h, supersample)

    used_placeholder = False
    if fill.image:
        image, used_placeholder = await session.images.fetch(fill.image)
        covered = cover_fit(image, pixel_w, pixel_h)
        paint_through_mask(canvas, covered.astype(np.float32), shape_mask)

    if fill.has_paint:
        paint = paint_for(fill.color, fill.gradient, pixel_w, pixel_h)
        if paint is not None:
            paint_through_mask(canvas, paint, shape_mask)

    if stroke.visible:
        coverage = stroke_mask(outline_at, stroke, pixel_w, pixel_h, supersample)
        paint = paint_for(stroke.color, stroke.gradient, pixel_w, pixel_h)
        if paint is not None:
            paint_through_mask(canvas, paint, coverage)

    bitmap = apply_opacity(canvas, opacity)
    return Transient(bitmap) if used_placeholder else bitmap


def stroke_mask(outline_at: OutlineAt, stroke: StrokeStyle, width: int, height: int, supersample: int) -> np.ndarray:
    """Border coverage kept inside the outline: the stroke is inset by half its width."""

    if stroke.dash is None:
        return ring_mask(outline_at(0.0), outline_at(stroke.width), width, height, supersample)
    centerline = outline_at(stroke.width / 2.0)
    if len(centerline) < 3:
        return fill_mask(outline_at(0.0), width, height, supersample)
    return polyline_mask(dash_segments(centerline, stroke.dash), stroke.width, width, height, supersample)
