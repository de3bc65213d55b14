from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from drawkit.geometry import GeometryDescriptor
from drawkit.layout.position import PositionRequest, resolve_position
from drawkit.raster.canvas import apply_opacity, new_canvas, offscreen_size, paint_through_mask, solid_paint
from drawkit.raster.masks import segment_mask
from drawkit.shapes.base import axis_value, cache_key, place
from drawkit.style.colors import parse_color
from drawkit.style.records import LINE_CAPS, LineStyle, choose, resolve_opacity
from drawkit.style.units import require_number, resolve_style

if TYPE_CHECKING:
    from drawkit.session import DrawSession


LOGGER = logging.getLogger(__name__)

NUMERIC_FIELDS = ("x", "y", "length", "angle", "start_x", "start_y", "end_x", "end_y", "line_width", "opacity")


async def draw_line(
    session: DrawSession,
    *,
    x: Any = None,
    y: Any = None,
    length: Any = None,
    angle: Any = 0,
    start_x: Any = None,
    start_y: Any = None,
    end_x: Any = None,
    end_y: Any = None,
    line_width: Any = 1,
    line_color: str = "black",
    line_cap: str = "butt",
    opacity: Any = 1.0,
    reference: Any = None,
) -> GeometryDescriptor:
    """Draw a straight segment.

    Either give the endpoints (`start_x, start_y, end_x, end_y`) or a midpoint
    `x, y` with `length` and `angle` in degrees (0 points right, positive
    turns clockwise). The bounding box is padded by `line_width` on each side.
    """

    options = resolve_style(
        {
            "x": x,
            "y": y,
            "length": length,
            "angle": angle,
            "start_x": start_x,
            "start_y": start_y,
            "end_x": end_x,
            "end_y": end_y,
            "line_width": line_width,
            "opacity": opacity,
        },
        NUMERIC_FIELDS,
    )
    width = require_number(options["line_width"], field="line_width", default=1.0)
    if width < 0:
        LOGGER.warning("negative line width %s; using 1", width)
        width = 1.0
    style = LineStyle(
        color=line_color,
        width=width,
        cap=choose(line_cap, LINE_CAPS, field="line_cap", default="butt"),  # type: ignore[arg-type]
        opacity=resolve_opacity(options.get("opacity")),
    )
    parse_color(style.color)  # raises on unknown colors before anything is drawn

    endpoints = _endpoints(options)
    if endpoints is not None:
        (sx, sy), (ex, ey) = endpoints
        dx, dy = ex - sx, ey - sy
        mid_x: Any = (sx + ex) / 2.0 if options["x"] is None else axis_value(options["x"], field="x")
        mid_y: Any = (sy + ey) / 2.0 if options["y"] is None else axis_value(options["y"], field="y")
    else:
        span = require_number(options["length"], field="length")
        theta = math.radians(require_number(options["angle"], field="angle"))
        dx, dy = span * math.cos(theta), span * math.sin(theta)
        mid_x = axis_value(options["x"], field="x")
        mid_y = axis_value(options["y"], field="y")

    resolved = resolve_position(
        "line",
        PositionRequest(
            x=mid_x,
            y=mid_y,
            width=abs(dx),
            height=abs(dy),
            line_width=width,
            reference=reference,
            last_reference=session.last_reference,
        ),
        session.size,
    )
    key = cache_key(
        "line",
        resolved.width,
        resolved.height,
        style,
        extra={"dx": round(dx, 4), "dy": round(dy, 4)},
        supersample=session.config.supersample,
    )

    def render():
        pixel_w, pixel_h = offscreen_size(resolved.width, resolved.height)
        cx, cy = resolved.width / 2.0, resolved.height / 2.0
        start = (cx - dx / 2.0, cy - dy / 2.0)
        end = (cx + dx / 2.0, cy + dy / 2.0)
        coverage = segment_mask(start, end, style.width, style.cap, pixel_w, pixel_h, session.config.supersample)
        canvas = new_canvas(pixel_w, pixel_h)
        paint_through_mask(canvas, solid_paint(parse_color(style.color), pixel_w, pixel_h), coverage)
        return apply_opacity(canvas, style.opacity)

    return await place(session, "line", key, resolved, render)


def _endpoints(options: dict[str, Any]) -> tuple[tuple[float, float], tuple[float, float]] | None:
    values = [options[name] for name in ("start_x", "start_y", "end_x", "end_y")]
    if all(value is None for value in values):
        return None
    if not all(isinstance(value, float) for value in values):
        LOGGER.warning("line endpoints need numeric start_x/start_y/end_x/end_y, got %r; ignoring them", values)
        return None
    sx, sy, ex, ey = values
    return (sx, sy), (ex, ey)
