from __future__ import annotations

from typing import TYPE_CHECKING, Any

from drawkit.geometry import GeometryDescriptor
from drawkit.layout.position import PositionRequest, resolve_position
from drawkit.raster.masks import inset_polygon, triangle_outline
from drawkit.shapes.base import axis_value, cache_key, place, render_filled_shape
from drawkit.style.records import (
    TRIANGLE_DIRECTIONS,
    TriangleStyle,
    choose,
    fill_from_options,
    resolve_opacity,
    stroke_from_options,
)
from drawkit.style.units import require_number, resolve_style

if TYPE_CHECKING:
    from drawkit.session import DrawSession


NUMERIC_FIELDS = ("x", "y", "width", "height", "size", "border_width", "opacity")


async def draw_triangle(
    session: DrawSession,
    *,
    x: Any = 0,
    y: Any = 0,
    width: Any = None,
    height: Any = None,
    size: Any = None,
    direction: str = "up",
    background_color: str | None = None,
    background_image: str | None = None,
    background_gradient: Any = None,
    border_color: str | None = None,
    border_gradient: Any = None,
    border_width: Any = None,
    border_style: str | None = None,
    opacity: Any = 1.0,
    reference: Any = None,
) -> GeometryDescriptor:
    """Draw an isoceles triangle inside its box; `x, y` is the box center.

    `size` sets both sides when `width`/`height` are omitted.
    """

    options = resolve_style(
        {
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "size": size,
            "background_color": background_color,
            "background_image": background_image,
            "background_gradient": background_gradient,
            "border_color": border_color,
            "border_gradient": border_gradient,
            "border_width": border_width,
            "border_style": border_style,
            "opacity": opacity,
        },
        NUMERIC_FIELDS,
    )
    style = TriangleStyle(
        fill=fill_from_options(options),
        stroke=stroke_from_options(options),
        direction=choose(direction, TRIANGLE_DIRECTIONS, field="direction", default="up"),  # type: ignore[arg-type]
        opacity=resolve_opacity(options.get("opacity")),
    )
    side = require_number(options["size"], field="size")
    tri_w = max(0.0, require_number(options["width"], field="width", default=side))
    tri_h = max(0.0, require_number(options["height"], field="height", default=side))
    resolved = resolve_position(
        "triangle",
        PositionRequest(
            x=axis_value(options["x"], field="x"),
            y=axis_value(options["y"], field="y"),
            width=tri_w,
            height=tri_h,
            reference=reference,
            last_reference=session.last_reference,
        ),
        session.size,
    )
    key = cache_key("triangle", tri_w, tri_h, style, supersample=session.config.supersample)
    points = triangle_outline(tri_w, tri_h, style.direction)

    def outline_at(inset: float):
        return inset_polygon(points, inset)

    async def render():
        return await render_filled_shape(session, tri_w, tri_h, outline_at, style.fill, style.stroke, style.opacity)

    return await place(session, "triangle", key, resolved, render)
