from __future__ import annotations

from typing import TYPE_CHECKING, Any

from drawkit.geometry import GeometryDescriptor
from drawkit.layout.position import PositionRequest, resolve_position
from drawkit.raster.masks import circle_outline
from drawkit.shapes.base import axis_value, cache_key, place, render_filled_shape
from drawkit.style.records import CircleStyle, fill_from_options, resolve_opacity, stroke_from_options
from drawkit.style.units import require_number, resolve_style

if TYPE_CHECKING:
    from drawkit.session import DrawSession


NUMERIC_FIELDS = ("x", "y", "radius", "border_width", "opacity")


async def draw_circle(
    session: DrawSession,
    *,
    x: Any = 0,
    y: Any = 0,
    radius: Any = 0,
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
    """Draw a circle; `x, y` is its center."""

    options = resolve_style(
        {
            "x": x,
            "y": y,
            "radius": radius,
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
    style = CircleStyle(
        fill=fill_from_options(options),
        stroke=stroke_from_options(options),
        opacity=resolve_opacity(options.get("opacity")),
    )
    r = max(0.0, require_number(options["radius"], field="radius"))
    resolved = resolve_position(
        "circle",
        PositionRequest(
            x=axis_value(options["x"], field="x"),
            y=axis_value(options["y"], field="y"),
            radius=r,
            reference=reference,
            last_reference=session.last_reference,
        ),
        session.size,
    )
    key = cache_key("circle", 2.0 * r, 2.0 * r, style, supersample=session.config.supersample)

    def outline_at(inset: float):
        return circle_outline(r, r, r - inset)

    async def render():
        return await render_filled_shape(session, 2.0 * r, 2.0 * r, outline_at, style.fill, style.stroke, style.opacity)

    return await place(session, "circle", key, resolved, render)
