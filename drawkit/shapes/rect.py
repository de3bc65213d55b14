from __future__ import annotations

from typing import TYPE_CHECKING, Any

from drawkit.geometry import GeometryDescriptor
from drawkit.layout.position import PositionRequest, resolve_position
from drawkit.raster.masks import rounded_rect_outline
from drawkit.shapes.base import axis_value, cache_key, place, render_filled_shape
from drawkit.style.records import (
    RectStyle,
    fill_from_options,
    radii_from_options,
    resolve_opacity,
    stroke_from_options,
)
from drawkit.style.units import require_number, resolve_style

if TYPE_CHECKING:
    from drawkit.session import DrawSession


NUMERIC_FIELDS = ("x", "y", "width", "height", "border_width", "border_radius", "opacity")


def rect_style(options: dict[str, Any]) -> RectStyle:
    return RectStyle(
        fill=fill_from_options(options),
        stroke=stroke_from_options(options),
        radii=radii_from_options(options),
        opacity=resolve_opacity(options.get("opacity")),
    )


def rect_outline_at(width: float, height: float, radii: tuple[float, float, float, float]):
    """Outline factory for a rounded rect, inset by `d` with radii shrunk to match."""

    def outline(inset: float):
        inner_radii = tuple(max(0.0, r - inset) for r in radii)
        return rounded_rect_outline(inset, inset, width - 2.0 * inset, height - 2.0 * inset, inner_radii)  # type: ignore[arg-type]

    return outline


async def draw_rect(
    session: DrawSession,
    *,
    x: Any = 0,
    y: Any = 0,
    width: Any = 0,
    height: Any = 0,
    background_color: str | None = None,
    background_image: str | None = None,
    background_gradient: Any = None,
    border_color: str | None = None,
    border_gradient: Any = None,
    border_width: Any = None,
    border_style: str | None = None,
    border_radius: Any = 0,
    opacity: Any = 1.0,
    reference: Any = None,
) -> GeometryDescriptor:
    """Draw a rectangle with optional rounded corners, anchored at its top-left."""

    options = resolve_style(
        {
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "background_color": background_color,
            "background_image": background_image,
            "background_gradient": background_gradient,
            "border_color": border_color,
            "border_gradient": border_gradient,
            "border_width": border_width,
            "border_style": border_style,
            "border_radius": border_radius,
            "opacity": opacity,
        },
        NUMERIC_FIELDS,
    )
    style = rect_style(options)
    rect_w = max(0.0, require_number(options["width"], field="width"))
    rect_h = max(0.0, require_number(options["height"], field="height"))
    resolved = resolve_position(
        "rect",
        PositionRequest(
            x=axis_value(options["x"], field="x"),
            y=axis_value(options["y"], field="y"),
            width=rect_w,
            height=rect_h,
            reference=reference,
            last_reference=session.last_reference,
        ),
        session.size,
    )
    key = cache_key("rect", rect_w, rect_h, style, supersample=session.config.supersample)

    async def render():
        return await render_filled_shape(
            session,
            rect_w,
            rect_h,
            rect_outline_at(rect_w, rect_h, style.radii),
            style.fill,
            style.stroke,
            style.opacity,
        )

    return await place(session, "rect", key, resolved, render)
