from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from drawkit.cache.render_cache import Transient
from drawkit.geometry import GeometryDescriptor
from drawkit.layout.position import PositionRequest, resolve_position
from drawkit.raster.canvas import apply_opacity, blit
from drawkit.raster.paint import resize_bitmap
from drawkit.raster.text import TextMetrics, draw_run, measure_text, parse_font
from drawkit.shapes.base import axis_value, cache_key, pixel_round, place, render_filled_shape
from drawkit.shapes.rect import rect_outline_at
from drawkit.style.colors import parse_color
from drawkit.style.records import (
    ButtonStyle,
    choose,
    fill_from_options,
    padding_from_options,
    radii_from_options,
    resolve_opacity,
    stroke_from_options,
)
from drawkit.style.units import require_number, resolve_style

if TYPE_CHECKING:
    from drawkit.session import DrawSession


NUMERIC_FIELDS = (
    "x",
    "y",
    "width",
    "height",
    "padding",
    "border_width",
    "border_radius",
    "icon_width",
    "icon_height",
    "icon_scale",
    "icon_spacing",
    "opacity",
)
ICON_POSITIONS = ("left", "right")


@dataclass(frozen=True)
class ButtonLayout:
    """Button box plus where the icon and text sit inside it."""

    width: float
    height: float
    text_x: float
    baseline: float
    icon_x: float
    icon_y: float
    icon_width: float
    icon_height: float


def layout_button(
    style: ButtonStyle,
    text_metrics: TextMetrics,
    icon_size: tuple[float, float],
    fixed_size: tuple[float | None, float | None],
) -> ButtonLayout:
    """Size the button from its content or a fixed inner size, plus padding on top."""

    top, right, bottom, left = style.padding
    icon_w, icon_h = icon_size
    has_text = bool(style.text)
    spacing = style.icon_spacing if icon_w and has_text else 0.0
    content_w = text_metrics.width + (icon_w + spacing if icon_w else 0.0)
    content_h = max(icon_h, text_metrics.height)

    fixed_w, fixed_h = fixed_size
    width = (fixed_w if fixed_w else content_w) + left + right
    height = (fixed_h if fixed_h else content_h) + top + bottom

    content_x = (width - content_w) / 2.0
    content_y = (height - content_h) / 2.0
    icon_first = style.icon_position == "left"
    icon_x = content_x if icon_first else content_x + text_metrics.width + spacing
    text_x = content_x + icon_w + spacing if icon_w and icon_first else content_x
    text_top = content_y + (content_h - text_metrics.height) / 2.0
    return ButtonLayout(
        width=width,
        height=height,
        text_x=text_x,
        baseline=text_top + text_metrics.ascent,
        icon_x=icon_x,
        icon_y=content_y + (content_h - icon_h) / 2.0,
        icon_width=icon_w,
        icon_height=icon_h,
    )


async def draw_button(
    session: DrawSession,
    *,
    x: Any = 0,
    y: Any = 0,
    width: Any = None,
    height: Any = None,
    padding: Any = None,
    text: Any = None,
    font: str | None = None,
    color: str | None = None,
    icon_url: str | None = None,
    icon_width: Any = None,
    icon_height: Any = None,
    icon_scale: Any = None,
    icon_position: str = "left",
    icon_spacing: Any = 10,
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
    """Draw a rounded-rect button holding text and an optional icon.

    Without `width`/`height` the button wraps its content; either way the
    padding is added outside the inner size.
    """

    options = resolve_style(
        {
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "padding": padding,
            "icon_width": icon_width,
            "icon_height": icon_height,
            "icon_scale": icon_scale,
            "icon_spacing": icon_spacing,
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
    style = ButtonStyle(
        fill=fill_from_options(options),
        stroke=stroke_from_options(options),
        radii=radii_from_options(options),
        padding=padding_from_options(options),
        text=None if text is None else str(text),
        font=font or session.config.default_font,
        color=color or session.config.default_text_color,
        icon_url=icon_url,
        icon_position=choose(icon_position, ICON_POSITIONS, field="icon_position", default="left"),  # type: ignore[arg-type]
        icon_spacing=require_number(options["icon_spacing"], field="icon_spacing", default=10.0),
        opacity=resolve_opacity(options.get("opacity")),
    )
    parse_color(style.color)
    font_spec = parse_font(style.font)
    text_metrics = measure_text(style.text or "", font_spec)

    icon = None
    icon_is_placeholder = False
    icon_size = (0.0, 0.0)
    if style.icon_url:
        icon, icon_is_placeholder = await session.images.fetch(style.icon_url)
        scale = require_number(options["icon_scale"], field="icon_scale", default=1.0)
        icon_size = (
            require_number(options["icon_width"], field="icon_width", default=float(icon.shape[1])) * scale,
            require_number(options["icon_height"], field="icon_height", default=float(icon.shape[0])) * scale,
        )

    fixed_w = require_number(options["width"], field="width") or None
    fixed_h = require_number(options["height"], field="height") or None
    layout = layout_button(style, text_metrics, icon_size, (fixed_w, fixed_h))

    resolved = resolve_position(
        "button",
        PositionRequest(
            x=axis_value(options["x"], field="x"),
            y=axis_value(options["y"], field="y"),
            width=layout.width,
            height=layout.height,
            reference=reference,
            last_reference=session.last_reference,
        ),
        session.size,
    )
    key = cache_key(
        "button",
        layout.width,
        layout.height,
        style,
        extra={"icon": [round(layout.icon_width, 4), round(layout.icon_height, 4)]},
        supersample=session.config.supersample,
    )

    async def render():
        base = await render_filled_shape(
            session,
            layout.width,
            layout.height,
            rect_outline_at(layout.width, layout.height, style.radii),
            style.fill,
            style.stroke,
            1.0,
        )
        transient = isinstance(base, Transient) or icon_is_placeholder
        canvas = base.bitmap.copy() if isinstance(base, Transient) else base.copy()
        if icon is not None and layout.icon_width >= 1 and layout.icon_height >= 1:
            scaled = resize_bitmap(icon, int(round(layout.icon_width)), int(round(layout.icon_height)))
            blit(canvas, scaled, pixel_round(layout.icon_x), pixel_round(layout.icon_y))
        if style.text:
            draw_run(canvas, layout.text_x, layout.baseline, [(style.text, font_spec, style.color)])
        bitmap = apply_opacity(canvas, style.opacity)
        return Transient(bitmap) if transient else bitmap

    return await place(session, "button", key, resolved, render)
