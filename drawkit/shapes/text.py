from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from drawkit.geometry import GeometryDescriptor
from drawkit.layout.position import PositionRequest, resolve_position
from drawkit.raster.canvas import apply_opacity, new_canvas, offscreen_size
from drawkit.raster.text import TextMetrics, draw_run, measure_text, parse_font
from drawkit.shapes.base import axis_value, cache_key, place
from drawkit.style.colors import parse_color
from drawkit.style.records import (
    TextSegment,
    TextStyle,
    normalize_align,
    normalize_baseline,
    resolve_opacity,
)
from drawkit.style.units import resolve_style

if TYPE_CHECKING:
    from drawkit.session import DrawSession


NUMERIC_FIELDS = ("x", "y", "opacity")
_ALIGN_SHIFT = {"left": 0.0, "center": 0.5, "right": 1.0}


def build_segments(
    text: Any,
    segments: Sequence[Any] | None,
    *,
    font: str,
    color: str,
) -> tuple[TextSegment, ...]:
    """Normalize `text` or `[{text, font?, color?}]` runs; missing fields inherit."""

    if segments is None:
        return (TextSegment(text="" if text is None else str(text), font=font, color=color),)
    out: list[TextSegment] = []
    for item in segments:
        if isinstance(item, TextSegment):
            out.append(item)
        elif isinstance(item, Mapping):
            out.append(
                TextSegment(
                    text=str(item.get("text", "")),
                    font=str(item.get("font") or font),
                    color=str(item.get("color") or color),
                )
            )
        elif isinstance(item, str):
            out.append(TextSegment(text=item, font=font, color=color))
        else:
            raise ValueError(f"text segment must be a mapping or string, got {item!r}")
    return tuple(out)


def measure_segments(segments: Sequence[TextSegment]) -> TextMetrics:
    """Total advance, the tallest ascent and deepest descent, and the ink extent of all runs."""

    width = ascent = descent = ink_left = ink_right = 0.0
    for segment in segments:
        metrics = measure_text(segment.text, parse_font(segment.font))
        ink_left = min(ink_left, width + metrics.ink_left)
        ink_right = max(ink_right, width + metrics.ink_right)
        width += metrics.width
        ascent = max(ascent, metrics.ascent)
        descent = max(descent, metrics.descent)
    return TextMetrics(
        width=width,
        ascent=ascent,
        descent=descent,
        ink_left=ink_left,
        ink_right=max(ink_right, width),
    )


def baseline_offset(baseline: str, metrics: TextMetrics) -> float:
    """Distance from the box top to the point a numeric `y` refers to."""

    if baseline == "middle":
        return metrics.height / 2.0
    if baseline == "alphabetic":
        return metrics.ascent
    if baseline == "bottom":
        return metrics.height
    return 0.0


async def draw_text(
    session: DrawSession,
    *,
    text: Any = None,
    x: Any = 0,
    y: Any = 0,
    font: str | None = None,
    color: str | None = None,
    align: str | None = None,
    baseline: str | None = None,
    segments: Sequence[Any] | None = None,
    opacity: Any = 1.0,
    reference: Any = None,
) -> GeometryDescriptor:
    """Draw one or more text runs left to right.

    Centering uses the measured box. For numeric positions `align` picks
    which edge of the text `x` refers to and `baseline` does the same for `y`.
    """

    options = resolve_style({"x": x, "y": y, "opacity": opacity}, NUMERIC_FIELDS)
    style = TextStyle(
        segments=build_segments(
            text,
            segments,
            font=font or session.config.default_font,
            color=color or session.config.default_text_color,
        ),
        align=normalize_align(align),
        baseline=normalize_baseline(baseline),
        opacity=resolve_opacity(options.get("opacity")),
    )
    for segment in style.segments:
        parse_color(segment.color)
    metrics = measure_segments(style.segments)

    pos_x = axis_value(options["x"], field="x")
    pos_y = axis_value(options["y"], field="y")
    resolved = resolve_position(
        "text",
        PositionRequest(
            x=pos_x,
            y=pos_y,
            width=metrics.width,
            height=metrics.height,
            reference=reference,
            last_reference=session.last_reference,
        ),
        session.size,
    )
    if isinstance(pos_x, float):
        resolved = replace(resolved, x=resolved.x - metrics.width * _ALIGN_SHIFT[style.align])
    if isinstance(pos_y, float):
        resolved = replace(resolved, y=resolved.y - baseline_offset(style.baseline, metrics))

    key = cache_key("text", metrics.width, metrics.height, style)

    bleed = -metrics.ink_left

    def render():
        # Sized to the ink so overhanging glyphs keep their pixels; the
        # descriptor still reports the advance.
        pixel_w, pixel_h = offscreen_size(metrics.ink_right + bleed, metrics.height)
        canvas = new_canvas(pixel_w, pixel_h)
        runs = [(segment.text, parse_font(segment.font), segment.color) for segment in style.segments]
        draw_run(canvas, bleed, metrics.ascent, runs)
        return apply_opacity(canvas, style.opacity)

    return await place(session, "text", key, resolved, render, bleed_left=bleed)
