from .canvas import apply_opacity, blit, composite_over, new_canvas, offscreen_size, paint_through_mask
from .encode import ALLOWED_MIME_TYPES, encode_bitmap, validate_mime_type
from .masks import (
    circle_outline,
    dash_segments,
    fill_mask,
    inset_polygon,
    polyline_mask,
    ring_mask,
    rounded_rect_outline,
    segment_mask,
    triangle_outline,
)
from .paint import cover_fit, paint_for
from .text import FontSpec, TextMetrics, draw_run, measure_text, parse_font

__all__ = [
    "ALLOWED_MIME_TYPES",
    "FontSpec",
    "TextMetrics",
    "apply_opacity",
    "blit",
    "circle_outline",
    "composite_over",
    "cover_fit",
    "dash_segments",
    "draw_run",
    "encode_bitmap",
    "fill_mask",
    "inset_polygon",
    "measure_text",
    "new_canvas",
    "offscreen_size",
    "paint_for",
    "paint_through_mask",
    "parse_font",
    "polyline_mask",
    "ring_mask",
    "rounded_rect_outline",
    "segment_mask",
    "triangle_outline",
    "validate_mime_type",
]
