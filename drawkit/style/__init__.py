"""Style normalization: units, shorthands, colors, gradients and per-shape records."""

from .colors import RGBA, TRANSPARENT, parse_color
from .gradient import ColorStop, Gradient, build_gradient, gradient_endpoints, render_gradient
from .records import (
    ButtonStyle,
    CircleStyle,
    FillStyle,
    LineStyle,
    RectStyle,
    StrokeStyle,
    TextSegment,
    TextStyle,
    TriangleStyle,
)
from .units import expand_box, parse_length, parse_numeric, resolve_style

__all__ = [
    "ButtonStyle",
    "CircleStyle",
    "ColorStop",
    "FillStyle",
    "Gradient",
    "LineStyle",
    "RGBA",
    "RectStyle",
    "StrokeStyle",
    "TRANSPARENT",
    "TextSegment",
    "TextStyle",
    "TriangleStyle",
    "build_gradient",
    "expand_box",
    "gradient_endpoints",
    "parse_color",
    "parse_length",
    "parse_numeric",
    "render_gradient",
    "resolve_style",
]
