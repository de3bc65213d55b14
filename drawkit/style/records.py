from __future__ import annotations

from dataclasses import asdict, dataclass, field
import logging
from typing import Any, Literal, Mapping

from drawkit.style.colors import is_transparent
from drawkit.style.gradient import Gradient, build_gradient
from drawkit.style.units import expand_box, parse_numeric, resolve_stroke_width


LOGGER = logging.getLogger(__name__)

BorderStyle = Literal["solid", "dashed", "dotted"]
LineCap = Literal["butt", "round", "square"]
TriangleDirection = Literal["up", "down", "left", "right"]
IconPosition = Literal["left", "right"]
TextAlign = Literal["left", "center", "right"]
TextBaseline = Literal["top", "middle", "alphabetic", "bottom"]

BORDER_STYLES: tuple[str, ...] = ("solid", "dashed", "dotted")
DASH_PATTERNS: dict[str, tuple[float, float] | None] = {
    "solid": None,
    "dashed": (5.0, 3.0),
    "dotted": (2.0, 2.0),
}
LINE_CAPS: tuple[str, ...] = ("butt", "round", "square")
TRIANGLE_DIRECTIONS: tuple[str, ...] = ("up", "down", "left", "right")
_ALIGN_ALIASES = {"start": "left", "left": "left", "center": "center", "end": "right", "right": "right"}
_BASELINE_ALIASES = {
    "top": "top",
    "hanging": "top",
    "middle": "middle",
    "alphabetic": "alphabetic",
    "ideographic": "bottom",
    "bottom": "bottom",
}

Box4 = tuple[float, float, float, float]


@dataclass(frozen=True)
class FillStyle:
    color: str | None = None
    image: str | None = None
    gradient: Gradient | None = None

    @property
    def has_paint(self) -> bool:
        if self.gradient is not None:
            return True
        return self.color is not None and not is_transparent(self.color)


@dataclass(frozen=True)
class StrokeStyle:
    color: str | None = None
    gradient: Gradient | None = None
    width: float = 1.0
    style: BorderStyle = "solid"

    @property
    def visible(self) -> bool:
        if self.width <= 0:
            return False
        if self.gradient is not None:
            return True
        return self.color is not None and not is_transparent(self.color)

    @property
    def dash(self) -> tuple[float, float] | None:
        return DASH_PATTERNS[self.style]


@dataclass(frozen=True)
class RectStyle:
    fill: FillStyle
    stroke: StrokeStyle
    radii: Box4 = (0.0, 0.0, 0.0, 0.0)
    opacity: float = 1.0
    kind: str = field(default="rect", init=False)


@dataclass(frozen=True)
class CircleStyle:
    fill: FillStyle
    stroke: StrokeStyle
    opacity: float = 1.0
    kind: str = field(default="circle", init=False)


@dataclass(frozen=True)
class TriangleStyle:
    fill: FillStyle
    stroke: StrokeStyle
    direction: TriangleDirection = "up"
    opacity: float = 1.0
    kind: str = field(default="triangle", init=False)


@dataclass(frozen=True)
class LineStyle:
    color: str = "black"
    width: float = 1.0
    cap: LineCap = "butt"
    opacity: float = 1.0
    kind: str = field(default="line", init=False)


@dataclass(frozen=True)
class TextSegment:
    text: str
    font: str
    color: str


@dataclass(frozen=True)
class TextStyle:
    segments: tuple[TextSegment, ...]
    align: TextAlign = "left"
    baseline: TextBaseline = "top"
    opacity: float = 1.0
    kind: str = field(default="text", init=False)

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)


@dataclass(frozen=True)
class ButtonStyle:
    fill: FillStyle
    stroke: StrokeStyle
    radii: Box4 = (0.0, 0.0, 0.0, 0.0)
    padding: Box4 = (10.0, 10.0, 10.0, 10.0)
    text: str | None = None
    font: str = "30px sans-serif"
    color: str = "#000000"
    icon_url: str | None = None
    icon_position: IconPosition = "left"
    icon_spacing: float = 10.0
    opacity: float = 1.0
    kind: str = field(default="button", init=False)


ShapeStyle = RectStyle | CircleStyle | TriangleStyle | LineStyle | TextStyle | ButtonStyle


def fill_from_options(options: Mapping[str, Any]) -> FillStyle:
    gradient = options.get("background_gradient")
    return FillStyle(
        color=options.get("background_color"),
        image=options.get("background_image"),
        gradient=build_gradient(gradient) if gradient is not None else None,
    )


def stroke_from_options(options: Mapping[str, Any], default_width: float = 1.0) -> StrokeStyle:
    gradient = options.get("border_gradient")
    return StrokeStyle(
        color=options.get("border_color"),
        gradient=build_gradient(gradient) if gradient is not None else None,
        width=resolve_stroke_width(options.get("border_width"), default=default_width),
        style=choose(options.get("border_style"), BORDER_STYLES, field="border_style", default="solid"),  # type: ignore[arg-type]
    )


def radii_from_options(options: Mapping[str, Any]) -> Box4:
    return expand_box(options.get("border_radius"), field="border_radius")


def padding_from_options(options: Mapping[str, Any], default: float = 10.0) -> Box4:
    value = options.get("padding")
    if value is None:
        return (default, default, default, default)
    return expand_box(value, field="padding")


def resolve_opacity(value: Any) -> float:
    if value is None:
        return 1.0
    parsed = parse_numeric(value, field="opacity")
    if not isinstance(parsed, float):
        LOGGER.warning("invalid opacity %r; using 1.0", value)
        return 1.0
    if parsed < 0.0 or parsed > 1.0:
        LOGGER.warning("opacity %s outside [0, 1]; clamping", parsed)
    return max(0.0, min(1.0, parsed))


def choose(value: Any, allowed: tuple[str, ...], *, field: str, default: str) -> str:
    """Validate a caller-facing enum; unknown values are a caller error."""

    if value is None:
        return default
    if not isinstance(value, str) or value.strip().lower() not in allowed:
        raise ValueError(f"`{field}` must be one of {', '.join(allowed)}, got {value!r}")
    return value.strip().lower()


def normalize_align(value: Any) -> TextAlign:
    key = str(value).strip().lower() if value is not None else "left"
    if key not in _ALIGN_ALIASES:
        raise ValueError(f"`align` must be one of {', '.join(sorted(_ALIGN_ALIASES))}, got {value!r}")
    return _ALIGN_ALIASES[key]  # type: ignore[return-value]


def normalize_baseline(value: Any) -> TextBaseline:
    key = str(value).strip().lower() if value is not None else "top"
    if key not in _BASELINE_ALIASES:
        raise ValueError(f"`baseline` must be one of {', '.join(sorted(_BASELINE_ALIASES))}, got {value!r}")
    return _BASELINE_ALIASES[key]  # type: ignore[return-value]


def style_payload(style: ShapeStyle) -> dict[str, Any]:
    """Plain-data view of a style record, used for cache keys."""

    return asdict(style)
