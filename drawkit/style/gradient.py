from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Mapping, Sequence

import numpy as np

from drawkit.errors import GradientError
from drawkit.style.colors import parse_color


Point = tuple[float, float]


@dataclass(frozen=True)
class ColorStop:
    offset: float
    color: str


@dataclass(frozen=True)
class Gradient:
    """Linear gradient; 0 degrees runs top to bottom, angles turn clockwise."""

    angle: float
    stops: tuple[ColorStop, ...]

    def __post_init__(self) -> None:
        if not self.stops:
            raise GradientError("gradient must have at least one color stop")


def build_gradient(spec: Any) -> Gradient:
    """Normalize any accepted gradient form into ordered color stops.

    Accepted forms: a list of colors, a space separated color string, or a
    mapping with `angle` and either `stops` (`{offset?, color}` items) or
    `colors` (list or space separated string).
    """

    if isinstance(spec, Gradient):
        return spec
    angle = 0.0
    entries: list[tuple[float | None, str]]
    if isinstance(spec, str):
        entries = [(None, c) for c in spec.split()]
    elif isinstance(spec, (list, tuple)):
        entries = [(None, _color_entry(c)) for c in spec]
    elif isinstance(spec, Mapping):
        angle = _angle(spec.get("angle", 0))
        if spec.get("stops") is not None:
            entries = [_stop_entry(stop) for stop in spec["stops"]]
        elif spec.get("colors") is not None:
            colors = spec["colors"]
            if isinstance(colors, str):
                colors = colors.split()
            entries = [(None, _color_entry(c)) for c in colors]
        else:
            entries = []
    else:
        raise GradientError(f"unsupported gradient spec: {spec!r}")

    if not entries:
        raise GradientError(f"gradient spec resolved to zero color stops: {spec!r}")
    return Gradient(angle=angle, stops=_distribute(entries))


def gradient_endpoints(angle: float, cx: float, cy: float, half_w: float, half_h: float) -> tuple[Point, Point]:
    """Rotate the vertical axis through (cx, cy) by `angle` degrees.

    Each endpoint sits one half-extent from the center, on opposite sides.
    """

    rad = math.radians(angle)
    start = (cx + half_w * math.cos(rad - math.pi / 2), cy + half_h * math.sin(rad - math.pi / 2))
    end = (cx + half_w * math.cos(rad + math.pi / 2), cy + half_h * math.sin(rad + math.pi / 2))
    return start, end


def box_endpoints(gradient: Gradient, width: float, height: float) -> tuple[Point, Point]:
    return gradient_endpoints(gradient.angle, width / 2.0, height / 2.0, width / 2.0, height / 2.0)


def render_gradient(gradient: Gradient, width: int, height: int, start: Point, end: Point) -> np.ndarray:
    """Paint a (height, width, 4) float32 RGBA array along start -> end."""

    colors = np.asarray([parse_color(stop.color) for stop in gradient.stops], dtype=np.float32)
    if len(gradient.stops) == 1:
        out = np.empty((height, width, 4), dtype=np.float32)
        out[:, :] = colors[0]
        return out

    offsets = np.asarray([stop.offset for stop in gradient.stops], dtype=np.float32)
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    if length_sq <= 1e-12:
        t = np.zeros((height, width), dtype=np.float32)
    else:
        t = ((xs + 0.5 - start[0]) * dx + (ys + 0.5 - start[1]) * dy) / length_sq
        t = np.clip(t, 0.0, 1.0)

    out = np.empty((height, width, 4), dtype=np.float32)
    for channel in range(4):
        out[:, :, channel] = np.interp(t, offsets, colors[:, channel])
    return out


def _distribute(entries: Sequence[tuple[float | None, str]]) -> tuple[ColorStop, ...]:
    count = len(entries)
    stops: list[ColorStop] = []
    for index, (offset, color) in enumerate(entries):
        if offset is None:
            offset = index / (count - 1) if count > 1 else 0.0
        stops.append(ColorStop(offset=max(0.0, min(1.0, float(offset))), color=color))
    return tuple(sorted(stops, key=lambda stop: stop.offset))


def _stop_entry(stop: Any) -> tuple[float | None, str]:
    if isinstance(stop, ColorStop):
        return (stop.offset, stop.color)
    if isinstance(stop, str):
        return (None, stop)
    if isinstance(stop, Mapping) and "color" in stop:
        offset = stop.get("offset")
        if offset is not None:
            try:
                offset = float(offset)
            except (TypeError, ValueError) as exc:
                raise GradientError(f"invalid stop offset: {offset!r}") from exc
        return (offset, _color_entry(stop["color"]))
    raise GradientError(f"invalid gradient stop: {stop!r}")


def _color_entry(color: Any) -> str:
    if not isinstance(color, str) or not color.strip():
        raise GradientError(f"gradient color must be a non-empty string, got {color!r}")
    return color.strip()


def _angle(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise GradientError(f"invalid gradient angle: {value!r}") from exc
