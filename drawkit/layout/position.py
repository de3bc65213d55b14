from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from drawkit.geometry import (
    CENTER,
    Absolute,
    AxisPosition,
    Centered,
    CenteredRelativeTo,
    GeometryDescriptor,
    ReferenceBox,
    parse_axis,
    parse_reference,
    resolve_reference,
)


TOP_LEFT_ANCHORED = frozenset({"rect", "text", "button"})
CENTER_ANCHORED = frozenset({"circle", "triangle", "line"})


@dataclass(frozen=True)
class PositionRequest:
    """Inputs for one placement; `x`/`y` are resolved numbers or `center`."""

    x: Any = 0.0
    y: Any = 0.0
    width: float | None = None
    height: float | None = None
    radius: float | None = None
    line_width: float | None = None
    reference: Any = None
    last_reference: GeometryDescriptor | None = None


@dataclass(frozen=True)
class ResolvedPosition:
    """Anchor point plus the shape's own bounding size.

    The anchor is the top-left corner for rect-like shapes and the center for
    circles, triangles and lines.
    """

    x: float
    y: float
    width: float
    height: float
    radius: float | None = None
    anchor: Literal["top_left", "center"] = "top_left"

    @property
    def left(self) -> float:
        return self.x if self.anchor == "top_left" else self.x - self.width / 2.0

    @property
    def top(self) -> float:
        return self.y if self.anchor == "top_left" else self.y - self.height / 2.0

    def descriptor(self, kind: str) -> GeometryDescriptor:
        return GeometryDescriptor(
            x=self.left,
            y=self.top,
            width=self.width,
            height=self.height,
            kind=kind,  # type: ignore[arg-type]
            radius=self.radius,
        )


def bounding_size(kind: str, request: PositionRequest) -> tuple[float, float]:
    if kind == "circle":
        diameter = max(0.0, float(request.radius or 0.0)) * 2.0
        return (diameter, diameter)
    width = max(0.0, float(request.width or 0.0))
    height = max(0.0, float(request.height or 0.0))
    if kind == "line":
        pad = max(0.0, float(request.line_width or 0.0)) * 2.0
        return (width + pad, height + pad)
    return (width, height)


def resolve_position(kind: str, request: PositionRequest, surface_size: tuple[int, int]) -> ResolvedPosition:
    """Compute the pixel anchor of a shape from its axis constraints."""

    if kind in TOP_LEFT_ANCHORED:
        anchor: Literal["top_left", "center"] = "top_left"
    elif kind in CENTER_ANCHORED:
        anchor = "center"
    else:
        raise ValueError(f"unknown shape kind: {kind}")

    own_w, own_h = bounding_size(kind, request)
    # Only centered axes consult the reference.
    box: ReferenceBox | None = None
    if _is_centered(request.x) or _is_centered(request.y):
        box = resolve_reference(parse_reference(request.reference), request.last_reference)
    pos_x = _resolve_axis(parse_axis(request.x, box), "x", own_w, float(surface_size[0]), anchor)
    pos_y = _resolve_axis(parse_axis(request.y, box), "y", own_h, float(surface_size[1]), anchor)
    radius = float(request.radius) if kind == "circle" and request.radius is not None else None
    return ResolvedPosition(x=pos_x, y=pos_y, width=own_w, height=own_h, radius=radius, anchor=anchor)


def _is_centered(value: Any) -> bool:
    if isinstance(value, (Centered, CenteredRelativeTo)):
        return True
    return isinstance(value, str) and value.strip().lower() == CENTER


def _resolve_axis(
    position: AxisPosition,
    axis: Literal["x", "y"],
    own_size: float,
    surface_size: float,
    anchor: Literal["top_left", "center"],
) -> float:
    if isinstance(position, Absolute):
        return position.value
    if isinstance(position, Centered):
        return _center_in(0.0, surface_size, own_size, anchor)
    if isinstance(position, CenteredRelativeTo):
        return _center_in_reference(position.box, axis, own_size, anchor)
    raise TypeError(f"unhandled axis position: {position!r}")


def _center_in_reference(
    box: ReferenceBox,
    axis: Literal["x", "y"],
    own_size: float,
    anchor: Literal["top_left", "center"],
) -> float:
    origin = box.origin(axis)
    if origin is None:
        return 0.0
    return _center_in(float(origin), box.extent(axis), own_size, anchor)


def _center_in(origin: float, extent: float, own_size: float, anchor: Literal["top_left", "center"]) -> float:
    if anchor == "top_left":
        return origin + (extent - own_size) / 2.0
    return origin + extent / 2.0
