from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Union


ShapeKind = Literal["rect", "circle", "triangle", "line", "text", "button"]
SHAPE_KINDS: tuple[str, ...] = ("rect", "circle", "triangle", "line", "text", "button")

CENTER = "center"
AUTO = "auto"


@dataclass(frozen=True)
class GeometryDescriptor:
    """Bounding box of a drawn shape; `x, y` is always the top-left corner."""

    x: float
    y: float
    width: float
    height: float
    kind: ShapeKind
    radius: float | None = None

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("GeometryDescriptor width/height must be >= 0")
        if self.kind not in SHAPE_KINDS:
            raise ValueError(f"unknown shape kind: {self.kind}")

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def as_box(self) -> "ReferenceBox":
        return ReferenceBox(x=self.x, y=self.y, width=self.width, height=self.height, radius=self.radius)


@dataclass(frozen=True)
class ReferenceBox:
    """Possibly partial box used as a centering anchor.

    Caller-supplied mappings may omit fields; a missing origin makes the
    corresponding axis resolve to 0.
    """

    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    radius: float | None = None

    def extent(self, axis: Literal["x", "y"]) -> float:
        size = self.width if axis == "x" else self.height
        if size:
            return float(size)
        if self.radius:
            return float(self.radius) * 2.0
        return 0.0

    def origin(self, axis: Literal["x", "y"]) -> float | None:
        return self.x if axis == "x" else self.y


# Reference variants.


@dataclass(frozen=True)
class NoReference:
    pass


@dataclass(frozen=True)
class Reference:
    box: ReferenceBox


@dataclass(frozen=True)
class AutoReference:
    pass


ReferenceSpec = Union[NoReference, Reference, AutoReference]


# Axis position variants.


@dataclass(frozen=True)
class Absolute:
    value: float


@dataclass(frozen=True)
class Centered:
    pass


@dataclass(frozen=True)
class CenteredRelativeTo:
    box: ReferenceBox


AxisPosition = Union[Absolute, Centered, CenteredRelativeTo]


def parse_reference(value: Any) -> ReferenceSpec:
    if value is None:
        return NoReference()
    if isinstance(value, (NoReference, Reference, AutoReference)):
        return value
    if isinstance(value, str):
        if value.strip().lower() == AUTO:
            return AutoReference()
        raise ValueError(f"reference string must be `auto`, got `{value}`")
    if isinstance(value, GeometryDescriptor):
        return Reference(value.as_box())
    if isinstance(value, ReferenceBox):
        return Reference(value)
    if isinstance(value, Mapping):
        return Reference(
            ReferenceBox(
                x=_optional_float(value.get("x")),
                y=_optional_float(value.get("y")),
                width=_optional_float(value.get("width")),
                height=_optional_float(value.get("height")),
                radius=_optional_float(value.get("radius")),
            )
        )
    raise ValueError(f"unsupported reference: {value!r}")


def resolve_reference(spec: ReferenceSpec, last_reference: GeometryDescriptor | None) -> ReferenceBox | None:
    if isinstance(spec, Reference):
        return spec.box
    if isinstance(spec, AutoReference):
        return last_reference.as_box() if last_reference is not None else None
    return None


def parse_axis(value: Any, reference: ReferenceBox | None = None) -> AxisPosition:
    """Turn a resolved axis value into a position variant.

    `value` must already have gone through the style resolver, so it is a
    float or the `center` sentinel.
    """

    if isinstance(value, (Absolute, Centered, CenteredRelativeTo)):
        return value
    if value is None:
        return Absolute(0.0)
    if isinstance(value, str) and value.strip().lower() == CENTER:
        return CenteredRelativeTo(reference) if reference is not None else Centered()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Absolute(float(value))
    raise ValueError(f"axis position must be a number or `center`, got {value!r}")


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
