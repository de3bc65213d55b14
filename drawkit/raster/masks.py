from __future__ import annotations

from itertools import pairwise
import math
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw


Point = tuple[float, float]
Box4 = tuple[float, float, float, float]


# Outlines.


def rounded_rect_outline(x: float, y: float, width: float, height: float, radii: Box4) -> list[Point]:
    """Closed outline of a rectangle with independent corner radii.

    Radii are (top-left, top-right, bottom-right, bottom-left); a zero radius
    gives a sharp corner. Oversized radii are scaled down together so
    adjacent arcs never overlap.
    """

    if width <= 0 or height <= 0:
        return []
    tl, tr, br, bl = clamp_radii(width, height, radii)
    points: list[Point] = []
    points.extend(_quarter_arc(x + tl, y + tl, tl, 180.0))
    points.extend(_quarter_arc(x + width - tr, y + tr, tr, 270.0))
    points.extend(_quarter_arc(x + width - br, y + height - br, br, 0.0))
    points.extend(_quarter_arc(x + bl, y + height - bl, bl, 90.0))
    return points


def clamp_radii(width: float, height: float, radii: Box4) -> Box4:
    tl, tr, br, bl = (max(0.0, r) for r in radii)
    factor = 1.0
    for total, side in ((tl + tr, width), (bl + br, width), (tl + bl, height), (tr + br, height)):
        if total > side > 0:
            factor = min(factor, side / total)
    return (tl * factor, tr * factor, br * factor, bl * factor)


def circle_outline(cx: float, cy: float, radius: float) -> list[Point]:
    if radius <= 0:
        return []
    steps = max(24, int(math.ceil(2.0 * math.pi * radius / 1.5)))
    return [
        (cx + radius * math.cos(2.0 * math.pi * i / steps), cy + radius * math.sin(2.0 * math.pi * i / steps))
        for i in range(steps)
    ]


def triangle_outline(width: float, height: float, direction: str = "up") -> list[Point]:
    if direction == "down":
        return [(0.0, 0.0), (width, 0.0), (width / 2.0, height)]
    if direction == "left":
        return [(width, 0.0), (width, height), (0.0, height / 2.0)]
    if direction == "right":
        return [(0.0, 0.0), (width, height / 2.0), (0.0, height)]
    return [(0.0, height), (width / 2.0, 0.0), (width, height)]


def inset_polygon(points: Sequence[Point], distance: float) -> list[Point]:
    """Offset every edge of a convex polygon inward by `distance`.

    Returns an empty list when the polygon collapses.
    """

    count = len(points)
    if count < 3:
        return []
    if distance <= 0:
        return list(points)
    orientation = 1.0 if _signed_area(points) > 0 else -1.0
    lines: list[tuple[Point, Point]] = []
    for i in range(count):
        (ax, ay), (bx, by) = points[i], points[(i + 1) % count]
        ex, ey = bx - ax, by - ay
        length = math.hypot(ex, ey)
        if length <= 1e-9:
            continue
        nx, ny = (-ey / length * orientation, ex / length * orientation)
        lines.append(((ax + nx * distance, ay + ny * distance), (ex, ey)))
    out: list[Point] = []
    for i in range(len(lines)):
        prev_line = lines[i - 1]
        cur_line = lines[i]
        out.append(_intersect(prev_line, cur_line))
    if _signed_area(out) * orientation <= 0:
        return []
    return out


# Coverage masks.


def fill_mask(points: Sequence[Point], width: int, height: int, supersample: int = 4) -> np.ndarray:
    """Anti-aliased 0..1 coverage of a closed polygon on a (height, width) grid."""

    if len(points) < 3:
        return np.zeros((height, width), dtype=np.float32)
    image, draw = _scratch(width, height, supersample)
    draw.polygon(_scale(points, supersample), fill=255)
    return _downsample(image, width, height)


def ring_mask(outer: Sequence[Point], inner: Sequence[Point], width: int, height: int, supersample: int = 4) -> np.ndarray:
    """Solid stroke coverage: the band between an outline and its inset."""

    outer_mask = fill_mask(outer, width, height, supersample)
    if len(inner) < 3:
        return outer_mask
    return np.clip(outer_mask - fill_mask(inner, width, height, supersample), 0.0, 1.0)


def polyline_mask(
    paths: Sequence[Sequence[Point]],
    line_width: float,
    width: int,
    height: int,
    supersample: int = 4,
) -> np.ndarray:
    image, draw = _scratch(width, height, supersample)
    stroke = max(1, int(round(line_width * supersample)))
    for path in paths:
        if len(path) < 2:
            continue
        draw.line(_scale(path, supersample), fill=255, width=stroke, joint="curve")
    return _downsample(image, width, height)


def segment_mask(
    start: Point,
    end: Point,
    line_width: float,
    cap: str,
    width: int,
    height: int,
    supersample: int = 4,
) -> np.ndarray:
    """Coverage of a single thick segment with butt, square or round caps."""

    image, draw = _scratch(width, height, supersample)
    (x0, y0), (x1, y1) = start, end
    half = line_width / 2.0
    dx, dy = x1 - x0, y1 - y0
    length = math.hypot(dx, dy)
    if length <= 1e-9:
        ux, uy = 1.0, 0.0
    else:
        ux, uy = dx / length, dy / length
    if cap == "square":
        x0, y0 = x0 - ux * half, y0 - uy * half
        x1, y1 = x1 + ux * half, y1 + uy * half
    nx, ny = -uy * half, ux * half
    quad = [(x0 + nx, y0 + ny), (x1 + nx, y1 + ny), (x1 - nx, y1 - ny), (x0 - nx, y0 - ny)]
    if length > 1e-9 or cap != "butt":
        draw.polygon(_scale(quad, supersample), fill=255)
    if cap == "round":
        for cx, cy in (start, end):
            draw.ellipse(
                [
                    (cx - half) * supersample - 0.5,
                    (cy - half) * supersample - 0.5,
                    (cx + half) * supersample - 0.5,
                    (cy + half) * supersample - 0.5,
                ],
                fill=255,
            )
    return _downsample(image, width, height)


def dash_segments(points: Sequence[Point], dash: tuple[float, float], closed: bool = True) -> list[list[Point]]:
    """Split a path into the `on` pieces of an (on, off) dash pattern."""

    on, off = dash
    if on <= 0 or len(points) < 2:
        return [list(points)]
    path = list(points) + [points[0]] if closed else list(points)
    segments: list[list[Point]] = []
    drawing = True
    remaining = on
    current: list[Point] = [path[0]]
    for a, b in pairwise(path):
        seg = math.hypot(b[0] - a[0], b[1] - a[1])
        if seg <= 1e-9:
            continue
        t = 0.0
        while seg - t > remaining:
            t += remaining
            p = (a[0] + (b[0] - a[0]) * t / seg, a[1] + (b[1] - a[1]) * t / seg)
            if drawing:
                current.append(p)
                segments.append(current)
                current = []
                drawing = False
                remaining = off
            else:
                current = [p]
                drawing = True
                remaining = on
        remaining -= seg - t
        if drawing:
            current.append(b)
    if drawing and len(current) >= 2:
        segments.append(current)
    return segments


def _quarter_arc(cx: float, cy: float, radius: float, start_deg: float) -> list[Point]:
    if radius <= 1e-9:
        # Sharp corner: the arc center is the corner itself.
        return [(cx, cy)]
    steps = max(2, min(64, int(math.ceil(radius / 1.5))))
    return [
        (
            cx + radius * math.cos(math.radians(start_deg + 90.0 * i / steps)),
            cy + radius * math.sin(math.radians(start_deg + 90.0 * i / steps)),
        )
        for i in range(steps + 1)
    ]


def _signed_area(points: Sequence[Point]) -> float:
    total = 0.0
    for (ax, ay), (bx, by) in zip(points, list(points[1:]) + [points[0]], strict=True):
        total += ax * by - bx * ay
    return total / 2.0


def _intersect(first: tuple[Point, Point], second: tuple[Point, Point]) -> Point:
    (px, py), (rx, ry) = first
    (qx, qy), (sx, sy) = second
    denom = rx * sy - ry * sx
    if abs(denom) <= 1e-12:
        return (qx, qy)
    t = ((qx - px) * sy - (qy - py) * sx) / denom
    return (px + rx * t, py + ry * t)


def _scratch(width: int, height: int, supersample: int) -> tuple[Image.Image, ImageDraw.ImageDraw]:
    image = Image.new("L", (max(1, width * supersample), max(1, height * supersample)), 0)
    return image, ImageDraw.Draw(image)


def _scale(points: Sequence[Point], supersample: int) -> list[tuple[float, float]]:
    return [(x * supersample - 0.5, y * supersample - 0.5) for x, y in points]


def _downsample(image: Image.Image, width: int, height: int) -> np.ndarray:
    if image.size != (width, height):
        image = image.resize((width, height), Image.Resampling.BOX)
    return np.asarray(image, dtype=np.float32) / 255.0
