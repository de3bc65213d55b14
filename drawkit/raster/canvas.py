from __future__ import annotations

import numpy as np

from drawkit.style.colors import RGBA


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 0)) -> np.ndarray:
    canvas = np.zeros((max(1, height), max(1, width), 4), dtype=np.uint8)
    canvas[:, :, 0] = color[0]
    canvas[:, :, 1] = color[1]
    canvas[:, :, 2] = color[2]
    canvas[:, :, 3] = color[3]
    return canvas


def offscreen_size(width: float, height: float) -> tuple[int, int]:
    """Pixel size of an offscreen surface holding a box of the given float size."""

    return (max(1, int(np.ceil(width - 1e-6))), max(1, int(np.ceil(height - 1e-6))))


def blit(dst: np.ndarray, src: np.ndarray, x0: int = 0, y0: int = 0) -> None:
    """Source-over composite `src` onto `dst` with its top-left at (x0, y0)."""

    h, w, _ = src.shape
    dx0 = max(0, x0)
    dy0 = max(0, y0)
    dx1 = min(dst.shape[1], x0 + w)
    dy1 = min(dst.shape[0], y0 + h)
    if dy0 >= dy1 or dx0 >= dx1:
        return

    view = dst[dy0:dy1, dx0:dx1]
    patch = src[dy0 - y0 : dy1 - y0, dx0 - x0 : dx1 - x0]
    composite_over(view, patch.astype(np.float32))


def composite_over(view: np.ndarray, layer: np.ndarray) -> None:
    """In-place straight-alpha source-over of a float32 RGBA layer onto a uint8 view."""

    src_alpha = layer[:, :, 3] / 255.0
    if not np.any(src_alpha > 0):
        return
    dst_rgb = view[:, :, :3].astype(np.float32)
    dst_alpha = view[:, :, 3].astype(np.float32) / 255.0

    out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
    out_rgb_num = layer[:, :, :3] * src_alpha[:, :, None] + dst_rgb * dst_alpha[:, :, None] * (1.0 - src_alpha[:, :, None])
    safe_alpha = np.where(out_alpha > 1e-6, out_alpha, 1.0)
    out_rgb = out_rgb_num / safe_alpha[:, :, None]

    view[:, :, :3] = np.clip(np.rint(out_rgb), 0, 255).astype(np.uint8)
    view[:, :, 3] = np.clip(np.rint(out_alpha * 255.0), 0, 255).astype(np.uint8)


def paint_through_mask(dst: np.ndarray, paint: np.ndarray, coverage: np.ndarray) -> None:
    """Composite a float RGBA paint onto `dst`, weighting its alpha by a 0..1 coverage mask."""

    if not np.any(coverage > 0):
        return
    layer = paint.astype(np.float32, copy=True)
    layer[:, :, 3] = layer[:, :, 3] * coverage
    composite_over(dst, layer)


def apply_opacity(bitmap: np.ndarray, opacity: float) -> np.ndarray:
    if opacity >= 1.0:
        return bitmap
    out = bitmap.copy()
    out[:, :, 3] = np.clip(np.rint(bitmap[:, :, 3].astype(np.float32) * max(0.0, opacity)), 0, 255).astype(np.uint8)
    return out


def solid_paint(color: RGBA, width: int, height: int) -> np.ndarray:
    paint = np.empty((height, width, 4), dtype=np.float32)
    paint[:, :] = np.asarray(color, dtype=np.float32)
    return paint
