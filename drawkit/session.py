from __future__ import annotations

import asyncio
import logging
from typing import Any

import numpy as np
from PIL import Image

from drawkit.cache.images import ImageLoader, ImageStore
from drawkit.cache.render_cache import RenderCache
from drawkit.config import DEFAULT_CONFIG, DrawkitConfig
from drawkit.geometry import GeometryDescriptor
from drawkit.raster.canvas import new_canvas
from drawkit.raster.encode import encode_bitmap, validate_mime_type
from drawkit.shapes import draw_button, draw_circle, draw_line, draw_rect, draw_text, draw_triangle
from drawkit.style.colors import TRANSPARENT, parse_color


LOGGER = logging.getLogger(__name__)


class DrawSession:
    """One drawing surface plus the state its draw calls share.

    The render cache may be shared between sessions; the last reference is
    per session and is what `reference="auto"` resolves to.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        cache: RenderCache | None = None,
        loader: ImageLoader | None = None,
        config: DrawkitConfig | None = None,
        background: str | None = None,
    ) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError("DrawSession width/height must be > 0")
        self.config = config or DEFAULT_CONFIG
        self.cache = cache or RenderCache(
            wipe_interval_s=self.config.cache_wipe_interval_s,
            placeholder_ttl_s=self.config.placeholder_ttl_s,
        )
        self.images = ImageStore(self.cache, loader or ImageLoader(timeout_s=self.config.fetch_timeout_s))
        fill = parse_color(background) if background else TRANSPARENT
        self.canvas: np.ndarray = new_canvas(int(width), int(height), fill)
        self._last_reference: GeometryDescriptor | None = None

    @property
    def width(self) -> int:
        return int(self.canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self.canvas.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def last_reference(self) -> GeometryDescriptor | None:
        return self._last_reference

    def remember(self, descriptor: GeometryDescriptor) -> None:
        self._last_reference = descriptor

    def reset_reference(self) -> None:
        self._last_reference = None

    async def draw_rect(self, **options: Any) -> GeometryDescriptor:
        return await draw_rect(self, **options)

    async def draw_circle(self, **options: Any) -> GeometryDescriptor:
        return await draw_circle(self, **options)

    async def draw_triangle(self, **options: Any) -> GeometryDescriptor:
        return await draw_triangle(self, **options)

    async def draw_line(self, **options: Any) -> GeometryDescriptor:
        return await draw_line(self, **options)

    async def draw_text(self, **options: Any) -> GeometryDescriptor:
        return await draw_text(self, **options)

    async def draw_button(self, **options: Any) -> GeometryDescriptor:
        return await draw_button(self, **options)

    async def prepare_image(
        self,
        url: str,
        *,
        width: int | None = None,
        height: int | None = None,
        tint: str | None = None,
        opacity: float = 1.0,
    ) -> str:
        """Cache a resized/tinted copy of an image; pass the returned key as an image url."""

        return await self.images.prepare(url, width=width, height=height, tint=tint, opacity=opacity)

    async def encode(self, mime_type: str = "image/png", quality: int | None = None) -> bytes:
        validate_mime_type(mime_type)
        if quality is None and mime_type.strip().lower() in ("image/jpeg", "image/webp"):
            quality = self.config.encode_quality
        snapshot = self.canvas.copy()
        data = await asyncio.to_thread(encode_bitmap, snapshot, mime_type, quality)
        LOGGER.debug("encoded %dx%d surface as %s (%d bytes)", self.width, self.height, mime_type, len(data))
        return data

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.canvas.copy(), mode="RGBA")
