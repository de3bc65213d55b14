from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
from pathlib import Path
import urllib.error
import urllib.parse
import urllib.request

import numpy as np
from PIL import Image, UnidentifiedImageError

from drawkit.cache.render_cache import Bitmap, RenderCache
from drawkit.errors import ImageLoadError
from drawkit.raster.paint import resize_bitmap
from drawkit.style.colors import parse_color


LOGGER = logging.getLogger(__name__)

PLACEHOLDER_SIZE = 64
PLACEHOLDER_CELL = 8
USER_AGENT = "drawkit/0.1"


def placeholder_bitmap(size: int = PLACEHOLDER_SIZE) -> Bitmap:
    """Grey checkerboard stand-in for images that failed to load."""

    ys, xs = np.mgrid[0:size, 0:size]
    checker = ((xs // PLACEHOLDER_CELL) + (ys // PLACEHOLDER_CELL)) % 2 == 0
    bitmap = np.empty((size, size, 4), dtype=np.uint8)
    bitmap[:, :, :3] = np.where(checker[:, :, None], 204, 153).astype(np.uint8)
    bitmap[:, :, 3] = 255
    return bitmap


class ImageLoader:
    """Fetches and decodes images from http(s) URLs, `data:` URLs or local paths."""

    def __init__(self, timeout_s: float = 10.0) -> None:
        if timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        self._timeout_s = timeout_s

    async def load(self, url: str) -> Bitmap:
        return await asyncio.to_thread(self.load_sync, url)

    def load_sync(self, url: str) -> Bitmap:
        if not isinstance(url, str) or not url.strip():
            raise ImageLoadError(str(url), "image url must be a non-empty string")
        data = self._read_bytes(url.strip())
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                rgba = image.convert("RGBA")
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageLoadError(url, f"could not decode image: {exc}") from exc
        return np.array(rgba, dtype=np.uint8)

    def _read_bytes(self, url: str) -> bytes:
        scheme = urllib.parse.urlsplit(url).scheme.lower()
        if scheme in ("http", "https"):
            req = urllib.request.Request(url=url, headers={"User-Agent": USER_AGENT}, method="GET")
            try:
                with urllib.request.urlopen(req, timeout=self._timeout_s) as resp:
                    return resp.read()
            except urllib.error.HTTPError as exc:
                raise ImageLoadError(url, f"HTTP {exc.code}") from exc
            except (urllib.error.URLError, TimeoutError, OSError) as exc:
                raise ImageLoadError(url, str(exc)) from exc
        if scheme == "data":
            return _decode_data_url(url)
        path = Path(urllib.parse.unquote(urllib.parse.urlsplit(url).path)) if scheme == "file" else Path(url)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ImageLoadError(url, str(exc)) from exc


class ImageStore:
    """Fetched-image partition of a RenderCache.

    Failed fetches are replaced by a placeholder stored with a short expiry, so
    a later call retries once it ages out.
    """

    def __init__(self, cache: RenderCache, loader: ImageLoader | None = None) -> None:
        self._cache = cache
        self._loader = loader or ImageLoader()

    @property
    def loader(self) -> ImageLoader:
        return self._loader

    async def get(self, url: str, key: str | None = None) -> Bitmap:
        bitmap, _ = await self.fetch(url, key)
        return bitmap

    async def prepare(
        self,
        url: str,
        *,
        width: int | None = None,
        height: int | None = None,
        tint: str | None = None,
        opacity: float = 1.0,
    ) -> str:
        """Resize/tint/fade an image once and cache it; returns its cache key."""

        key = prepared_key(url, width=width, height=height, tint=tint, opacity=opacity)
        if self._cache.contains("images", key):
            return key
        source, is_placeholder = await self.fetch(url)
        bitmap = resize_bitmap(source, int(width or source.shape[1]), int(height or source.shape[0]))
        bitmap = bitmap.copy()
        if tint is not None:
            r, g, b, a = parse_color(tint)
            bitmap[:, :, 0] = r
            bitmap[:, :, 1] = g
            bitmap[:, :, 2] = b
            bitmap[:, :, 3] = np.rint(bitmap[:, :, 3].astype(np.float32) * (a / 255.0)).astype(np.uint8)
        if opacity < 1.0:
            alpha = bitmap[:, :, 3].astype(np.float32) * max(0.0, opacity)
            bitmap[:, :, 3] = np.clip(np.rint(alpha), 0, 255).astype(np.uint8)
        if is_placeholder:
            self._cache.put_placeholder(key, bitmap)
        else:
            self._cache.put("images", key, bitmap)
        return key

    async def fetch(self, url: str, key: str | None = None) -> tuple[Bitmap, bool]:
        """Return `(bitmap, is_placeholder)` for `url`, loading it on a miss."""

        key = key or url
        entry = self._cache.get_entry("images", key)
        if entry is not None:
            return entry.value, entry.placeholder
        try:
            bitmap = await self._loader.load(url)
        except ImageLoadError as exc:
            LOGGER.warning("failed to load image (%s): %s", key, exc.reason)
            placeholder = placeholder_bitmap()
            self._cache.put_placeholder(key, placeholder)
            return placeholder, True
        self._cache.put("images", key, bitmap)
        return bitmap, False


def prepared_key(
    url: str,
    *,
    width: int | None = None,
    height: int | None = None,
    tint: str | None = None,
    opacity: float = 1.0,
) -> str:
    return f"{url}-{width}-{height}-{tint}-{opacity:g}"


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise ImageLoadError(url[:48], "malformed data url")
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload, validate=True)
        return urllib.parse.unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as exc:
        raise ImageLoadError(url[:48], f"malformed data url: {exc}") from exc
