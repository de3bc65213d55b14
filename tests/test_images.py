from __future__ import annotations

import base64
import io
from pathlib import Path
import tempfile
import unittest
from unittest import mock

import numpy as np
from PIL import Image

from drawkit.cache.images import ImageLoader, ImageStore, placeholder_bitmap, prepared_key
from drawkit.cache.render_cache import RenderCache
from drawkit.errors import ImageLoadError


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _png_bytes(size: tuple[int, int] = (3, 2), color: tuple[int, int, int, int] = (255, 0, 0, 255)) -> bytes:
    out = io.BytesIO()
    Image.new("RGBA", size, color).save(out, format="PNG")
    return out.getvalue()


def _red(size: int = 4) -> np.ndarray:
    bitmap = np.zeros((size, size, 4), dtype=np.uint8)
    bitmap[:, :, 0] = 255
    bitmap[:, :, 3] = 255
    return bitmap


class ImageLoaderTests(unittest.IsolatedAsyncioTestCase):
    async def test_decodes_base64_data_url(self) -> None:
        url = "data:image/png;base64," + base64.b64encode(_png_bytes()).decode("ascii")
        bitmap = await ImageLoader().load(url)
        self.assertEqual(bitmap.shape, (2, 3, 4))
        self.assertEqual(bitmap[0, 0].tolist(), [255, 0, 0, 255])

    def test_reads_local_paths(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "pixel.png"
            path.write_bytes(_png_bytes((1, 1), (0, 0, 255, 255)))
            bitmap = ImageLoader().load_sync(str(path))
        self.assertEqual(bitmap.shape, (1, 1, 4))
        self.assertEqual(bitmap[0, 0].tolist(), [0, 0, 255, 255])

    def test_missing_file_and_garbage_raise(self) -> None:
        loader = ImageLoader()
        with self.assertRaises(ImageLoadError):
            loader.load_sync("/definitely/not/here.png")
        with self.assertRaises(ImageLoadError):
            loader.load_sync("data:image/png;base64," + base64.b64encode(b"not an image").decode("ascii"))
        with self.assertRaises(ImageLoadError):
            loader.load_sync("")


class ImageStoreTests(unittest.IsolatedAsyncioTestCase):
    def _failing_loader(self) -> mock.Mock:
        loader = mock.Mock(spec=ImageLoader)
        loader.load = mock.AsyncMock(side_effect=ImageLoadError("https://example.invalid/a.png", "HTTP 404"))
        return loader

    async def test_failed_fetch_yields_placeholder_while_loader_still_raises(self) -> None:
        loader = self._failing_loader()
        store = ImageStore(RenderCache(), loader)

        with self.assertLogs("drawkit.cache.images", level="WARNING"):
            bitmap = await store.get("https://example.invalid/a.png")
        self.assertTrue(np.array_equal(bitmap, placeholder_bitmap()))

        with self.assertRaises(ImageLoadError):
            await loader.load("https://example.invalid/a.png")

    async def test_placeholder_is_retried_after_ttl(self) -> None:
        clock = _FakeClock()
        cache = RenderCache(placeholder_ttl_s=300.0, clock=clock)
        loader = self._failing_loader()
        store = ImageStore(cache, loader)

        with self.assertLogs("drawkit.cache.images", level="WARNING"):
            _, is_placeholder = await store.fetch("https://example.invalid/a.png")
        self.assertTrue(is_placeholder)
        _, is_placeholder = await store.fetch("https://example.invalid/a.png")
        self.assertTrue(is_placeholder)
        self.assertEqual(loader.load.await_count, 1)

        clock.now = 301.0
        with self.assertLogs("drawkit.cache.images", level="WARNING"):
            await store.fetch("https://example.invalid/a.png")
        self.assertEqual(loader.load.await_count, 2)

    async def test_successful_fetch_is_cached(self) -> None:
        loader = mock.Mock(spec=ImageLoader)
        loader.load = mock.AsyncMock(return_value=_red())
        store = ImageStore(RenderCache(), loader)

        first = await store.get("red.png")
        second = await store.get("red.png")

        self.assertIs(first, second)
        self.assertEqual(loader.load.await_count, 1)

    async def test_prepare_resizes_tints_and_fades(self) -> None:
        loader = mock.Mock(spec=ImageLoader)
        loader.load = mock.AsyncMock(return_value=_red())
        cache = RenderCache()
        store = ImageStore(cache, loader)

        key = await store.prepare("red.png", width=2, height=2, tint="#0000ff", opacity=0.5)

        self.assertEqual(key, prepared_key("red.png", width=2, height=2, tint="#0000ff", opacity=0.5))
        self.assertEqual(key, "red.png-2-2-#0000ff-0.5")
        prepared = await store.get(key)
        self.assertEqual(prepared.shape, (2, 2, 4))
        self.assertEqual(prepared[0, 0, :3].tolist(), [0, 0, 255])
        self.assertIn(int(prepared[0, 0, 3]), (127, 128))

        again = await store.prepare("red.png", width=2, height=2, tint="#0000ff", opacity=0.5)
        self.assertEqual(again, key)
        self.assertEqual(loader.load.await_count, 1)


if __name__ == "__main__":
    unittest.main()
