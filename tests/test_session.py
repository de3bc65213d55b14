from __future__ import annotations

import io
import unittest
from unittest import mock

import numpy as np
from PIL import Image, ImageDraw

from drawkit.cache.images import ImageLoader
from drawkit.cache.render_cache import RenderCache
from drawkit.config import DrawkitConfig
from drawkit.errors import ColorParseError, ImageLoadError, UnsupportedMimeTypeError
from drawkit.geometry import GeometryDescriptor
from drawkit.raster.text import TextMetrics, load_font, measure_text, parse_font
from drawkit.session import DrawSession
from drawkit.shapes.text import measure_segments
from drawkit.style.records import TextSegment


def _failing_loader() -> mock.Mock:
    loader = mock.Mock(spec=ImageLoader)
    loader.load = mock.AsyncMock(side_effect=ImageLoadError("https://example.invalid/x.png", "timed out"))
    return loader


class RectAndCacheTests(unittest.IsolatedAsyncioTestCase):
    async def test_centered_rect_descriptor_and_pixels(self) -> None:
        session = DrawSession(200, 100)
        descriptor = await session.draw_rect(x="center", y="center", width=50, height=50, background_color="red")

        self.assertEqual(descriptor, GeometryDescriptor(75.0, 25.0, 50.0, 50.0, "rect"))
        self.assertEqual(session.canvas[50, 100].tolist(), [255, 0, 0, 255])
        self.assertEqual(int(session.canvas[10, 10, 3]), 0)
        self.assertEqual(session.last_reference, descriptor)

    async def test_second_identical_draw_hits_cache_with_identical_pixels(self) -> None:
        cache = RenderCache()
        first = DrawSession(120, 80, cache=cache)
        second = DrawSession(120, 80, cache=cache)
        options = dict(
            x=10,
            y="10px",
            width=60,
            height=40,
            background_gradient=["#ff0000", "#0000ff"],
            border_color="black",
            border_width=3,
            border_radius="8 0",
        )

        await first.draw_rect(**options)
        with mock.patch("drawkit.shapes.rect.render_filled_shape", side_effect=AssertionError("cache miss")):
            await second.draw_rect(**options)

        self.assertTrue(np.array_equal(first.canvas, second.canvas))
        self.assertEqual(cache.stats().hits, 1)
        self.assertEqual(cache.size("elements"), 1)

    async def test_cache_key_ignores_position(self) -> None:
        session = DrawSession(200, 100)
        await session.draw_rect(x=0, y=0, width=20, height=20, background_color="blue")
        await session.draw_rect(x=100, y=50, width=20, height=20, background_color="blue")
        self.assertEqual(session.cache.size("elements"), 1)
        self.assertEqual(session.canvas[60, 110].tolist(), [0, 0, 255, 255])

    async def test_sessions_with_different_antialiasing_keep_separate_bitmaps(self) -> None:
        cache = RenderCache()
        fine = DrawSession(40, 40, cache=cache, config=DrawkitConfig(supersample=8))
        coarse = DrawSession(40, 40, cache=cache, config=DrawkitConfig(supersample=1))
        unshared = DrawSession(40, 40, config=DrawkitConfig(supersample=1))
        for session in (fine, coarse, unshared):
            await session.draw_circle(x=20, y=20, radius=13.3, background_color="red")

        self.assertEqual(cache.stats().hits, 0)
        self.assertEqual(cache.size("elements"), 2)
        self.assertTrue(np.array_equal(coarse.canvas, unshared.canvas))
        self.assertFalse(np.array_equal(coarse.canvas, fine.canvas))

    async def test_half_pixel_positions_round_up(self) -> None:
        for x, first_col in ((10.5, 11), (11.5, 12)):
            with self.subTest(x=x):
                session = DrawSession(30, 10)
                descriptor = await session.draw_rect(x=x, y=0, width=5, height=5, background_color="black")
                painted = np.nonzero(session.canvas[2, :, 3])[0]
                self.assertEqual(descriptor.x, x)
                self.assertEqual((int(painted[0]), int(painted[-1])), (first_col, first_col + 4))

    async def test_reference_is_ignored_for_absolute_positions(self) -> None:
        session = DrawSession(40, 40)
        descriptor = await session.draw_rect(x=10, y=10, width=5, height=5, background_color="black", reference="previous")
        self.assertEqual((descriptor.x, descriptor.y), (10.0, 10.0))
        with self.assertRaises(ValueError):
            await session.draw_rect(x="center", y=10, width=5, height=5, reference="previous")

    async def test_auto_reference_chains_from_previous_shape(self) -> None:
        session = DrawSession(400, 300)
        await session.draw_rect(x=0, y=0, width=200, height=100, background_color="white")
        inner = await session.draw_rect(x="center", y="center", width=100, height=20, reference="auto")
        self.assertEqual((inner.x, inner.y), (50.0, 40.0))

        session.reset_reference()
        self.assertIsNone(session.last_reference)
        centered = await session.draw_rect(x="center", y="center", width=100, height=20, reference="auto")
        self.assertEqual((centered.x, centered.y), (150.0, 140.0))

    async def test_opacity_is_baked_into_the_bitmap(self) -> None:
        session = DrawSession(10, 10)
        await session.draw_rect(x=0, y=0, width=10, height=10, background_color="red", opacity=0.5)
        self.assertEqual(int(session.canvas[5, 5, 3]), 128)

    async def test_gradient_fill_runs_top_to_bottom(self) -> None:
        session = DrawSession(10, 100)
        await session.draw_rect(x=0, y=0, width=10, height=100, background_gradient=["red", "blue"])
        top = session.canvas[1, 5]
        bottom = session.canvas[98, 5]
        self.assertGreater(int(top[0]), int(top[2]))
        self.assertGreater(int(bottom[2]), int(bottom[0]))

    async def test_dashed_border_leaves_gaps(self) -> None:
        session = DrawSession(100, 20)
        await session.draw_rect(
            x=0,
            y=0,
            width=100,
            height=20,
            border_color="black",
            border_width=2,
            border_style="dashed",
        )
        top_edge = session.canvas[1, 10:90, 3]
        self.assertTrue(np.any(top_edge == 0))
        self.assertTrue(np.any(top_edge > 100))
        self.assertEqual(int(session.canvas[10, 50, 3]), 0)

    async def test_invalid_enum_and_color_raise(self) -> None:
        session = DrawSession(10, 10)
        with self.assertRaises(ValueError):
            await session.draw_rect(width=5, height=5, border_color="black", border_style="wavy")
        with self.assertRaises(ColorParseError):
            await session.draw_rect(width=5, height=5, background_color="blurple")

    async def test_failing_background_image_still_renders_and_is_not_memoized(self) -> None:
        session = DrawSession(40, 40, loader=_failing_loader())
        with self.assertLogs("drawkit.cache.images", level="WARNING"):
            descriptor = await session.draw_rect(
                x=0,
                y=0,
                width=40,
                height=40,
                background_image="https://example.invalid/x.png",
            )
        self.assertEqual(descriptor.width, 40.0)
        self.assertEqual(int(session.canvas[20, 20, 3]), 255)
        self.assertEqual(session.cache.size("elements"), 0)


class OtherShapeTests(unittest.IsolatedAsyncioTestCase):
    async def test_circle_is_center_anchored(self) -> None:
        session = DrawSession(100, 100)
        descriptor = await session.draw_circle(x=50, y=50, radius=10, background_color="blue")

        self.assertEqual(descriptor, GeometryDescriptor(40.0, 40.0, 20.0, 20.0, "circle", radius=10.0))
        self.assertEqual(session.canvas[50, 50].tolist(), [0, 0, 255, 255])
        self.assertEqual(int(session.canvas[40, 40, 3]), 0)

    async def test_circle_centered_in_rect_reference(self) -> None:
        session = DrawSession(300, 300)
        card = await session.draw_rect(x=100, y=100, width=100, height=60)
        dot = await session.draw_circle(x="center", y="center", radius=5, reference=card)
        self.assertEqual((dot.x, dot.y), (145.0, 125.0))

    async def test_triangle_points_up_by_default(self) -> None:
        session = DrawSession(100, 100)
        descriptor = await session.draw_triangle(x=50, y=50, size=20, background_color="green")

        self.assertEqual((descriptor.x, descriptor.y, descriptor.width, descriptor.height), (40.0, 40.0, 20.0, 20.0))
        self.assertEqual(descriptor.kind, "triangle")
        self.assertEqual(int(session.canvas[58, 50, 3]), 255)
        self.assertEqual(int(session.canvas[41, 41, 3]), 0)

    async def test_triangle_direction_is_validated(self) -> None:
        session = DrawSession(10, 10)
        with self.assertRaises(ValueError):
            await session.draw_triangle(size=5, direction="sideways")

    async def test_line_from_midpoint_length_and_angle(self) -> None:
        session = DrawSession(100, 100)
        descriptor = await session.draw_line(x=50, y=50, length=40, line_width=2, line_color="black")

        self.assertEqual((descriptor.x, descriptor.y), (28.0, 48.0))
        self.assertEqual((descriptor.width, descriptor.height), (44.0, 4.0))
        self.assertEqual(int(session.canvas[50, 50, 3]), 255)
        self.assertEqual(int(session.canvas[45, 50, 3]), 0)

    async def test_line_from_endpoints(self) -> None:
        session = DrawSession(100, 100)
        descriptor = await session.draw_line(start_x=10, start_y=10, end_x=30, end_y=10, line_width=2)
        self.assertEqual((descriptor.x, descriptor.width), (8.0, 24.0))
        self.assertEqual(descriptor.kind, "line")

    async def test_text_alignment_and_centering(self) -> None:
        session = DrawSession(300, 100)
        font = "20px sans-serif"
        metrics = measure_text("Hello", parse_font(font))

        left = await session.draw_text(text="Hello", x=10, y=10, font=font, color="black")
        self.assertEqual((left.x, left.y), (10.0, 10.0))
        self.assertAlmostEqual(left.width, metrics.width)
        self.assertAlmostEqual(left.height, metrics.height)
        self.assertTrue(np.any(session.canvas[10:40, 10:80, 3] > 0))

        right = await session.draw_text(text="Hello", x=200, y=10, font=font, align="right")
        self.assertAlmostEqual(right.x + right.width, 200.0)

        centered = await session.draw_text(text="Hello", x="center", y="center", font=font)
        self.assertAlmostEqual(centered.x, (300 - metrics.width) / 2)
        self.assertAlmostEqual(centered.y, (100 - metrics.height) / 2)

        on_baseline = await session.draw_text(text="Hello", x=0, y=50, font=font, baseline="alphabetic")
        self.assertAlmostEqual(on_baseline.y, 50.0 - metrics.ascent)

    async def test_text_segments_accumulate_advance(self) -> None:
        session = DrawSession(300, 100)
        segments = [
            {"text": "Hello, ", "font": "20px sans-serif", "color": "black"},
            {"text": "world", "font": "bold 20px sans-serif", "color": "red"},
        ]
        descriptor = await session.draw_text(segments=segments, x=0, y=0)
        expected = measure_segments(
            [
                TextSegment("Hello, ", "20px sans-serif", "black"),
                TextSegment("world", "bold 20px sans-serif", "red"),
            ]
        )
        self.assertAlmostEqual(descriptor.width, expected.width)

    async def test_overhanging_glyphs_keep_all_their_ink(self) -> None:
        for text, font in (("j", "60px sans-serif"), ("f", "italic 60px serif"), ("W", "italic 60px serif")):
            with self.subTest(text=text, font=font):
                session = DrawSession(200, 120)
                descriptor = await session.draw_text(text=text, x=50, y=20, font=font, color="black")
                spec = parse_font(font)
                metrics = measure_text(text, spec)

                expected = Image.new("L", (200, 120), 0)
                ImageDraw.Draw(expected).text(
                    (50, 20 + metrics.ascent), text, fill=255, font=load_font(spec), anchor="ls"
                )
                expected_ink = np.asarray(expected) > 127
                drawn_ink = session.canvas[:, :, 3] > 127
                self.assertEqual(int(drawn_ink.sum()), int(expected_ink.sum()))
                self.assertTrue(np.array_equal(drawn_ink, expected_ink))
                self.assertAlmostEqual(descriptor.width, metrics.width)

    def test_segment_ink_extent_covers_overhangs(self) -> None:
        overhang = TextMetrics(width=10.0, ascent=8.0, descent=2.0, ink_left=-2.0, ink_right=13.0)
        runs = [TextSegment("a", "10px serif", "black"), TextSegment("b", "10px serif", "black")]
        with mock.patch("drawkit.shapes.text.measure_text", return_value=overhang):
            metrics = measure_segments(runs)
        self.assertEqual((metrics.width, metrics.ink_left, metrics.ink_right), (20.0, -2.0, 23.0))
        self.assertEqual(metrics.height, 10.0)

    async def test_button_wraps_text_with_padding(self) -> None:
        session = DrawSession(300, 100)
        metrics = measure_text("OK", parse_font("20px sans-serif"))
        descriptor = await session.draw_button(
            x=0,
            y=0,
            text="OK",
            font="20px sans-serif",
            padding=10,
            background_color="#18181b",
            color="white",
        )
        self.assertEqual(descriptor.kind, "button")
        self.assertAlmostEqual(descriptor.width, metrics.width + 20.0)
        self.assertAlmostEqual(descriptor.height, metrics.height + 20.0)

    async def test_button_fixed_size_adds_padding(self) -> None:
        session = DrawSession(300, 100)
        descriptor = await session.draw_button(x="center", y=0, width=100, height=40, padding="5 10", text="Go")
        self.assertEqual((descriptor.width, descriptor.height), (120.0, 50.0))
        self.assertEqual(descriptor.x, 90.0)

    async def test_button_with_failing_icon_uses_placeholder_size(self) -> None:
        session = DrawSession(400, 200, loader=_failing_loader())
        metrics = measure_text("Save", parse_font("20px sans-serif"))
        with self.assertLogs("drawkit.cache.images", level="WARNING"):
            descriptor = await session.draw_button(
                x=0,
                y=0,
                text="Save",
                font="20px sans-serif",
                icon_url="https://example.invalid/x.png",
                padding=0,
            )
        self.assertAlmostEqual(descriptor.width, metrics.width + 64.0 + 10.0)
        self.assertAlmostEqual(descriptor.height, max(64.0, metrics.height))
        self.assertEqual(session.cache.size("elements"), 0)


class EncodeTests(unittest.IsolatedAsyncioTestCase):
    async def test_encode_png_and_reject_gif(self) -> None:
        session = DrawSession(16, 8, background="white")
        data = await session.encode("image/png")
        with Image.open(io.BytesIO(data)) as decoded:
            self.assertEqual(decoded.size, (16, 8))
            self.assertEqual(decoded.getpixel((0, 0)), (255, 255, 255, 255))

        with self.assertRaises(UnsupportedMimeTypeError):
            await session.encode("image/gif")

    async def test_prepared_image_key_works_as_background(self) -> None:
        loader = mock.Mock(spec=ImageLoader)
        source = np.zeros((8, 8, 4), dtype=np.uint8)
        source[:, :, 3] = 255
        loader.load = mock.AsyncMock(return_value=source)
        session = DrawSession(20, 20, loader=loader)

        key = await session.prepare_image("dot.png", width=4, height=4, tint="lime")
        await session.draw_rect(x=0, y=0, width=20, height=20, background_image=key)

        self.assertEqual(session.canvas[10, 10].tolist(), [0, 255, 0, 255])
        self.assertEqual(loader.load.await_count, 1)

    def test_to_pil_and_size(self) -> None:
        session = DrawSession(12, 7)
        self.assertEqual(session.size, (12, 7))
        self.assertEqual(session.to_pil().size, (12, 7))
        with self.assertRaises(ValueError):
            DrawSession(0, 10)


if __name__ == "__main__":
    unittest.main()
