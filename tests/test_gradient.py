from __future__ import annotations

import unittest

import numpy as np

from drawkit.errors import GradientError
from drawkit.style.gradient import ColorStop, box_endpoints, build_gradient, gradient_endpoints, render_gradient


class GradientBuilderTests(unittest.TestCase):
    def test_color_list_spreads_offsets_evenly(self) -> None:
        gradient = build_gradient(["red", "green", "blue"])
        self.assertEqual(gradient.angle, 0.0)
        self.assertEqual([stop.offset for stop in gradient.stops], [0.0, 0.5, 1.0])
        self.assertEqual([stop.color for stop in gradient.stops], ["red", "green", "blue"])

    def test_space_separated_string_and_colors_mapping(self) -> None:
        self.assertEqual(build_gradient("red blue"), build_gradient({"colors": ["red", "blue"]}))
        self.assertEqual(build_gradient({"angle": 45, "colors": "red blue"}).angle, 45.0)

    def test_explicit_stops_are_clamped_and_sorted(self) -> None:
        gradient = build_gradient(
            {
                "angle": "90",
                "stops": [{"offset": 1.5, "color": "blue"}, {"offset": 0.25, "color": "red"}],
            }
        )
        self.assertEqual(gradient.angle, 90.0)
        self.assertEqual(gradient.stops, (ColorStop(0.25, "red"), ColorStop(1.0, "blue")))

    def test_single_color_is_a_flat_gradient(self) -> None:
        gradient = build_gradient(["#123456"])
        self.assertEqual(gradient.stops, (ColorStop(0.0, "#123456"),))

    def test_zero_stops_raise(self) -> None:
        for spec in ([], "", {"angle": 45}, {"stops": []}):
            with self.subTest(spec=spec):
                with self.assertRaises(GradientError):
                    build_gradient(spec)

    def test_unsupported_spec_raises(self) -> None:
        with self.assertRaises(GradientError):
            build_gradient(42)


class GradientGeometryTests(unittest.TestCase):
    def test_zero_degrees_runs_top_to_bottom(self) -> None:
        start, end = gradient_endpoints(0.0, 50.0, 25.0, 50.0, 25.0)
        self.assertAlmostEqual(start[0], 50.0)
        self.assertAlmostEqual(start[1], 0.0)
        self.assertAlmostEqual(end[0], 50.0)
        self.assertAlmostEqual(end[1], 50.0)

    def test_square_box_endpoints_straddle_the_center(self) -> None:
        start, end = box_endpoints(build_gradient(["red", "blue"]), 80.0, 80.0)
        self.assertAlmostEqual(start[0], end[0])
        self.assertAlmostEqual(40.0 - start[1], end[1] - 40.0)
        self.assertAlmostEqual(end[1] - 40.0, 40.0)

    def test_ninety_degrees_is_horizontal(self) -> None:
        start, end = box_endpoints(build_gradient({"angle": 90, "colors": ["red", "blue"]}), 100.0, 50.0)
        self.assertAlmostEqual(start[0], 100.0)
        self.assertAlmostEqual(start[1], 25.0)
        self.assertAlmostEqual(end[0], 0.0)
        self.assertAlmostEqual(end[1], 25.0)

    def test_two_color_gradient_is_symmetric_about_the_center(self) -> None:
        gradient = build_gradient(["red", "blue"])
        start, end = box_endpoints(gradient, 4.0, 10.0)
        paint = render_gradient(gradient, 4, 10, start, end)

        self.assertEqual(paint.shape, (10, 4, 4))
        self.assertTrue(np.allclose(paint[:, 0, :], paint[:, 3, :]))
        self.assertTrue(np.allclose(paint[::-1, :, 0], paint[:, :, 2], atol=1e-3))
        self.assertGreater(paint[0, 0, 0], paint[0, 0, 2])
        self.assertGreater(paint[-1, 0, 2], paint[-1, 0, 0])
        self.assertTrue(np.allclose(paint[:, :, 3], 255.0))


if __name__ == "__main__":
    unittest.main()
