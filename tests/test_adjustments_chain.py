from __future__ import annotations

import unittest

import numpy as np

from core.adjustments import FilterOp, apply_filter_chain, build_filter_chain
from core.constants import FILTER_ORDER
from core.state import Filters


def _solid(rgba: tuple[int, int, int, int], size: int = 4) -> np.ndarray:
    arr = np.zeros((size, size, 4), dtype=np.uint8)
    arr[...] = rgba
    return arr


class FilterChainBuildTests(unittest.TestCase):
    def test_default_filters_build_empty_chain(self) -> None:
        self.assertEqual(build_filter_chain(Filters()), ())

    def test_chain_follows_fixed_order(self) -> None:
        f = Filters(blur=3, cool=10, warm=20, hue=-45, saturation=5, contrast=-5, brightness=50)
        chain = build_filter_chain(f)
        self.assertEqual(tuple(op.name for op in chain), FILTER_ORDER)

    def test_parameters_map_to_native_scale(self) -> None:
        f = Filters(brightness=50, contrast=-25, saturation=-100, hue=90, warm=25, cool=100, blur=4)
        ops = {op.name: op.amount for op in build_filter_chain(f)}
        self.assertAlmostEqual(ops["brightness"], 1.5)
        self.assertAlmostEqual(ops["contrast"], 0.75)
        self.assertAlmostEqual(ops["saturation"], 0.0)
        self.assertAlmostEqual(ops["hue"], 90.0)
        self.assertAlmostEqual(ops["warm"], 0.25)
        self.assertAlmostEqual(ops["cool"], 1.0)
        self.assertAlmostEqual(ops["blur"], 4.0)

    def test_zero_parameters_are_skipped(self) -> None:
        chain = build_filter_chain(Filters(hue=10))
        self.assertEqual(chain, (FilterOp("hue", 10.0),))


class FilterChainApplyTests(unittest.TestCase):
    def test_rejects_non_rgba_arrays(self) -> None:
        with self.assertRaises(ValueError):
            apply_filter_chain(np.zeros((2, 2, 3), dtype=np.uint8), ())

    def test_unknown_op_raises(self) -> None:
        with self.assertRaises(KeyError):
            apply_filter_chain(_solid((1, 2, 3, 255)), (FilterOp("emboss", 1.0),))

    def test_empty_chain_is_identity_copy(self) -> None:
        src = _solid((10, 20, 30, 200))
        out = apply_filter_chain(src, ())
        self.assertTrue(np.array_equal(out, src))
        self.assertIsNot(out, src)

    def test_brightness_scales_channels(self) -> None:
        out = apply_filter_chain(_solid((100, 60, 20, 255)), (FilterOp("brightness", 1.5),))
        self.assertEqual(tuple(out[0, 0]), (150, 90, 30, 255))

    def test_brightness_clips_at_white(self) -> None:
        out = apply_filter_chain(_solid((200, 200, 200, 255)), (FilterOp("brightness", 2.0),))
        self.assertEqual(tuple(out[0, 0, :3]), (255, 255, 255))

    def test_zero_contrast_collapses_to_mid_gray(self) -> None:
        out = apply_filter_chain(_solid((0, 90, 255, 255)), (FilterOp("contrast", 0.0),))
        self.assertEqual(tuple(out[0, 0, :3]), (128, 128, 128))

    def test_zero_saturation_is_grayscale(self) -> None:
        out = apply_filter_chain(_solid((200, 100, 50, 255)), (FilterOp("saturation", 0.0),))
        r, g, b = (int(v) for v in out[0, 0, :3])
        self.assertEqual(r, g)
        self.assertEqual(g, b)

    def test_hue_rotation_keeps_gray(self) -> None:
        out = apply_filter_chain(_solid((100, 100, 100, 255)), (FilterOp("hue", 180.0),))
        self.assertEqual(tuple(out[0, 0, :3]), (100, 100, 100))

    def test_hue_rotation_changes_color(self) -> None:
        out = apply_filter_chain(_solid((255, 0, 0, 255)), (FilterOp("hue", 120.0),))
        r, g, _ = (int(v) for v in out[0, 0, :3])
        self.assertGreater(g, r)

    def test_full_cool_inverts(self) -> None:
        out = apply_filter_chain(_solid((10, 100, 250, 255)), (FilterOp("cool", 1.0),))
        self.assertEqual(tuple(out[0, 0]), (245, 155, 5, 255))

    def test_full_warm_tints_white(self) -> None:
        out = apply_filter_chain(_solid((255, 255, 255, 255)), (FilterOp("warm", 1.0),))
        r, g, b = (int(v) for v in out[0, 0, :3])
        self.assertEqual((r, g), (255, 255))
        self.assertEqual(b, 239)

    def test_color_ops_leave_alpha_alone(self) -> None:
        chain = build_filter_chain(Filters(brightness=40, hue=60, warm=30, cool=20))
        out = apply_filter_chain(_solid((90, 40, 10, 77)), chain)
        self.assertTrue(np.all(out[..., 3] == 77))

    def test_blur_keeps_shape_and_smooths_edges(self) -> None:
        src = np.zeros((16, 16, 4), dtype=np.uint8)
        src[..., 3] = 255
        src[:, 8:, :3] = 255
        out = apply_filter_chain(src, (FilterOp("blur", 2.0),))
        self.assertEqual(out.shape, src.shape)
        self.assertGreater(int(out[8, 7, 0]), 0)
        self.assertLess(int(out[8, 8, 0]), 255)

    def test_blur_does_not_bleed_color_of_transparent_pixels(self) -> None:
        src = np.zeros((16, 16, 4), dtype=np.uint8)
        src[:, :8] = (255, 0, 0, 255)
        src[:, 8:] = (0, 255, 0, 0)
        out = apply_filter_chain(src, (FilterOp("blur", 2.0),))
        edge = out[8, 8]
        self.assertGreater(int(edge[3]), 0)
        self.assertLess(int(edge[3]), 255)
        self.assertEqual(int(edge[1]), 0)
        self.assertGreater(int(edge[0]), 240)

    def test_blur_of_opaque_solid_is_unchanged(self) -> None:
        src = _solid((90, 40, 10, 255), size=8)
        out = apply_filter_chain(src, (FilterOp("blur", 3.0),))
        self.assertTrue(np.array_equal(out, src))

    def test_order_matters(self) -> None:
        src = _solid((200, 120, 40, 255))
        a = apply_filter_chain(src, (FilterOp("brightness", 1.5), FilterOp("cool", 0.5)))
        b = apply_filter_chain(src, (FilterOp("cool", 0.5), FilterOp("brightness", 1.5)))
        self.assertFalse(np.array_equal(a, b))

    def test_warm_and_cool_together_apply_in_sequence(self) -> None:
        src = _solid((120, 80, 40, 255))
        both = apply_filter_chain(src, build_filter_chain(Filters(warm=50, cool=50)))
        staged = apply_filter_chain(
            apply_filter_chain(src, (FilterOp("warm", 0.5),)),
            (FilterOp("cool", 0.5),),
        )
        self.assertLessEqual(int(np.max(np.abs(both.astype(int) - staged.astype(int)))), 1)


if __name__ == "__main__":
    unittest.main()
