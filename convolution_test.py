#!/usr/bin/env python3
"""
Tests for the convolution engine.

Unless a test says otherwise the symmetric [-c, c] tap window is used;
half_open=True selects the [-c, c) window and is checked
separately.
"""
import unittest
import numpy as np
from convolution import convolve, convolve_1d, convolve_2d_normalized, convolve_2d_raw
from errors import InvalidParameter
from kernels import (KERNEL_EDGE, KERNEL_SHARPEN, generate_flat_kernel,
                     generate_gaussian_kernel_1d, generate_gaussian_kernel_2d)
from pixels import Image


def solid(width, height, rgb):
    pixels = np.empty((height, width, 3), dtype=np.uint8)
    pixels[:] = rgb
    return Image(pixels)


def noise(width, height, seed=0):
    rng = np.random.default_rng(seed)
    return Image(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))


def border_is_black(pixels, c):
    h, w = pixels.shape[:2]
    mask = np.ones((h, w), dtype=bool)
    mask[c:h-c, c:w-c] = False
    return not pixels[mask].any()


class NormalizedTestCase(unittest.TestCase):
    def test_radius_zero_is_identity(self):
        img = noise(6, 5)
        out = convolve(img, generate_flat_kernel(0))
        np.testing.assert_array_equal(out.pixels, img.pixels)

    def test_white_image_flat_kernel(self):
        img = solid(5, 5, (255, 255, 255))
        for half_open in (False, True):
            out = convolve_2d_normalized(img, generate_flat_kernel(1), half_open=half_open)
            self.assertEqual(out.pixels.shape, (5, 5, 3))
            self.assertTrue(np.all(out.pixels[1:4, 1:4] == 255), half_open)
            self.assertTrue(border_is_black(out.pixels, 1), half_open)

    def test_rounds_up(self):
        img = solid(3, 3, (0, 0, 0))
        img.pixels[0, 0] = (10, 10, 10)
        img.pixels[2, 2] = (0, 8, 9)
        out = convolve(img, generate_flat_kernel(1))
        # 10/9, 18/9, 19/9
        np.testing.assert_array_equal(out.pixels[1, 1], [2, 2, 3])

    def test_wraps_instead_of_clamping(self):
        img = solid(3, 3, (0, 0, 0))
        img.pixels[1, 1] = (255, 255, 255)
        out = convolve(img, KERNEL_SHARPEN)
        # 5 * 255 = 1275 -> low 8 bits
        np.testing.assert_array_equal(out.pixels[1, 1], [251, 251, 251])

        img = solid(3, 3, (100, 100, 100))
        img.pixels[1, 1] = (0, 0, 0)
        out = convolve(img, KERNEL_SHARPEN)
        # -400 -> low 8 bits
        np.testing.assert_array_equal(out.pixels[1, 1], [112, 112, 112])

    def test_zero_weight_sum_is_not_divided(self):
        img = solid(3, 3, (10, 10, 10))
        img.pixels[1, 1] = (20, 20, 20)
        out = convolve(img, KERNEL_EDGE)
        np.testing.assert_array_equal(out.pixels[1, 1], [80, 80, 80])

    def test_first_kernel_index_is_x(self):
        kernel = np.zeros((3, 3), dtype=int)
        kernel[2][1] = 1  # one column to the right
        img = solid(3, 3, (0, 0, 0))
        img.pixels[1, 2] = (90, 45, 5)
        out = convolve(img, kernel)
        np.testing.assert_array_equal(out.pixels[1, 1], [90, 45, 5])

    def test_half_open_window(self):
        img = noise(5, 5)
        out = convolve_2d_normalized(img, generate_flat_kernel(1), half_open=True)
        # taps {-1, 0} on each axis: the 2x2 block up and left of each pixel
        src = img.pixels.astype(int)
        block = src[0:3, 0:3] + src[0:3, 1:4] + src[1:4, 0:3] + src[1:4, 1:4]
        np.testing.assert_array_equal(out.pixels[1:4, 1:4], -(-block // 4))
        self.assertTrue(border_is_black(out.pixels, 1))

        # the +1 column is never visited, so only zero weights are summed
        kernel = np.zeros((3, 3), dtype=int)
        kernel[2][1] = 1
        out = convolve(img, kernel, half_open=True)
        self.assertFalse(out.pixels.any())

    def test_half_open_sharpen(self):
        # visited weights 0, -1, -1, 5 sum to 3
        img = solid(3, 3, (0, 0, 0))
        img.pixels[1, 1] = (30, 60, 90)
        img.pixels[2, 2] = (200, 200, 200)
        out = convolve(img, KERNEL_SHARPEN, half_open=True)
        np.testing.assert_array_equal(out.pixels[1, 1], [50, 100, 150])

    def test_half_open_radius_zero_visits_nothing(self):
        out = convolve(noise(4, 4), generate_flat_kernel(0), half_open=True)
        self.assertFalse(out.pixels.any())

    def test_rejects_float_kernel(self):
        with self.assertRaises(InvalidParameter):
            convolve_2d_normalized(noise(3, 3), np.ones((3, 3)))


class RawTestCase(unittest.TestCase):
    def test_truncates_every_step(self):
        img = solid(3, 3, (1, 1, 1))
        out = convolve_2d_raw(img, np.full((3, 3), 0.3))
        # a single truncation of the 2.7 total would give 2
        np.testing.assert_array_equal(out.pixels[1, 1], [0, 0, 0])

    def test_truncates_toward_zero(self):
        kernel = np.zeros((3, 3))
        kernel[1][1] = -0.5
        out = convolve_2d_raw(solid(3, 3, (1, 1, 1)), kernel)
        # floor would give -1, i.e. 255 after masking
        np.testing.assert_array_equal(out.pixels[1, 1], [0, 0, 0])

    def test_no_division_and_wrap(self):
        out = convolve_2d_raw(solid(3, 3, (100, 100, 100)), np.full((3, 3), 0.5))
        # 9 * 50 = 450 -> low 8 bits
        np.testing.assert_array_equal(out.pixels[1, 1], [194, 194, 194])

    def test_gaussian_stays_in_bounds(self):
        img = noise(7, 6)
        out = convolve(img, generate_gaussian_kernel_2d(1.0, 2))
        self.assertEqual(out.pixels.shape, img.pixels.shape)
        self.assertTrue(border_is_black(out.pixels, 2))
        self.assertTrue(out.pixels[2:4, 2:5].any())


class SeparableTestCase(unittest.TestCase):
    def test_passes_read_the_source(self):
        img = noise(5, 5)
        src = img.pixels
        out = convolve_1d(img, np.array([1.0, 0.0, 0.0]))

        expected = np.zeros_like(src)
        expected[:, 1:4] = src[:, 0:3]  # horizontal, x-1
        expected[1:4, :] = src[0:3, :]  # vertical wins, y-1
        np.testing.assert_array_equal(out.pixels, expected)

    def test_compose(self):
        img = noise(5, 5)
        src = img.pixels
        out = convolve_1d(img, np.array([1.0, 0.0, 0.0]), compose=True)

        horizontal = np.zeros_like(src)
        horizontal[:, 1:4] = src[:, 0:3]
        expected = horizontal.copy()
        expected[1:4, :] = horizontal[0:3, :]
        np.testing.assert_array_equal(out.pixels, expected)

    def test_unit_kernel_leaves_only_corners_black(self):
        img = noise(5, 4)
        out = convolve(img, np.array([0.0, 1.0, 0.0]))
        expected = img.pixels.copy()
        for y in (0, 3):
            for x in (0, 4):
                expected[y, x] = 0
        np.testing.assert_array_equal(out.pixels, expected)

    def test_half_open_window(self):
        img = noise(5, 5)
        # tap 0 is visited: same result as the symmetric window
        out = convolve(img, np.array([0.0, 1.0, 0.0]), half_open=True)
        expected = img.pixels.copy()
        for y in (0, 4):
            for x in (0, 4):
                expected[y, x] = 0
        np.testing.assert_array_equal(out.pixels, expected)

        # tap +1 is skipped, so nothing is accumulated
        out = convolve(img, np.array([0.0, 0.0, 1.0]), half_open=True)
        self.assertFalse(out.pixels.any())
        out = convolve(img, np.array([0.0, 0.0, 1.0]))
        np.testing.assert_array_equal(out.pixels[1:4, 0], img.pixels[2:5, 0])

    def test_gaussian(self):
        img = solid(9, 9, (100, 100, 100))
        kernel = generate_gaussian_kernel_1d(1.0)
        out = convolve(img, kernel)
        # unnormalised weights sum to just under 1; per-step truncation drops more
        self.assertTrue(np.all(out.pixels[3:6, 3:6] <= 100))
        self.assertTrue(np.all(out.pixels[3:6, 3:6] > 90))


class EngineTestCase(unittest.TestCase):
    def test_source_is_not_modified(self):
        img = noise(6, 6)
        before = img.pixels.copy()
        convolve(img, KERNEL_SHARPEN)
        convolve(img, generate_gaussian_kernel_2d(1.0, 1))
        convolve(img, generate_gaussian_kernel_1d(1.0), compose=True)
        np.testing.assert_array_equal(img.pixels, before)

    def test_kernel_larger_than_image(self):
        img = noise(2, 2)
        for kernel in (generate_flat_kernel(1), generate_gaussian_kernel_2d(1.0, 2),
                       generate_gaussian_kernel_1d(1.0, 2)):
            out = convolve(img, kernel)
            self.assertEqual(out.pixels.shape, (2, 2, 3))
            self.assertFalse(out.pixels.any())

    def test_dispatch(self):
        img = noise(7, 7)
        np.testing.assert_array_equal(
            convolve(img, KERNEL_SHARPEN).pixels,
            convolve_2d_normalized(img, KERNEL_SHARPEN).pixels)
        k2 = generate_gaussian_kernel_2d(0.8, 1)
        np.testing.assert_array_equal(convolve(img, k2).pixels, convolve_2d_raw(img, k2).pixels)
        k1 = generate_gaussian_kernel_1d(0.8, 1)
        np.testing.assert_array_equal(convolve(img, k1).pixels, convolve_1d(img, k1).pixels)

    def test_invalid_kernels(self):
        img = noise(5, 5)
        for kernel in (np.ones((2, 2), dtype=int), np.ones((3, 5)), np.ones((3, 3, 3)),
                       np.ones(4), np.array([['a']])):
            with self.assertRaises(InvalidParameter):
                convolve(img, kernel)

    def test_rejects_zero_jobs(self):
        img = noise(5, 5)
        for kernel in (KERNEL_SHARPEN, generate_gaussian_kernel_2d(1.0, 1),
                       generate_gaussian_kernel_1d(1.0, 1)):
            with self.assertRaises(InvalidParameter):
                convolve(img, kernel, n_jobs=0)

    def test_rejects_non_rgb_image(self):
        with self.assertRaises(InvalidParameter):
            convolve(Image(np.zeros((3, 3), dtype=np.uint8)), KERNEL_SHARPEN)

    def test_parallel_matches_sequential(self):
        img = noise(40, 30, seed=3)
        for kernel in (KERNEL_SHARPEN, generate_gaussian_kernel_2d(1.0, 2),
                       generate_gaussian_kernel_1d(1.0)):
            seq = convolve(img, kernel)
            par = convolve(img, kernel, n_jobs=2)
            np.testing.assert_array_equal(seq.pixels, par.pixels)


if __name__ == '__main__':
    unittest.main()
