#!/usr/bin/env python3
"""
Kernel presets and generators (flat box kernel, 1D and 2D Gaussian).

Integer kernels go through the normalised convolution path, floating point
ones through the raw path, so the presets are deliberately kept as ints.
"""
import math
import numpy as np
from errors import InvalidParameter

# Kernel presets
KERNEL_BLUR = np.array([[1,1,1],[1,1,1],[1,1,1]], dtype=int)
KERNEL_SHARPEN = np.array([[0,-1,0],[-1,5,-1],[0,-1,0]], dtype=int)
KERNEL_EDGE = np.array([[-1,-1,-1],[-1,8,-1],[-1,-1,-1]], dtype=int)
KERNEL_EMBOSS = np.array([[-2,-1,0],[-1,1,1],[0,1,2]], dtype=int)
KERNEL_GAUSSIAN = np.array([[1,2,1],[2,4,2],[1,2,1]], dtype=int)

PRESETS = {
    'blur': KERNEL_BLUR,
    'sharpen': KERNEL_SHARPEN,
    'edge': KERNEL_EDGE,
    'emboss': KERNEL_EMBOSS,
    'gaussian': KERNEL_GAUSSIAN,
}


def _check_radius(radius):
    if isinstance(radius, bool) or not isinstance(radius, (int, np.integer)):
        raise InvalidParameter(f"radius must be an integer, got {radius!r}")
    if radius < 0:
        raise InvalidParameter(f"radius must be >= 0, got {radius}")


def _check_std_dev(std_dev):
    if not (np.isfinite(std_dev) and std_dev > 0):
        raise InvalidParameter(f"standard deviation must be finite and > 0, got {std_dev}")


def gaussian_1d(x, std_dev):
    """1/sqrt(2*pi*s^2) * exp(-x^2 / 2s^2)"""
    var = std_dev * std_dev
    return np.exp(-(np.square(x)) / (2 * var)) / np.sqrt(2 * np.pi * var)


def gaussian_2d(x, y, std_dev):
    """1/(2*pi*s^2) * exp(-(x^2 + y^2) / 2s^2)"""
    var = std_dev * std_dev
    return np.exp(-(np.square(x) + np.square(y)) / (2 * var)) / (2 * np.pi * var)


def generate_flat_kernel(radius):
    """(2r+1) x (2r+1) integer kernel of ones, i.e. an unweighted box blur."""
    _check_radius(radius)
    size = 2 * radius + 1
    return np.ones((size, size), dtype=int)


def gaussian_length(std_dev):
    """Kernel length covering +-3 sigma: ceil(6*sigma), bumped to the next odd number."""
    _check_std_dev(std_dev)
    length = max(1, math.ceil(6 * std_dev))
    if length % 2 == 0:
        length += 1
    return length


def generate_gaussian_kernel_1d(std_dev, radius=None, normalize=False):
    """
    Sampled 1D Gaussian. Length is 2*radius+1 when radius is given, otherwise
    gaussian_length(std_dev). Weights are left unnormalised unless asked.
    """
    _check_std_dev(std_dev)
    if radius is None:
        length = gaussian_length(std_dev)
    else:
        _check_radius(radius)
        length = 2 * radius + 1

    center = length // 2
    x = np.arange(length) - center
    kernel = gaussian_1d(x, std_dev)
    if normalize:
        kernel = kernel / np.sum(kernel)
    return kernel


def generate_gaussian_kernel_2d(std_dev, radius, normalize=False):
    """Sampled 2D Gaussian, (2r+1) x (2r+1), unnormalised unless asked."""
    _check_std_dev(std_dev)
    _check_radius(radius)
    size = 2 * radius + 1

    offsets = np.arange(size) - radius
    xx, yy = np.meshgrid(offsets, offsets, indexing='ij')
    kernel = gaussian_2d(xx, yy, std_dev)
    if normalize:
        kernel = kernel / np.sum(kernel)
    return kernel


def print_kernel_info(kernel):
    """Print a few statistics about a kernel."""
    kernel = np.asarray(kernel)
    center = tuple(n // 2 for n in kernel.shape)
    print(f"Kernel shape: {'x'.join(str(n) for n in kernel.shape)} ({kernel.dtype})")
    print(f"Center value: {kernel[center]:.6f}")
    print(f"Sum of all values: {np.sum(kernel):.10f}")
    print(f"Min value: {np.min(kernel):.6f}")
    print(f"Max value: {np.max(kernel):.6f}")


if __name__ == "__main__":
    # Configuration
    std_dev = 2.0
    radius = 3

    print_kernel_info(generate_gaussian_kernel_1d(std_dev))
    print()
    print_kernel_info(generate_gaussian_kernel_2d(std_dev, radius))
