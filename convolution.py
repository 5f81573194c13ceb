#!/usr/bin/env python3
"""
Image convolution engine.

Three variants, picked by convolve() from the kernel's shape and dtype:

  * convolve_2d_normalized  integer 2D kernel, divided by the sum of the
                            weights visited, rounded up
  * convolve_2d_raw         floating point 2D kernel, no division
  * convolve_1d             separable 1D kernel, horizontal then vertical pass

Pixel (x, y) is image.pixels[y, x] and kernel[a][b] weights the source pixel
a-c columns right and b-c rows down of the output pixel (c = side // 2).
Pixels closer than c to an edge are not processed and stay black. Channel
values are written back through pack_rgb, i.e. wrapped to their low 8 bits.

Work is vectorised over pixels and sequential over kernel taps, which keeps
the tap order (and therefore the per-step truncation of the raw paths)
identical to a plain per-pixel loop. With n_jobs != 1 the processable rows
are split into blocks and accumulated with joblib; the output is the same.
"""
import math
import numpy as np
from joblib import Parallel, delayed, effective_n_jobs
from errors import InvalidParameter
from pixels import Image, pack_rgb


def _taps(center, half_open):
    # half_open: [-c, c), the last tap in each direction is skipped
    stop = center if half_open else center + 1
    return range(-center, stop)


def _check_kernel_2d(kernel):
    kernel = np.asarray(kernel)
    if kernel.ndim != 2:
        raise InvalidParameter(f"expected a 2D kernel, got shape {kernel.shape}")
    kh, kw = kernel.shape
    if kh != kw or kh % 2 == 0:
        raise InvalidParameter(f"kernel must be square with an odd side, got {kh}x{kw}")
    if not (np.issubdtype(kernel.dtype, np.integer) or np.issubdtype(kernel.dtype, np.floating)):
        raise InvalidParameter(f"kernel weights must be numeric, got {kernel.dtype}")
    return kernel


def _check_kernel_1d(kernel):
    kernel = np.asarray(kernel)
    if kernel.ndim != 1:
        raise InvalidParameter(f"expected a 1D kernel, got shape {kernel.shape}")
    if len(kernel) % 2 == 0:
        raise InvalidParameter(f"kernel length must be odd, got {len(kernel)}")
    if not (np.issubdtype(kernel.dtype, np.integer) or np.issubdtype(kernel.dtype, np.floating)):
        raise InvalidParameter(f"kernel weights must be numeric, got {kernel.dtype}")
    return kernel


def _source(image):
    pixels = image.pixels
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise InvalidParameter(f"expected an (H, W, 3) RGB image, got shape {pixels.shape}")
    return pixels.astype(np.int64)


def _offsets_2d(kernel, half_open):
    """(dy, dx, weight) for every visited tap, x offset in the outer loop."""
    center = kernel.shape[0] // 2
    taps = _taps(center, half_open)
    return [(dy, dx, kernel[dx + center, dy + center]) for dx in taps for dy in taps]


def _accumulate(source, offsets, start_i, end_i, start_j, end_j, truncate):
    """
    Weighted sum over `offsets` for output rows [start_i, end_i) and columns
    [start_j, end_j). With `truncate` the accumulator is cut toward zero after
    every multiply-accumulate step.
    """
    acc = np.zeros((end_i - start_i, end_j - start_j, source.shape[2]), dtype=np.int64)
    for dy, dx, weight in offsets:
        window = source[start_i + dy:end_i + dy, start_j + dx:end_j + dx]
        if truncate:
            acc = np.trunc(acc + weight * window).astype(np.int64)
        else:
            acc += weight * window
    return acc


def _row_blocks(start, end, n_jobs):
    n_cores = effective_n_jobs(n_jobs)
    # Aim for ~4 blocks per core for better load balancing
    total_blocks = n_cores * 4
    block_rows = max(1, math.ceil((end - start) / total_blocks))
    return [(i, min(i + block_rows, end)) for i in range(start, end, block_rows)]


def _accumulate_region(source, offsets, rows, cols, truncate, n_jobs):
    if n_jobs == 0:
        raise InvalidParameter("n_jobs must not be 0 (1 runs sequentially, -1 uses all cores)")
    start_i, end_i = rows
    start_j, end_j = cols
    if end_i <= start_i or end_j <= start_j:
        # kernel wider than the image: nothing is processable
        return None

    if n_jobs == 1:
        return _accumulate(source, offsets, start_i, end_i, start_j, end_j, truncate)

    blocks = _row_blocks(start_i, end_i, n_jobs)
    results = Parallel(n_jobs=n_jobs)(
        delayed(_accumulate)(source, offsets, block_start, block_end, start_j, end_j, truncate)
        for block_start, block_end in blocks
    )
    return np.concatenate(results, axis=0)


def _write(dest, acc, rows, cols):
    dest[rows[0]:rows[1], cols[0]:cols[1]] = pack_rgb(acc[:, :, 0], acc[:, :, 1], acc[:, :, 2])


def convolve_2d_normalized(image, kernel, half_open=False, n_jobs=1):
    """
    Integer 2D convolution. Each channel sum is divided by the sum of the
    kernel weights actually visited and rounded up. A zero weight sum (edge
    detection kernels) leaves the sum undivided.
    """
    kernel = _check_kernel_2d(kernel)
    if not np.issubdtype(kernel.dtype, np.integer):
        raise InvalidParameter(f"normalised convolution needs an integer kernel, got {kernel.dtype}")
    kernel = kernel.astype(np.int64)
    source = _source(image)

    center = kernel.shape[0] // 2
    offsets = _offsets_2d(kernel, half_open)
    weight_sum = int(sum(weight for _, _, weight in offsets))

    dest = np.zeros((image.height, image.width), dtype=np.int64)
    rows = (center, image.height - center)
    cols = (center, image.width - center)
    acc = _accumulate_region(source, offsets, rows, cols, False, n_jobs)
    if acc is not None:
        if weight_sum != 0:
            # ceiling division, exact for negative sums too
            acc = -((-acc) // weight_sum)
        _write(dest, acc, rows, cols)
    return Image.from_packed(dest)


def convolve_2d_raw(image, kernel, half_open=False, n_jobs=1):
    """Floating point 2D convolution: raw weighted sum, truncated at every step."""
    kernel = _check_kernel_2d(kernel).astype(np.float64)
    source = _source(image)

    center = kernel.shape[0] // 2
    offsets = _offsets_2d(kernel, half_open)

    dest = np.zeros((image.height, image.width), dtype=np.int64)
    rows = (center, image.height - center)
    cols = (center, image.width - center)
    acc = _accumulate_region(source, offsets, rows, cols, True, n_jobs)
    if acc is not None:
        _write(dest, acc, rows, cols)
    return Image.from_packed(dest)


def convolve_1d(image, kernel, half_open=False, compose=False, n_jobs=1):
    """
    Separable convolution with a 1D kernel.

    The horizontal pass covers columns [c, W-c) of every row, the vertical pass
    rows [c, H-c) of every column. By default both passes read the original
    image and the vertical pass overwrites the horizontal one where they
    overlap, so only border columns keep horizontal results. With `compose`
    the vertical pass reads the horizontal pass's output instead, which is a
    true separable filter.
    """
    kernel = _check_kernel_1d(kernel).astype(np.float64)
    source = _source(image)

    center = len(kernel) // 2
    taps = _taps(center, half_open)
    horizontal = [(0, dx, kernel[dx + center]) for dx in taps]
    vertical = [(dy, 0, kernel[dy + center]) for dy in taps]

    dest = np.zeros((image.height, image.width), dtype=np.int64)

    rows = (0, image.height)
    cols = (center, image.width - center)
    acc = _accumulate_region(source, horizontal, rows, cols, True, n_jobs)
    if acc is not None:
        _write(dest, acc, rows, cols)

    if compose:
        source = Image.from_packed(dest).pixels.astype(np.int64)

    rows = (center, image.height - center)
    cols = (0, image.width)
    acc = _accumulate_region(source, vertical, rows, cols, True, n_jobs)
    if acc is not None:
        _write(dest, acc, rows, cols)
    return Image.from_packed(dest)


def convolve(image, kernel, half_open=False, compose=False, n_jobs=1):
    """
    Apply `kernel` to `image` and return a new Image of the same size.

    1D kernels use convolve_1d, 2D integer kernels convolve_2d_normalized and
    2D floating point kernels convolve_2d_raw. `compose` only affects 1D.
    """
    kernel = np.asarray(kernel)
    if kernel.ndim == 1:
        return convolve_1d(image, kernel, half_open=half_open, compose=compose, n_jobs=n_jobs)
    kernel = _check_kernel_2d(kernel)
    if np.issubdtype(kernel.dtype, np.integer):
        return convolve_2d_normalized(image, kernel, half_open=half_open, n_jobs=n_jobs)
    return convolve_2d_raw(image, kernel, half_open=half_open, n_jobs=n_jobs)
