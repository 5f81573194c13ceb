#!/usr/bin/env python3
"""
Filter an image with a convolution kernel and save the result.

Loads the input image, builds the requested kernel, convolves, asks for the
output file name on stdin (unless -name is given) and writes a PNG into the
output directory.
"""
import argparse
import sys
from convolution import convolve
from errors import ConvolutionError, InvalidParameter
from image_io import INPUT_PATH, OUTPUT_DIR, load_image, output_path, prompt_file_name, save_image
from kernels import (PRESETS, gaussian_length, generate_flat_kernel,
                     generate_gaussian_kernel_1d, generate_gaussian_kernel_2d)

GENERATED = ('flat', 'gaussian1d', 'gaussian2d')
KERNEL_CHOICES = sorted(PRESETS) + list(GENERATED)


def build_kernel(name, radius=None, std_dev=1.0, normalize=False):
    """
    Return the kernel called `name`. radius and std_dev only apply to the
    generated kernels; without a radius the flat kernel is 3x3 and Gaussians
    cover +-3 sigma.
    """
    if name in PRESETS:
        return PRESETS[name]
    if name == 'flat':
        return generate_flat_kernel(1 if radius is None else radius)
    if name == 'gaussian1d':
        return generate_gaussian_kernel_1d(std_dev, radius, normalize=normalize)
    if name == 'gaussian2d':
        if radius is None:
            radius = gaussian_length(std_dev) // 2
        return generate_gaussian_kernel_2d(std_dev, radius, normalize=normalize)
    raise InvalidParameter(f"unknown kernel {name!r}, expected one of {KERNEL_CHOICES}")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description='Convolve an image with a kernel.')
    p.add_argument('img', nargs='?', default=str(INPUT_PATH),
        help=f'input image filename (default: {INPUT_PATH})')
    p.add_argument('-kernel', default='sharpen', choices=KERNEL_CHOICES,
        help='kernel to apply (default: sharpen)')
    p.add_argument('-radius', type=int,
        help='radius of generated kernels, side is 2*radius+1 '
        '(default: 1 for flat, 3 sigma for Gaussians)')
    p.add_argument('-sigma', type=float, default=1.0,
        help='standard deviation of Gaussian kernels (default: 1.0)')
    p.add_argument('-normalize', action='store_true',
        help='scale Gaussian weights so they sum to 1')
    p.add_argument('-half_open', action='store_true',
        help='use the half-open [-c, c) tap window instead of [-c, c]')
    p.add_argument('-compose', action='store_true',
        help='for 1D kernels, run the vertical pass on the horizontal output')
    p.add_argument('-n_jobs', type=int, default=1,
        help='joblib workers, -1 uses all cores (default: 1)')
    p.add_argument('-out_dir', default=str(OUTPUT_DIR),
        help=f'directory for the filtered image (default: {OUTPUT_DIR})')
    p.add_argument('-name',
        help='output file name without extension (default: ask on stdin)')
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        img = load_image(args.img)
        print(f"Processing image: {img.width}x{img.height} pixels")

        kernel = build_kernel(args.kernel, args.radius, args.sigma, args.normalize)
        print(f"Kernel: {args.kernel} {'x'.join(str(n) for n in kernel.shape)}")

        result = convolve(img, kernel, half_open=args.half_open,
                          compose=args.compose, n_jobs=args.n_jobs)

        stem = args.name if args.name else prompt_file_name()
        saved = save_image(result, output_path(stem, args.out_dir))
    except ConvolutionError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    print(f"Saved: {saved}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
