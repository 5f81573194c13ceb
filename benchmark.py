#!/usr/bin/env python3
"""
Benchmark script to compare the sequential and the joblib convolution paths.
"""
import argparse
import json
import multiprocessing
import sys
import time
import numpy as np
from convolution import convolve
from filter_image import KERNEL_CHOICES, build_kernel
from image_io import load_image
from pixels import Image


def random_image(width, height, seed=None):
    """Uniformly random RGB image."""
    rng = np.random.default_rng(seed)
    return Image(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))


def time_runs(img, kernel, n_runs, n_jobs):
    times = []
    result = None
    for i in range(n_runs):
        start = time.perf_counter()
        result = convolve(img, kernel, n_jobs=n_jobs)
        elapsed = time.perf_counter() - start
        times.append(elapsed)
        print(f"Run {i+1}: {elapsed:.4f} seconds")
    return result, times


def benchmark_convolution(img, kernel, n_runs=3, n_jobs=-1):
    """Run the sequential and the parallel path and compare them."""
    print(f"Image size: {img.width}x{img.height} pixels")
    print(f"Kernel size: {'x'.join(str(n) for n in kernel.shape)}")
    print(f"Number of runs: {n_runs}")
    print(f"CPU cores: {multiprocessing.cpu_count()}")
    print("=" * 70)

    print("\n1. SEQUENTIAL VERSION")
    print("-" * 70)
    result_seq, times_seq = time_runs(img, kernel, n_runs, 1)
    avg_seq = np.mean(times_seq)
    print(f"Average: {avg_seq:.4f} ± {np.std(times_seq):.4f} seconds")

    print(f"\n2. PARALLEL VERSION (row blocks, n_jobs={n_jobs})")
    print("-" * 70)
    result_par, times_par = time_runs(img, kernel, n_runs, n_jobs)
    avg_par = np.mean(times_par)
    print(f"Average: {avg_par:.4f} ± {np.std(times_par):.4f} seconds")
    speedup = avg_seq / avg_par if avg_par > 0 else 0.0
    print(f"Speedup: {speedup:.2f}x")

    print("\n" + "=" * 70)
    print("VERIFICATION")
    print("=" * 70)
    identical = bool(np.array_equal(result_seq.pixels, result_par.pixels))
    if identical:
        print("✓ Sequential and parallel results are identical")
    else:
        diff = np.abs(result_seq.pixels.astype(int) - result_par.pixels.astype(int)).max()
        print(f"⚠ Results differ, max difference {diff}")

    return {
        'image_size': [img.width, img.height],
        'kernel_size': int(kernel.shape[0]),
        'n_runs': n_runs,
        'n_jobs': n_jobs,
        'sequential_seconds': float(avg_seq),
        'parallel_seconds': float(avg_par),
        'speedup': float(speedup),
        'identical': identical,
    }


def main(argv=None):
    p = argparse.ArgumentParser(description='Benchmark sequential vs parallel convolution.')
    p.add_argument('img', nargs='?', help='input image (default: random image)')
    p.add_argument('-size', type=int, default=512,
        help='width and height of the random image (default: 512)')
    p.add_argument('-kernels', nargs='+', default=['sharpen', 'gaussian2d'],
        choices=KERNEL_CHOICES, help='kernels to benchmark')
    p.add_argument('-radius', type=int, default=3,
        help='radius of generated kernels (default: 3)')
    p.add_argument('-sigma', type=float, default=2.0,
        help='standard deviation of Gaussian kernels (default: 2.0)')
    p.add_argument('-runs', type=int, default=3, help='runs per version (default: 3)')
    p.add_argument('-n_jobs', type=int, default=-1, help='joblib workers (default: -1)')
    p.add_argument('-out', default='benchmark_results.json',
        help='where to write the results (default: benchmark_results.json)')
    args = p.parse_args(argv)

    img = load_image(args.img) if args.img else random_image(args.size, args.size, seed=0)

    print("=" * 70)
    print("CONVOLUTION BENCHMARK: Sequential vs Parallel")
    print("=" * 70)

    results = []
    for name in args.kernels:
        print(f"\n### Kernel: {name}\n")
        kernel = build_kernel(name, args.radius, args.sigma)
        entry = benchmark_convolution(img, kernel, args.runs, args.n_jobs)
        entry['kernel'] = name
        results.append(entry)

    with open(args.out, 'w') as f:
        json.dump({'results': results}, f, indent=2)
    print(f"\n✓ Results saved to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
