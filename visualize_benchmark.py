#!/usr/bin/env python3
"""
Visualize benchmark results from benchmark_results.json
Creates a bar chart comparing sequential and parallel execution times.
"""

import json
import sys
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path

def load_results(json_path='benchmark_results.json'):
    """Load benchmark results from JSON file."""
    with open(json_path, 'r') as f:
        data = json.load(f)
    return data

def print_summary(data):
    """Print summary statistics."""
    print("\n" + "="*80)
    print("BENCHMARK SUMMARY")
    print("="*80)

    for entry in data['results']:
        w, h = entry['image_size']
        k = entry['kernel_size']
        print(f"\nImage: {w}x{h} | Kernel: {entry['kernel']} ({k}x{k})")
        print("-" * 80)
        print(f"  {'sequential':30s}: {entry['sequential_seconds'] * 1000:10.2f} ms")
        print(f"  {'parallel':30s}: {entry['parallel_seconds'] * 1000:10.2f} ms")
        print(f"  Speedup: {entry['speedup']:6.2f}x")
        if not entry['identical']:
            print("  ⚠ outputs differ")

def plot_benchmark_results(data, output_path='benchmark_plot.png'):
    """Grouped bar chart of execution times per kernel."""
    entries = data['results']
    labels = [f"{e['kernel']}\n{e['kernel_size']}x{e['kernel_size']}" for e in entries]
    seq = [e['sequential_seconds'] * 1000 for e in entries]
    par = [e['parallel_seconds'] * 1000 for e in entries]

    x = np.arange(len(entries))
    width = 0.35

    fig, ax = plt.subplots(figsize=(max(6, 2.5 * len(entries)), 6))
    for offset, times, label, color in ((-width / 2, seq, 'sequential', '#2E86AB'),
                                        (width / 2, par, 'parallel', '#A23B72')):
        bars = ax.bar(x + offset, times, width, label=label, color=color, alpha=0.8)
        # Add value labels on top of bars
        for bar in bars:
            height = bar.get_height()
            if height > 0:
                ax.text(bar.get_x() + bar.get_width()/2., height,
                       f'{height:.1f}',
                       ha='center', va='bottom', fontsize=8)

    ax.set_xlabel('Kernel', fontsize=11, fontweight='bold')
    ax.set_ylabel('Time (ms)', fontsize=11, fontweight='bold')
    ax.set_title('Image Convolution Benchmark Results', fontsize=12, fontweight='bold')
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.legend(fontsize=8, loc='best')
    ax.grid(True, alpha=0.3, axis='y')

    fig.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"✓ Execution times plot saved to: {output_path}")
    return output_path

def main():
    json_path = Path(sys.argv[1] if len(sys.argv) > 1 else 'benchmark_results.json')
    if not json_path.exists():
        print(f"Error: {json_path} not found!")
        print("Run 'python benchmark.py' first to generate results.")
        return 1

    data = load_results(json_path)
    print_summary(data)

    print("\nGenerating plot...")
    plot_benchmark_results(data)

    print("\n✓ Visualization complete!")
    return 0

if __name__ == '__main__':
    sys.exit(main())
