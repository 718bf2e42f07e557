#!/usr/bin/env python3
"""
Generate bucket distribution and phase timing plots from a metrics file.
"""

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import json
import os
import sys


def plot_bucket_distribution(metrics, output_file='bucket_distribution.png'):
    """Bar charts of records and anagram groups per bucket."""
    records = metrics['records_per_bucket']
    groups = metrics.get('groups_per_bucket', {})
    labels = [str(i) for i in range(len(records))]
    group_counts = [groups.get(label, 0) for label in labels]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

    ax1.bar(labels, records, color='#4ECDC4')
    ax1.set_xlabel('Bucket')
    ax1.set_ylabel('Records')
    ax1.set_title('Records per Bucket')
    ax1.grid(axis='y', alpha=0.3)

    if records:
        mean = sum(records) / len(records)
        ax1.axhline(y=mean, color='black', linestyle='--', linewidth=0.8, label=f'mean {mean:.0f}')
        ax1.legend()

    ax2.bar(labels, group_counts, color='#FF6B6B')
    ax2.set_xlabel('Bucket')
    ax2.set_ylabel('Anagram groups')
    ax2.set_title('Anagram Groups per Bucket')
    ax2.grid(axis='y', alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150)
    plt.close(fig)
    print(f"Saved plot to {output_file}")
    return output_file


def plot_phase_breakdown(metrics, output_file='phase_breakdown.png'):
    """Create pie chart showing phase time breakdown."""
    phases = [
        ('Map', metrics['map_phase_time_seconds'], '#FFE66D'),
        ('Shuffle', metrics['shuffle_phase_time_seconds'], '#A8E6CF'),
        ('Reduce', metrics['reduce_phase_time_seconds'], '#95E1D3'),
    ]
    phases = [p for p in phases if p[1] > 0]

    fig, ax = plt.subplots(figsize=(8, 6))

    if phases:
        ax.pie([p[1] for p in phases],
               labels=[f'{name} Phase\n({seconds:.3f}s)' for name, seconds, _ in phases],
               colors=[p[2] for p in phases], autopct='%1.1f%%',
               startangle=90, textprops={'fontsize': 12})
    ax.set_title('Job Execution Phase Breakdown', fontsize=14, fontweight='bold')

    plt.tight_layout()
    plt.savefig(output_file, dpi=150)
    plt.close(fig)
    print(f"Saved plot to {output_file}")
    return output_file


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python3 visualize_buckets.py <metrics.json> [output_dir]")
        return 1

    with open(argv[0]) as f:
        metrics = json.load(f)

    output_dir = argv[1] if len(argv) > 1 else '.'
    os.makedirs(output_dir, exist_ok=True)

    print("Generating visualizations...")
    plot_bucket_distribution(metrics, os.path.join(output_dir, 'bucket_distribution.png'))
    plot_phase_breakdown(metrics, os.path.join(output_dir, 'phase_breakdown.png'))
    return 0


if __name__ == '__main__':
    sys.exit(main())
