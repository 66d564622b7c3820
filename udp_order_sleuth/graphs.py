import argparse
import json
import os
import sys

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

GRAPHS_DIR = "./graphs"


def load_results(path):
    """Load a receiver results file written with --results."""
    with open(path, 'r') as f:
        return json.load(f)


def gap_histogram(gap_events):
    """
    Count gap events by size.

    Returns:
        tuple: (sizes, counts) as numpy arrays, sizes ascending
    """
    missed = np.array([event['missed'] for event in gap_events], dtype=int)
    if missed.size == 0:
        return np.array([], dtype=int), np.array([], dtype=int)

    sizes, counts = np.unique(missed, return_counts=True)
    return sizes, counts


def plot_gap_summary(results, output_path):
    """Two panels: missed messages at each gap, and how often each gap size occurred."""
    gap_events = results.get('gap_events', [])

    fig, axes = plt.subplots(1, 2, figsize=(16, 6))

    ax = axes[0]
    received = np.array([event['received'] for event in gap_events], dtype=int)
    missed = np.array([event['missed'] for event in gap_events], dtype=int)
    if received.size:
        ax.bar(received, missed, width=max(1, received.max() // 200), color='#A23B72', alpha=0.8)
    ax.set_xlabel('Sequence Number', fontsize=14, fontweight='bold')
    ax.set_ylabel('Missed Messages', fontsize=14, fontweight='bold')
    ax.set_title('Gaps Along the Stream', fontsize=16, fontweight='bold', pad=10)
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    ax = axes[1]
    sizes, counts = gap_histogram(gap_events)
    if sizes.size:
        x = np.arange(len(sizes))
        bars = ax.bar(x, counts, 0.6, color='#2E86AB', alpha=0.8)
        ax.set_xticks(x)
        ax.set_xticklabels([str(size) for size in sizes])

        for bar in bars:
            height = bar.get_height()
            ax.text(bar.get_x() + bar.get_width()/2., height,
                    f'{height:.0f}', ha='center', va='bottom', fontsize=12)
    ax.set_xlabel('Gap Size (messages)', fontsize=14, fontweight='bold')
    ax.set_ylabel('Occurrences', fontsize=14, fontweight='bold')
    ax.set_title('Gap Size Distribution', fontsize=16, fontweight='bold', pad=10)
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    fig.suptitle(f"{results.get('group', 'unknown group')}: "
                 f"{results.get('total_received', 0)} received, "
                 f"{results.get('out_of_order_count', 0)} out of order, "
                 f"{results.get('missed_total', 0)} missed",
                 fontsize=16)

    plt.tight_layout()
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"Saved: {output_path}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='udp-order-sleuth-graphs',
        description='Plot the gaps recorded in a receiver results file')
    parser.add_argument('results', help='JSON file written by the receiver with --results')
    parser.add_argument('--output', default=None,
                        help=f'Image path (default: {GRAPHS_DIR}/<results name>.png)')
    args = parser.parse_args(argv)

    try:
        results = load_results(args.results)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot load {args.results}: {e}", file=sys.stderr)
        return 1

    output = args.output
    if output is None:
        name = os.path.splitext(os.path.basename(args.results))[0]
        output = os.path.join(GRAPHS_DIR, f"{name}.png")

    plot_gap_summary(results, output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
