#!/usr/bin/env python3
"""
Convenient executable script to plot furnace CSV tick logs.

Usage:
    python plot_furnace_log.py <csv_file> [options]

Examples:
    python plot_furnace_log.py output/basic_demo.csv
    python plot_furnace_log.py output/basic_demo.csv --analyze
    python plot_furnace_log.py output/basic_demo.csv --save plots/
"""

import argparse
import sys
from pathlib import Path

from furnace_control.simulation.driver import SimulationResult
from furnace_control.analyzer.metrics import PerformanceMetrics
from furnace_control.analyzer.plots import FurnacePlotter


def main():
    parser = argparse.ArgumentParser(
        description='Plot furnace tick logs from CSV files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run.csv
  %(prog)s run.csv --analyze
  %(prog)s run.csv --save output_dir/ --dpi 200
        """
    )

    parser.add_argument(
        'csv_file',
        type=str,
        help='Path to CSV log file'
    )

    parser.add_argument(
        '--analyze',
        action='store_true',
        help='Print performance metrics'
    )

    parser.add_argument(
        '--no-plot',
        action='store_true',
        help='Skip plotting'
    )

    parser.add_argument(
        '--save',
        type=str,
        metavar='DIR',
        help='Save plot to directory instead of displaying'
    )

    parser.add_argument(
        '--dpi',
        type=int,
        default=150,
        help='DPI for saved figures (default: 150)'
    )

    args = parser.parse_args()

    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        print(f"Error: CSV file not found: {csv_path}", file=sys.stderr)
        sys.exit(1)

    print(f"Loading furnace log from: {csv_path}")

    try:
        result = SimulationResult.from_csv(str(csv_path))
    except (OSError, KeyError, ValueError) as e:
        print(f"Error loading CSV: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Loaded {len(result)} ticks")
    print()

    if args.analyze:
        if len(result) < 2:
            print("Not enough ticks to analyze.")
        else:
            metrics = PerformanceMetrics().calculate_all_metrics(result)
            for group, values in metrics.items():
                print(f"{group}:")
                for name, value in values.items():
                    print(f"  {name}: {value:.4g}")
            print()

    if args.no_plot or len(result) == 0:
        return

    fig = FurnacePlotter().plot_result(result)

    if args.save:
        save_dir = Path(args.save)
        save_dir.mkdir(parents=True, exist_ok=True)
        filepath = save_dir / f"{csv_path.stem}.png"
        fig.savefig(filepath, dpi=args.dpi, bbox_inches='tight')
        print(f"Saved: {filepath}")
    else:
        print("Close plot window to exit.")
        FurnacePlotter.show()


if __name__ == "__main__":
    main()
