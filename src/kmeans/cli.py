"""
K-means CLI - cluster a point file with Lloyd's algorithm.

Usage:
    kmeans run points.in
    kmeans run points.in -k 2 --max-iterations 10 --format json
    kmeans run points.in --config run.yaml --log-dir ./logs
    kmeans info points.in
"""

import argparse
import json
import sys
from pathlib import Path

from .config import KMeansConfig, load_config, OUTPUT_FORMATS
from .clustering.models import dimension_of
from .reader import load_points
from .report import format_report, format_summary, result_to_dict
from .runner import KMeansRunner


def build_config(args) -> KMeansConfig:
    """Config file values, then command line overrides."""
    config = load_config(Path(args.config)) if args.config else KMeansConfig()

    if args.k is not None:
        config.k = args.k
    if args.max_iterations is not None:
        config.max_iterations = args.max_iterations
    if args.format is not None:
        config.output_format = args.format
    if args.log_dir is not None:
        config.log_dir = args.log_dir
    if args.verbose:
        config.verbose = True

    return config


def cmd_run(args):
    """Cluster a point file and print the result."""
    config = build_config(args)

    with KMeansRunner(config) as runner:
        result = runner.run_file(Path(args.input))

    if config.output_format == "json":
        print(json.dumps(result_to_dict(result), indent=2))
    else:
        print(format_report(result), end="")
        if config.verbose:
            print(format_summary(result))

    return 0


def cmd_info(args):
    """Show the shape of a point file without clustering it."""
    points = load_points(Path(args.input))
    dim = dimension_of(points) if points else 0

    print(f"Input: {args.input}")
    print(f"Points: {len(points)}")
    print(f"Dimension: {dim if dim is not None else 'inconsistent'}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="K-means clustering (Lloyd's algorithm) of labeled points"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # run
    p_run = subparsers.add_parser("run", help="Cluster a point file")
    p_run.add_argument("input", help="Point file: '<count> <dim>' then '<name> <x1> ...'")
    p_run.add_argument("-k", type=int, help="Number of clusters")
    p_run.add_argument("--max-iterations", type=int, help="Maximum passes")
    p_run.add_argument("--config", help="YAML config file")
    p_run.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format")
    p_run.add_argument("--log-dir", help="Directory for JSONL run log")
    p_run.add_argument("--verbose", action="store_true", help="Print per-pass progress")

    # info
    p_info = subparsers.add_parser("info", help="Show point file summary")
    p_info.add_argument("input", help="Point file")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch
    commands = {
        "run": cmd_run,
        "info": cmd_info,
    }

    try:
        return commands[args.command](args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
