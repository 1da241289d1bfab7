"""
Figure Orchestrator CLI.

Entry point for computing figures and generating reports.

Usage:
    python -m orchestrator run configs/sutton1988.yaml --report
    python -m orchestrator run configs/sutton1988.yaml --figures figure4,figure5
    python -m orchestrator report results/ -f markdown
    python -m orchestrator summary results/
    python -m orchestrator quick -n 100 -s 10 -o sutton1988.yaml
    python -m orchestrator list configs/sutton1988.yaml
"""

import argparse
import sys
from pathlib import Path

import yaml

from orchestrator.config import (
    DEFAULT_NUM_SETS,
    DEFAULT_SEED,
    DEFAULT_SEQUENCES_PER_SET,
    OrchestratorConfig,
    VALID_REPORT_FORMATS,
    create_sutton_config,
    load_config,
    save_config,
)
from orchestrator.metrics import MetricsCollector
from orchestrator.report import ReportGenerator
from orchestrator.runner import ExperimentRunner


def _load_or_exit(config_path: str) -> OrchestratorConfig:
    """Load a config file, exiting with status 1 if it is missing or invalid."""
    if not Path(config_path).exists():
        print(f"Error: Config file not found: {config_path}")
        sys.exit(1)

    try:
        return load_config(config_path)
    except (ValueError, KeyError, TypeError, yaml.YAMLError) as e:
        print(f"Error: Invalid config {config_path}: {e}")
        sys.exit(1)


def _require_dir(results_dir: str) -> None:
    if not Path(results_dir).is_dir():
        print(f"Error: Results directory not found: {results_dir}")
        sys.exit(1)


def cmd_run(args):
    """Compute the figures of a config file.

    Exits with status 1 if any figure fails.
    """
    config = _load_or_exit(args.config)
    if args.results_dir:
        config.results_dir = args.results_dir

    selected = None
    if args.figures:
        selected = [name.strip() for name in args.figures.split(",") if name.strip()]

    print(f"Config: {args.config}")
    print(f"  Training data: seed={config.seed}, {config.num_sets} sets x "
          f"{config.sequences_per_set} walks")
    print(f"  Results: {config.results_dir}")

    try:
        results = ExperimentRunner(config).run_all(selected)
    except KeyError as e:
        print(f"Error: Unknown figure {e}")
        sys.exit(1)

    if args.report:
        ReportGenerator(config.results_dir).save_reports(formats=[config.report_format])

    failed = [r.figure_name for r in results if r.status != "success"]
    print(f"\n{len(results) - len(failed)}/{len(results)} figures computed")
    if failed:
        print(f"Failed: {', '.join(failed)}")
        sys.exit(1)


def cmd_report(args):
    """Write markdown and/or JSON reports for a results directory."""
    _require_dir(args.results_dir)

    formats = ["markdown", "json"] if args.format == "both" else [args.format]
    saved = ReportGenerator(args.results_dir).save_reports(
        output_dir=args.output or args.results_dir,
        formats=formats,
    )

    print(f"\n{len(saved)} report(s) written")


def cmd_summary(args):
    """Print the stored figure results of a results directory."""
    _require_dir(args.results_dir)

    collector = MetricsCollector(args.results_dir)
    collector.load_existing_results()
    print(collector.summary())


def cmd_quick(args):
    """Write the Sutton (1988) figure config to a YAML file."""
    config = create_sutton_config(
        seed=args.seed,
        num_sets=args.num_sets,
        sequences_per_set=args.sequences,
        results_dir=args.results_dir,
    )
    save_config(config, args.output)

    print(f"Generated config with {len(config.figures)} figures:")
    for fig in config.figures:
        print(f"  - {fig.name} ({fig.kind})")
    print(f"Written to {args.output}")


def cmd_list(args):
    """Describe the figures of a config file."""
    config = _load_or_exit(args.config)

    print(f"Configuration: {args.config}")
    print(f"  Seed: {config.seed}")
    print(f"  Training sets: {config.num_sets} x {config.sequences_per_set} walks")
    print(f"  Results dir: {config.results_dir}")
    print(f"  Report format: {config.report_format}")
    print(f"\nFigures ({len(config.figures)}):")

    for fig in config.figures:
        mode = "online" if fig.online else "batch"
        initial = "random" if fig.initial_value is None else fig.initial_value
        print(f"  - {fig.name}")
        print(f"      Kind: {fig.kind}")
        print(f"      Lambdas: {', '.join(f'{lam:g}' for lam in fig.lambdas)}")
        print(f"      Alphas: {', '.join(f'{a:g}' for a in fig.alphas)}")
        print(f"      Training: {mode}, max {fig.max_iterations} sweeps, tolerance {fig.tolerance:g}")
        print(f"      Initial weights: {initial}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subparser per command."""
    parser = argparse.ArgumentParser(
        prog="orchestrator",
        description="Figure Orchestrator for TD(lambda) Random Walk Experiments",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run = subparsers.add_parser("run", help="Compute the figures of a config file")
    run.add_argument("config", help="YAML config file")
    run.add_argument("--results-dir", help="Write results here instead of the config's results_dir")
    run.add_argument("--figures", help="Comma-separated figure names to compute (default: all)")
    run.add_argument("--report", action="store_true", help="Write reports when the run finishes")
    run.set_defaults(func=cmd_run)

    report = subparsers.add_parser("report", help="Write reports for a results directory")
    report.add_argument("results_dir", help="Results directory of a previous run")
    report.add_argument("--output", "-o", help="Report directory (default: results_dir)")
    report.add_argument(
        "--format", "-f",
        choices=sorted(VALID_REPORT_FORMATS),
        default="both",
        help="Report format (default: both)",
    )
    report.set_defaults(func=cmd_report)

    summary = subparsers.add_parser("summary", help="Print stored figure results")
    summary.add_argument("results_dir", help="Results directory of a previous run")
    summary.set_defaults(func=cmd_summary)

    quick = subparsers.add_parser("quick", help="Write the Sutton (1988) figure config")
    quick.add_argument(
        "--num-sets", "-n",
        type=int,
        default=DEFAULT_NUM_SETS,
        help=f"Number of training sets (default: {DEFAULT_NUM_SETS})",
    )
    quick.add_argument(
        "--sequences", "-s",
        type=int,
        default=DEFAULT_SEQUENCES_PER_SET,
        help=f"Walks per training set (default: {DEFAULT_SEQUENCES_PER_SET})",
    )
    quick.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Training data seed (default: {DEFAULT_SEED})",
    )
    quick.add_argument("--results-dir", default="results", help="Results directory in the config")
    quick.add_argument("--output", "-o", default="sutton1988.yaml", help="Config file to write")
    quick.set_defaults(func=cmd_quick)

    list_cmd = subparsers.add_parser("list", help="Describe the figures of a config file")
    list_cmd.add_argument("config", help="YAML config file")
    list_cmd.set_defaults(func=cmd_list)

    return parser


def main():
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
