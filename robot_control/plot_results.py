#!/usr/bin/env python3
"""
Command-line viewer for recorded autonomous runs.

Lists the runs under a results directory together with their recorded
outcome, and plots a selected run (path, tracking error, wheel control).
A run is selected by directory name or by its number in the listing; the
most recent run is used when none is given.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import TERM_BLUE, TERM_ORANGE, TERM_RESET
from .data_collector import find_runs, read_run_summary
from .robot import setup_logging
from .visualization import plot_run_summary


def select_run(results_dir: Path, run: Optional[str] = None) -> Path:
    """Resolve a run selector to a run directory.

    Args:
        results_dir: Directory holding run_* directories
        run: Directory name, 1-based number from the listing, or None for
            the most recent run

    Returns:
        Path of the selected run directory

    Raises:
        FileNotFoundError: If the results directory or the run is missing
    """
    runs = find_runs(results_dir)
    if not runs:
        raise FileNotFoundError(f"No run directories found in {results_dir}")

    if run is None:
        return runs[-1]
    if run.isdigit():
        index = int(run)
        if not 1 <= index <= len(runs):
            raise FileNotFoundError(f"Run number {index} out of range (1-{len(runs)})")
        return runs[index - 1]

    run_dir = results_dir / run
    if run_dir not in runs:
        raise FileNotFoundError(f"Run directory not found: {run_dir}")
    return run_dir


def describe_run(run_dir: Path) -> str:
    """One-line description of a run from its summary."""
    summary = read_run_summary(run_dir)
    if not summary:
        return f"{run_dir.name}  (no summary)"
    return (
        f"{run_dir.name}  {summary.get('outcome', '?')}  "
        f"error={summary.get('final_error_m', 'n/a')}m  "
        f"duration={summary.get('duration_s', '?')}s"
    )


def list_runs(results_dir: Path) -> List[Path]:
    """Log the available runs with their outcomes and return them."""
    runs = find_runs(results_dir)
    if not runs:
        logging.info(f"No run directories found in {results_dir}")
        return runs

    logging.info("Available runs:")
    for i, run_dir in enumerate(runs, 1):
        color = TERM_BLUE if read_run_summary(run_dir).get("outcome") == "complete" else TERM_ORANGE
        logging.info(f"  {color}{i}. {describe_run(run_dir)}{TERM_RESET}")
    return runs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="List and plot recorded autonomous runs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Plot the most recent run
  robot-control-plot

  # List runs with their outcome, then plot the second one
  robot-control-plot --list
  robot-control-plot --run 2

  # Save figures into the run directory without opening windows
  robot-control-plot --save --no-show
        """,
    )
    parser.add_argument(
        "--run",
        default=None,
        help="Run directory name or number from --list (default: most recent run)",
    )
    parser.add_argument(
        "--results-dir",
        default="results",
        help="Directory holding the run_* directories (default: results)",
    )
    parser.add_argument("--save", action="store_true", help="Save plots as PNG in the run directory")
    parser.add_argument("--no-show", action="store_true", help="Do not open plot windows")
    parser.add_argument("--list", action="store_true", help="List runs with their outcome and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    results_dir = Path(args.results_dir)

    try:
        if args.list:
            list_runs(results_dir)
            return 0

        run_dir = select_run(results_dir, args.run)
        logging.info(f"{TERM_BLUE}Plotting {describe_run(run_dir)}{TERM_RESET}")
        plot_run_summary(run_dir, save_plots=args.save, show_plots=not args.no_show)
    except FileNotFoundError as e:
        logging.error(f"Error: {e}")
        return 1
    except KeyError as e:
        logging.error(f"Error: missing column {e} in recorded CSV")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
