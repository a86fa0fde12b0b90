"""Data collection and CSV logging for autonomous runs.

This module provides CSV data logging for:
- Trajectory tracking (reference pose, measured pose, velocity commands)
- Wheel control (target and measured wheel speeds, feedforward, voltages)
- Run summary (duration, final pose error, outcome)

and for reading recorded runs back (run discovery and summaries).
"""

import csv
import logging
import math
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from .config import TERM_BLUE, TERM_RESET

TRACKING_COLUMNS = [
    "elapsed",
    "x_ref",
    "y_ref",
    "theta_ref",
    "x",
    "y",
    "theta",
    "v_ref",
    "omega_ref",
    "v_cmd",
    "omega_cmd",
]

WHEEL_COLUMNS = [
    "elapsed",
    "left_target",
    "right_target",
    "left_measured",
    "right_measured",
    "left_ff",
    "right_ff",
    "left_volts",
    "right_volts",
]


class DataCollector:
    """Manages CSV file creation and logging for autonomous run data.

    This class handles all data logging responsibilities:
    - Creates timestamped output directories
    - Initializes CSV files with headers
    - Writes tracking and wheel control data every cycle
    - Ensures proper cleanup on shutdown

    Attributes:
        run_dir: Directory path for this run's output files.
        tracking_output_path: Path of the tracking CSV.
        wheel_output_path: Path of the wheel control CSV.
        summary_output_path: Path of the run summary text file.
    """

    def __init__(self, output_dir: str = ".", run_dir: Optional[str] = None) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, creates timestamped
                directory. Can also be set via RUN_DIR environment variable.

        Raises:
            ValueError: If output_dir is not a valid directory.
        """
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        self.tracking_csv_file: Optional[TextIO] = None
        self.tracking_csv_writer: Any = None
        self.wheel_csv_file: Optional[TextIO] = None
        self.wheel_csv_writer: Any = None
        self.rows_written = 0

        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # Create timestamped directory: results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / "results" / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.tracking_output_path: Path = self.run_dir / "tracking.csv"
        self.wheel_output_path: Path = self.run_dir / "wheels.csv"
        self.summary_output_path: Path = self.run_dir / "summary.txt"

    def setup(self) -> None:
        """Initialize CSV files with headers.

        Must be called before writing data.
        """
        self.tracking_csv_file = open(self.tracking_output_path, "w", newline="")
        self.tracking_csv_writer = csv.writer(self.tracking_csv_file)
        self.tracking_csv_writer.writerow(TRACKING_COLUMNS)
        self.tracking_csv_file.flush()

        self.wheel_csv_file = open(self.wheel_output_path, "w", newline="")
        self.wheel_csv_writer = csv.writer(self.wheel_csv_file)
        self.wheel_csv_writer.writerow(WHEEL_COLUMNS)
        self.wheel_csv_file.flush()

        logging.info(f"{TERM_BLUE}✓ Initialized data collection to {self.run_dir}{TERM_RESET}")

    def log_tracking(self, diagnostics: Dict[str, float]) -> None:
        """Log one cycle of tracking diagnostics.

        Args:
            diagnostics: Dictionary from TrajectoryCommand.get_diagnostics(),
                containing every key of TRACKING_COLUMNS and WHEEL_COLUMNS.
        """
        if self.tracking_csv_writer is None:
            raise RuntimeError("DataCollector.setup() must be called before logging")

        self.tracking_csv_writer.writerow([diagnostics[key] for key in TRACKING_COLUMNS])
        self.wheel_csv_writer.writerow([diagnostics[key] for key in WHEEL_COLUMNS])
        if self.tracking_csv_file:
            self.tracking_csv_file.flush()
        if self.wheel_csv_file:
            self.wheel_csv_file.flush()
        self.rows_written += 1

    def log_summary(self, outcome: str, duration: float, final_error: Optional[float]) -> None:
        """Write the run summary text file.

        Args:
            outcome: "complete", "failed: <reason>" or "interrupted"
            duration: Trajectory duration (seconds)
            final_error: Distance between final pose and end pose (meters)
        """
        error_text = f"{final_error:.4f}" if final_error is not None and math.isfinite(final_error) else "n/a"
        with open(self.summary_output_path, "w") as f:
            f.write(f"outcome: {outcome}\n")
            f.write(f"duration_s: {duration:.3f}\n")
            f.write(f"final_error_m: {error_text}\n")
            f.write(f"cycles: {self.rows_written}\n")

    def cleanup(self) -> None:
        """Close all CSV files and log final output location."""
        if self.tracking_csv_file:
            self.tracking_csv_file.close()
        if self.wheel_csv_file:
            self.wheel_csv_file.close()

        logging.info(f"{TERM_BLUE}✓ Saved run data to {self.run_dir}{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        self.cleanup()


def find_runs(results_dir: Path) -> List[Path]:
    """List recorded run directories, oldest first.

    Raises:
        FileNotFoundError: If results_dir does not exist.
    """
    if not results_dir.is_dir():
        raise FileNotFoundError(f"Results directory not found: {results_dir}")
    return sorted(d for d in results_dir.iterdir() if d.is_dir() and d.name.startswith("run_"))


def read_run_summary(run_dir: Path) -> Dict[str, str]:
    """Parse the summary.txt of a run into a dictionary.

    A run that was interrupted before its summary was written has no
    summary.txt; an empty dictionary is returned for it.
    """
    summary_path = run_dir / "summary.txt"
    if not summary_path.exists():
        return {}

    summary: Dict[str, str] = {}
    with open(summary_path) as f:
        for line in f:
            key, sep, value = line.partition(":")
            if sep:
                summary[key.strip()] = value.strip()
    return summary
