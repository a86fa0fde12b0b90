"""Post-run visualization of recorded autonomous runs.

This module provides:
- CSV loading of tracking.csv / wheels.csv into numpy arrays
- Reference vs. actual path plot
- Tracking error over time
- Wheel speed and voltage plots
"""

import csv
import logging
from pathlib import Path
from typing import Dict, List

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .config import PLOT_ACTUAL_COLOR, PLOT_REFERENCE_COLOR, TERM_BLUE, TERM_RESET


def load_csv_to_dict(csv_path: Path) -> Dict[str, np.ndarray]:
    """Load CSV file into dictionary of numpy arrays.

    Non-numeric or empty values become NaN.

    Args:
        csv_path: Path to CSV file.

    Returns:
        Dictionary mapping column names to numpy arrays.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        data: Dict[str, List[float]] = {key: [] for key in reader.fieldnames or []}
        for row in reader:
            for key, value in row.items():
                try:
                    data[key].append(float(value))
                except (ValueError, TypeError):
                    data[key].append(np.nan)

    return {key: np.array(values) for key, values in data.items()}


def style_axis(ax: Axes, title: str = "", xlabel: str = "", ylabel: str = "") -> None:
    """Apply consistent styling to a matplotlib axis."""
    if title:
        ax.set_title(title, fontweight="bold")
    if xlabel:
        ax.set_xlabel(xlabel)
    if ylabel:
        ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3, linestyle="--", linewidth=0.5)


def plot_path(tracking: Dict[str, np.ndarray]) -> Figure:
    """Plot the reference path against the measured path."""
    fig, ax = plt.subplots(figsize=(10, 8))

    ax.plot(tracking["x_ref"], tracking["y_ref"], "-", color=PLOT_REFERENCE_COLOR,
            linewidth=2, label="Reference")
    ax.plot(tracking["x"], tracking["y"], "--", color=PLOT_ACTUAL_COLOR,
            linewidth=1.5, label="Actual")
    if len(tracking["x_ref"]):
        ax.plot(tracking["x_ref"][0], tracking["y_ref"][0], "go", markersize=10, label="Start")
        ax.plot(tracking["x_ref"][-1], tracking["y_ref"][-1], "r*", markersize=15, label="End")

    style_axis(ax, title="Path: Reference vs Actual", xlabel="X Position (m)", ylabel="Y Position (m)")
    ax.legend(loc="best")
    ax.axis("equal")
    return fig


def plot_tracking_error(tracking: Dict[str, np.ndarray]) -> Figure:
    """Plot position and heading error over time."""
    elapsed = tracking["elapsed"]
    error_l2 = np.hypot(tracking["x_ref"] - tracking["x"], tracking["y_ref"] - tracking["y"])
    heading_error = np.degrees(
        np.arctan2(
            np.sin(tracking["theta_ref"] - tracking["theta"]),
            np.cos(tracking["theta_ref"] - tracking["theta"]),
        )
    )

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax1.plot(elapsed, error_l2, color=PLOT_ACTUAL_COLOR, linewidth=2, label="Position error")
    if len(error_l2):
        ax1.axhline(y=np.mean(error_l2), color=PLOT_REFERENCE_COLOR, linestyle="--",
                    label=f"Mean: {np.mean(error_l2):.3f} m")
    style_axis(ax1, title="Tracking Error vs Time", ylabel="Position Error (m)")
    ax1.legend(loc="best")

    ax2.plot(elapsed, heading_error, color=PLOT_ACTUAL_COLOR, linewidth=1.5)
    ax2.axhline(y=0, color="k", linestyle="--", alpha=0.3)
    style_axis(ax2, xlabel="Elapsed Time (s)", ylabel="Heading Error (deg)")

    fig.tight_layout()
    return fig


def plot_wheel_control(wheels: Dict[str, np.ndarray]) -> Figure:
    """Plot wheel speed targets, measured speeds and applied voltages."""
    elapsed = wheels["elapsed"]
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    for side, style in (("left", "-"), ("right", "--")):
        ax1.plot(elapsed, wheels[f"{side}_target"], style, color=PLOT_REFERENCE_COLOR,
                 label=f"{side.capitalize()} target")
        ax1.plot(elapsed, wheels[f"{side}_measured"], style, color=PLOT_ACTUAL_COLOR,
                 label=f"{side.capitalize()} measured")
        ax2.plot(elapsed, wheels[f"{side}_ff"], style, color=PLOT_REFERENCE_COLOR, alpha=0.6,
                 label=f"{side.capitalize()} feedforward")
        ax2.plot(elapsed, wheels[f"{side}_volts"], style, color=PLOT_ACTUAL_COLOR,
                 label=f"{side.capitalize()} applied")

    style_axis(ax1, title="Wheel Control", ylabel="Wheel Speed (m/s)")
    ax1.legend(loc="best")
    style_axis(ax2, xlabel="Elapsed Time (s)", ylabel="Voltage (V)")
    ax2.legend(loc="best")

    fig.tight_layout()
    return fig


def plot_run_summary(run_dir: Path, save_plots: bool = False, show_plots: bool = True) -> Dict[str, Figure]:
    """Generate every plot of a recorded run.

    Args:
        run_dir: Run directory containing tracking.csv and wheels.csv.
        save_plots: If True, save each figure as PNG into run_dir.
        show_plots: If True, display the figures interactively.

    Returns:
        Dictionary mapping plot names to figures.

    Raises:
        FileNotFoundError: If a CSV file is missing.
    """
    tracking = load_csv_to_dict(run_dir / "tracking.csv")
    wheels = load_csv_to_dict(run_dir / "wheels.csv")

    figures = {
        "path": plot_path(tracking),
        "tracking_error": plot_tracking_error(tracking),
        "wheel_control": plot_wheel_control(wheels),
    }

    if save_plots:
        for name, fig in figures.items():
            filepath = run_dir / f"{name}.png"
            fig.savefig(filepath, dpi=150, bbox_inches="tight")
            logging.info(f"{TERM_BLUE}✓ Saved figure to {filepath}{TERM_RESET}")

    if show_plots:
        plt.show()
    else:
        for fig in figures.values():
            plt.close(fig)

    return figures
