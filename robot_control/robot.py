#!/usr/bin/env python3
"""
Robot loop runner and simulated robot.

This module provides the external periodic caller of the scheduler. On a
real robot the framework calls run_cycle() every control period; here the
Robot class does it against the simulated drivetrain, which lets the whole
stack (bindings, scheduler, autonomous tracking, data recording) run on a
workstation.
"""

import logging
import math
import time
from typing import Dict, Optional, Tuple

from . import config
from .autonomous import default_feedforward
from .container import RobotContainer
from .data_collector import DataCollector
from .model import DifferentialDriveKinematics, Pose2d
from .sim import SimDrivetrain
from .visualization import plot_run_summary


class CustomFormatter(logging.Formatter):
    """Custom logging formatter that removes timestamps from INFO messages.

    This formatter provides clean console output by showing INFO messages without
    timestamps while preserving full context for WARNING, ERROR, and DEBUG messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record based on its level.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps. If False, show INFO
                 without timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
        logger = logging.getLogger()
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)


class ScriptedInput:
    """Input source holding fixed axis and button values.

    Values are set by the caller between cycles; unset inputs read as
    0.0 / False.
    """

    def __init__(self) -> None:
        self.axes: Dict[Tuple[int, int], float] = {}
        self.buttons: Dict[Tuple[int, int], bool] = {}

    def get_axis(self, device_id: int, axis_id: int) -> float:
        return self.axes.get((device_id, int(axis_id)), 0.0)

    def get_button(self, device_id: int, button_id: int) -> bool:
        return self.buttons.get((device_id, int(button_id)), False)

    def set_axis(self, device_id: int, axis_id: int, value: float) -> None:
        if not -1.0 <= value <= 1.0:
            raise ValueError(f"Axis value out of range: {value}")
        self.axes[(device_id, int(axis_id))] = value

    def set_button(self, device_id: int, button_id: int, pressed: bool) -> None:
        self.buttons[(device_id, int(button_id))] = pressed


class Robot:
    """Simulated robot: container + drivetrain plant + periodic loop.

    Attributes:
        sim: Simulated drivetrain (also the actuator sink)
        inputs: Scripted operator input
        container: RobotContainer built against the simulation
        period: Control period (seconds)
    """

    def __init__(self, period: float = config.CONTROL_PERIOD, start_pose: Optional[Pose2d] = None):
        self.period = period
        self.sim = SimDrivetrain(
            default_feedforward(),
            DifferentialDriveKinematics(config.TRACK_WIDTH),
            pose=start_pose or Pose2d(*config.AUTO_START_POSE),
        )
        self.inputs = ScriptedInput()
        self.container = RobotContainer(
            self.sim,
            self.inputs,
            self.sim.get_pose,
            self.sim.get_wheel_speeds,
            clock=lambda: self.sim.time,
        )

    def step(self) -> None:
        """Run one control cycle, then advance the plant by one period."""
        self.container.scheduler.run_cycle()
        self.sim.step(self.period)

    def run_autonomous(self, recorder: Optional[DataCollector] = None, timeout: float = 30.0):
        """Run the stock autonomous routine to completion.

        Args:
            recorder: Optional DataCollector for per-cycle diagnostics
            timeout: Simulated seconds after which the routine is canceled

        Returns:
            The finished AutonomousRoutine
        """
        routine = self.container.get_autonomous_routine(recorder=recorder)
        routine.start(self.container.scheduler)
        deadline = self.sim.time + timeout

        while not routine.is_complete:
            if self.sim.time >= deadline:
                logging.error(f"Autonomous routine timed out after {timeout:.1f}s")
                self.container.scheduler.cancel(routine.command)
                break
            self.step()

        # One more cycle so the drivetrain default takes over
        self.step()
        return routine


def main(output_dir: str = ".", record: bool = True, plot: bool = False) -> int:
    """Run the stock autonomous routine in simulation.

    Args:
        output_dir: Base directory for recorded runs
        record: If True, record the run with DataCollector
        plot: If True, plot the recorded run when it finishes

    Returns:
        Process exit code (0 on success)
    """
    robot = Robot()
    end = Pose2d(*config.AUTO_END_POSE)
    started = time.perf_counter()

    if record:
        with DataCollector(output_dir=output_dir) as recorder:
            routine = robot.run_autonomous(recorder=recorder)
            final_error = _distance(robot.sim.pose, end)
            recorder.log_summary(_outcome(routine), routine.trajectory.total_time, final_error)
        if plot:
            plot_run_summary(recorder.run_dir, save_plots=True, show_plots=True)
    else:
        routine = robot.run_autonomous()
        final_error = _distance(robot.sim.pose, end)

    color = config.TERM_BLUE if routine.succeeded else config.TERM_ORANGE
    logging.info(
        f"{color}→ Outcome: {_outcome(routine)}  Final error: {final_error * 1000:.1f}mm  "
        f"Duration: {routine.trajectory.total_time:.2f}s  "
        f"(simulated in {time.perf_counter() - started:.2f}s){config.TERM_RESET}"
    )
    return 0 if routine.succeeded else 1


def _distance(a: Pose2d, b: Pose2d) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def _outcome(routine) -> str:
    if routine.succeeded:
        return "complete"
    if routine.failed:
        return f"failed: {routine.error}"
    return "interrupted"
