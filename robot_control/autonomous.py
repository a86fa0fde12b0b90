"""Autonomous trajectory tracking.

TrajectoryCommand is the closed-loop tracking controller. Each cycle it:

1. Samples the trajectory at the elapsed time
2. Applies the Ramsete correction from the pose error
3. Converts the corrected chassis speeds to wheel speeds (track width)
4. Sums per-wheel feedforward and per-wheel PID feedback
5. Clamps and emits the voltages to the drivetrain

Once the elapsed time reaches the trajectory duration it stops emitting and
reports finished; end() then sends zero volts to both wheels exactly once.

AutonomousRoutine wraps a generated trajectory and its command and reports
completion or failure to the robot loop.
"""

import logging
import time
from typing import Callable, Dict, Optional, Sequence, Tuple

from . import config
from .command import Command
from .errors import FeedbackUnavailable
from .follower import RamseteController
from .model import ChassisSpeeds, Pose2d, WheelSpeeds
from .motor_controller import PIDController, SimpleMotorFeedforward
from .path import (
    DifferentialDriveVoltageConstraint,
    Trajectory,
    TrajectoryLimits,
    generate_trajectory,
)
from .subsystems import Drivetrain

Clock = Callable[[], float]


class TrajectoryCommand(Command):
    """Follow a trajectory with Ramsete + per-wheel feedforward and PID.

    Attributes:
        trajectory: Reference trajectory (immutable)
        error: Set when the command fails (e.g. FeedbackUnavailable)
        completed: True once the trajectory ran to its end
    """

    def __init__(
        self,
        trajectory: Trajectory,
        drivetrain: Drivetrain,
        controller: RamseteController,
        feedforward: SimpleMotorFeedforward,
        left_controller: PIDController,
        right_controller: PIDController,
        clock: Clock = time.monotonic,
        max_output_voltage: float = config.MAX_OUTPUT_VOLTAGE,
        recorder=None,
    ):
        """Initialize the trajectory command.

        Args:
            trajectory: Trajectory to follow
            drivetrain: Drivetrain providing feedback and accepting volts
            controller: Ramsete pose-tracking law
            feedforward: Drivetrain feedforward (V, m/s, m/s²)
            left_controller: Left wheel velocity loop
            right_controller: Right wheel velocity loop
            clock: Monotonic time source in seconds
            max_output_voltage: Clamp on each emitted voltage (V)
            recorder: Optional DataCollector receiving per-cycle diagnostics
        """
        super().__init__(drivetrain, name="TrajectoryCommand")
        self.trajectory = trajectory
        self.drivetrain = drivetrain
        self.controller = controller
        self.feedforward = feedforward
        self.left_controller = left_controller
        self.right_controller = right_controller
        self._clock = clock
        self.max_output_voltage = max_output_voltage
        self.recorder = recorder

        self.error: Optional[Exception] = None
        self.completed = False

        self._start_time: Optional[float] = None
        self._elapsed = 0.0
        self._prev_time = 0.0
        self._prev_targets = WheelSpeeds()
        self._last_volts: Tuple[float, float] = (0.0, 0.0)
        self._missed_feedback = 0
        self._diagnostics: Dict[str, float] = {}

    def initialize(self) -> None:
        # Reset the time cursor so the command can be re-run
        self._start_time = self._clock()
        self._elapsed = 0.0
        self._prev_time = 0.0
        initial = self.trajectory.sample(0.0)
        self._prev_targets = self.drivetrain.kinematics.to_wheel_speeds(
            ChassisSpeeds(initial.velocity, initial.angular_velocity)
        )
        self._last_volts = (0.0, 0.0)
        self._missed_feedback = 0
        self.error = None
        self.completed = False
        self.left_controller.reset()
        self.right_controller.reset()
        logging.info(
            f"{config.TERM_BLUE}✓ Following trajectory ({self.trajectory.total_time:.2f}s){config.TERM_RESET}"
        )

    def execute(self) -> None:
        self._elapsed = self._clock() - self._start_time
        if self._elapsed >= self.trajectory.total_time:
            return

        pose = self.drivetrain.pose
        speeds = self.drivetrain.wheel_speeds
        if pose is None or speeds is None:
            self._missed_feedback += 1
            if self._missed_feedback == 1:
                logging.warning("Feedback unavailable, holding last voltages for one cycle")
                self._emit(*self._last_volts)
                return
            self.error = FeedbackUnavailable(
                f"Pose/wheel speed feedback missing for {self._missed_feedback} consecutive cycles"
            )
            raise self.error
        self._missed_feedback = 0

        dt = self._elapsed - self._prev_time
        reference = self.trajectory.sample(self._elapsed)
        chassis = self.controller.calculate(
            pose, reference.pose, reference.velocity, reference.angular_velocity
        )
        targets = self.drivetrain.kinematics.to_wheel_speeds(chassis)

        if dt > 0:
            left_accel = (targets.left - self._prev_targets.left) / dt
            right_accel = (targets.right - self._prev_targets.right) / dt
        else:
            left_accel = right_accel = 0.0

        left_ff = self.feedforward.calculate(targets.left, left_accel)
        right_ff = self.feedforward.calculate(targets.right, right_accel)
        left_fb = self.left_controller.calculate(speeds.left, targets.left)
        right_fb = self.right_controller.calculate(speeds.right, targets.right)

        left = self._clamp(left_ff + left_fb)
        right = self._clamp(right_ff + right_fb)
        self._emit(left, right)

        self._prev_time = self._elapsed
        self._prev_targets = targets

        self._diagnostics = {
            "elapsed": self._elapsed,
            "x_ref": reference.pose.x,
            "y_ref": reference.pose.y,
            "theta_ref": reference.pose.heading,
            "x": pose.x,
            "y": pose.y,
            "theta": pose.heading,
            "v_ref": reference.velocity,
            "omega_ref": reference.angular_velocity,
            "v_cmd": chassis.v,
            "omega_cmd": chassis.omega,
            "left_target": targets.left,
            "right_target": targets.right,
            "left_measured": speeds.left,
            "right_measured": speeds.right,
            "left_ff": left_ff,
            "right_ff": right_ff,
            "left_volts": left,
            "right_volts": right,
        }
        if self.recorder is not None:
            self.recorder.log_tracking(self._diagnostics)

    def is_finished(self) -> bool:
        return self._elapsed >= self.trajectory.total_time

    def end(self, interrupted: bool) -> None:
        self.drivetrain.tank_drive_volts(0.0, 0.0)
        self._last_volts = (0.0, 0.0)
        self.completed = not interrupted
        if interrupted:
            logging.warning(f"Trajectory interrupted at t={self._elapsed:.2f}s")
        else:
            logging.info(f"{config.TERM_BLUE}✓ Trajectory complete{config.TERM_RESET}")

    def get_diagnostics(self) -> Dict[str, float]:
        """Diagnostics of the last tracking cycle."""
        return dict(self._diagnostics)

    def _clamp(self, volts: float) -> float:
        return max(-self.max_output_voltage, min(self.max_output_voltage, volts))

    def _emit(self, left: float, right: float) -> None:
        self._last_volts = (left, right)
        self.drivetrain.tank_drive_volts(left, right)


class AutonomousRoutine:
    """A generated trajectory and the command that follows it.

    Usage:
        routine = build_autonomous_routine(drivetrain, start, waypoints, end, limits)
        routine.start(scheduler)
        while not routine.is_complete:
            scheduler.run_cycle()
    """

    def __init__(self, trajectory: Trajectory, command: TrajectoryCommand):
        self.trajectory = trajectory
        self.command = command
        self._scheduler = None

    def start(self, scheduler) -> None:
        """Schedule the routine, restarting it if it already ran."""
        self._scheduler = scheduler
        scheduler.schedule(self.command)

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.is_scheduled(self.command)

    @property
    def succeeded(self) -> bool:
        return self.command.completed

    @property
    def failed(self) -> bool:
        return self.command.error is not None

    @property
    def error(self) -> Optional[Exception]:
        return self.command.error

    @property
    def is_complete(self) -> bool:
        """True once the routine has stopped running, successfully or not."""
        return self._scheduler is not None and not self.is_running


def build_autonomous_routine(
    drivetrain: Drivetrain,
    start: Pose2d,
    waypoints: Sequence[Tuple[float, float]],
    end: Pose2d,
    limits: TrajectoryLimits,
    feedforward: Optional[SimpleMotorFeedforward] = None,
    controller: Optional[RamseteController] = None,
    clock: Clock = time.monotonic,
    recorder=None,
) -> AutonomousRoutine:
    """Generate a trajectory and wrap it in a tracking routine.

    Args:
        drivetrain: Drivetrain to command
        start: Start pose
        waypoints: Interior (x, y) waypoints (meters)
        end: End pose
        limits: Velocity/acceleration limits and constraints
        feedforward: Drivetrain feedforward. Default: config gains
        controller: Ramsete controller. Default: config gains
        clock: Monotonic time source in seconds
        recorder: Optional DataCollector

    Returns:
        AutonomousRoutine ready to start

    Raises:
        InfeasibleTrajectory: Before any motion, if the path cannot be generated
    """
    trajectory = generate_trajectory(start, waypoints, end, limits)
    command = TrajectoryCommand(
        trajectory,
        drivetrain,
        controller or RamseteController(config.RAMSETE_B, config.RAMSETE_ZETA),
        feedforward or default_feedforward(),
        wheel_pid(),
        wheel_pid(),
        clock=clock,
        max_output_voltage=drivetrain.max_voltage,
        recorder=recorder,
    )
    return AutonomousRoutine(trajectory, command)


def default_feedforward() -> SimpleMotorFeedforward:
    return SimpleMotorFeedforward(
        config.KS_VOLTS,
        config.KV_VOLT_SECONDS_PER_METER,
        config.KA_VOLT_SECONDS_SQUARED_PER_METER,
    )


def wheel_pid() -> PIDController:
    return PIDController(
        config.WHEEL_KP,
        config.WHEEL_KI,
        config.WHEEL_KD,
        period=config.CONTROL_PERIOD,
        integral_limit=config.WHEEL_INTEGRAL_LIMIT,
    )


def default_limits(drivetrain: Drivetrain, feedforward: Optional[SimpleMotorFeedforward] = None):
    """Low-gear limits with the autonomous voltage constraint."""
    constraint = DifferentialDriveVoltageConstraint(
        feedforward or default_feedforward(),
        drivetrain.kinematics.track_width,
        config.AUTO_MAX_VOLTAGE,
    )
    return TrajectoryLimits(
        max_velocity=config.LOW_GEAR_MAX_VELOCITY,
        max_acceleration=config.LOW_GEAR_MAX_ACCELERATION,
        constraints=[constraint],
    )
