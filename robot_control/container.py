"""Robot container: subsystems, default commands and operator bindings.

The container is the single owned context object of a robot process. It
constructs every subsystem and the scheduler once, installs a default
command on every subsystem, binds operator buttons, and validates the
result before the control loop starts.
"""

import logging
import time
from typing import Callable, Optional

from . import config
from .autonomous import (
    AutonomousRoutine,
    build_autonomous_routine,
    default_feedforward,
    default_limits,
)
from .command import RunCommand
from .commands import (
    Drive,
    GyroTurn,
    PneumaticShift,
    RunClimber,
    RunIntake,
    RunPivot,
    RunShooter,
    RunStorage,
    SwitchRelay,
)
from .interfaces import (
    Actuator,
    InputSource,
    PoseSource,
    TelemetrySink,
    WheelSpeedSource,
    XboxAxis,
    XboxButton,
    YawErrorSource,
)
from .model import DifferentialDriveKinematics, Pose2d
from .scheduler import CommandScheduler
from .subsystems import Climber, Drivetrain, Intake, Pivot, Shooter, Storage, ToggleOutput
from .triggers import JoystickButton


def _log_telemetry(name: str, value: float) -> None:
    logging.debug(f"{name} = {value:.3f}")


class RobotContainer:
    """Owns the scheduler, subsystems and operator bindings.

    Attributes:
        scheduler: The robot's CommandScheduler
        drivetrain, intake, storage, pivot, shooter, climber: Subsystems
        relay: Auxiliary relay output toggled by the driver
    """

    def __init__(
        self,
        actuator: Actuator,
        inputs: InputSource,
        pose_source: PoseSource,
        wheel_speed_source: WheelSpeedSource,
        shooter_speed_source: Callable[[], float] = lambda: 0.0,
        yaw_error_source: YawErrorSource = lambda: None,
        telemetry: Optional[TelemetrySink] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Build the robot.

        Args:
            actuator: Sink for every actuator channel
            inputs: Operator controllers
            pose_source: Odometry pose, or None when unavailable
            wheel_speed_source: Wheel speeds (m/s), or None when unavailable
            shooter_speed_source: Flywheel speed (RPM)
            yaw_error_source: Vision yaw error (degrees), or None without target
            telemetry: Dashboard sink. Default: debug logging
            clock: Monotonic time source for autonomous routines

        Raises:
            MissingDefaultCommand: If a subsystem was left without a default
        """
        self.inputs = inputs
        self.clock = clock
        self.telemetry = telemetry or _log_telemetry
        self.yaw_error_source = yaw_error_source

        self.scheduler = CommandScheduler()
        self.feedforward = default_feedforward()

        self.drivetrain = Drivetrain(
            actuator,
            DifferentialDriveKinematics(config.TRACK_WIDTH),
            pose_source,
            wheel_speed_source,
            max_voltage=config.MAX_OUTPUT_VOLTAGE,
        )
        self.intake = Intake(actuator)
        self.storage = Storage(actuator)
        self.pivot = Pivot(actuator)
        self.shooter = Shooter(actuator, shooter_speed_source, max_voltage=config.MAX_OUTPUT_VOLTAGE)
        self.climber = Climber(actuator)
        self.relay = ToggleOutput(actuator, "relay")

        self.scheduler.register_subsystem(
            self.drivetrain, self.intake, self.storage, self.pivot, self.shooter, self.climber
        )

        self.configure_default_commands()
        self.configure_button_bindings()
        self.scheduler.validate()

    def axis(self, device_id: int, axis_id: int) -> Callable[[], float]:
        """Supplier reading one controller axis."""
        return lambda: self.inputs.get_axis(device_id, int(axis_id))

    def button(self, device_id: int, button_id: int) -> JoystickButton:
        return JoystickButton(self.scheduler, self.inputs, device_id, button_id)

    def configure_default_commands(self) -> None:
        primary = config.PRIMARY_CONTROLLER
        secondary = config.SECONDARY_CONTROLLER
        scheduler = self.scheduler

        scheduler.set_default_command(
            self.drivetrain,
            Drive(
                self.drivetrain,
                self.axis(primary, config.DRIVE_FORWARD_AXIS),
                self.axis(primary, config.DRIVE_TURN_AXIS),
            ),
        )
        scheduler.set_default_command(self.pivot, RunPivot(self.pivot, config.PIVOT_HOLD_POWER))
        scheduler.set_default_command(
            self.intake,
            RunIntake(
                self.intake,
                self.axis(primary, XboxAxis.LEFT_TRIGGER),
                self.axis(primary, XboxAxis.RIGHT_TRIGGER),
            ),
        )
        scheduler.set_default_command(
            self.storage,
            RunStorage(
                self.storage,
                self.axis(secondary, XboxAxis.LEFT_TRIGGER),
                self.axis(secondary, XboxAxis.RIGHT_TRIGGER),
                self.axis(secondary, XboxAxis.RIGHT_Y),
                self.axis(secondary, XboxAxis.LEFT_Y),
            ),
        )
        scheduler.set_default_command(
            self.shooter, RunCommand(self.shooter.stop, self.shooter, name="ShooterIdle")
        )
        scheduler.set_default_command(
            self.climber, RunCommand(self.climber.stop, self.climber, name="ClimberIdle")
        )

    def configure_button_bindings(self) -> None:
        primary = config.PRIMARY_CONTROLLER
        secondary = config.SECONDARY_CONTROLLER

        self.button(primary, XboxButton.A).when_pressed(PneumaticShift(self.drivetrain.gear_shifter))
        self.button(primary, XboxButton.BUMPER_LEFT).while_held(
            RunPivot(self.pivot, config.PIVOT_MANUAL_POWER)
        )
        self.button(primary, XboxButton.BUMPER_RIGHT).while_held(
            RunPivot(self.pivot, -config.PIVOT_MANUAL_POWER)
        )
        self.button(primary, XboxButton.X).when_pressed(SwitchRelay(self.relay))
        self.button(primary, XboxButton.Y).when_pressed(
            GyroTurn(
                self.drivetrain,
                config.GYRO_TURN_KP,
                config.GYRO_TURN_MIN_POWER,
                self.yaw_error_source,
                self.telemetry,
            )
        )
        self.button(secondary, XboxButton.X).while_held(
            RunShooter(self.shooter, config.SHOOTER_TARGET_RPM)
        )
        self.button(secondary, XboxButton.A).while_held(
            RunClimber(self.climber, config.CLIMBER_POWER)
        )
        self.button(secondary, XboxButton.B).while_held(
            RunClimber(self.climber, -config.CLIMBER_POWER)
        )

    def get_autonomous_routine(self, recorder=None) -> AutonomousRoutine:
        """Build the stock autonomous S-curve routine.

        Raises:
            InfeasibleTrajectory: If the stock path violates the limits
        """
        return build_autonomous_routine(
            self.drivetrain,
            Pose2d(*config.AUTO_START_POSE),
            config.AUTO_INTERIOR_WAYPOINTS,
            Pose2d(*config.AUTO_END_POSE),
            default_limits(self.drivetrain, self.feedforward),
            feedforward=self.feedforward,
            clock=self.clock,
            recorder=recorder,
        )
