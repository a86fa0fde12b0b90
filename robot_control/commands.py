"""Teleoperated and mechanism commands.

Operator inputs reach these commands as plain suppliers (callables), read
once per execute(). Every command that drives a mechanism stops it in
end(), so an evicted command never leaves an actuator running.
"""

import logging
import math
from typing import Callable, Optional

from . import config
from .command import Command, InstantCommand
from .interfaces import TelemetrySink, YawErrorSource
from .motor_controller import PIDController, SimpleMotorFeedforward
from .subsystems import Drivetrain, PowerSubsystem, Shooter, Storage, ToggleOutput

Supplier = Callable[[], float]


def apply_deadzone(value: float, deadzone: float = config.INPUT_DEADZONE) -> float:
    """
    Apply deadzone to eliminate stick drift.

    Input below the threshold returns 0. Input above it is rescaled so the
    deadzone edge maps to 0 and full deflection stays 1.0.
    """
    if abs(value) < deadzone:
        return 0.0
    sign = 1.0 if value > 0 else -1.0
    return sign * (abs(value) - deadzone) / (1.0 - deadzone)


class Drive(Command):
    """Arcade teleop drive. Default command of the drivetrain."""

    def __init__(self, drivetrain: Drivetrain, forward: Supplier, turn: Supplier):
        super().__init__(drivetrain)
        self.drivetrain = drivetrain
        self._forward = forward
        self._turn = turn

    def execute(self) -> None:
        self.drivetrain.arcade_drive(
            apply_deadzone(self._forward()), apply_deadzone(self._turn())
        )

    def end(self, interrupted: bool) -> None:
        self.drivetrain.arcade_drive(0.0, 0.0)


class RunPower(Command):
    """Run a single-channel mechanism at a fixed power."""

    def __init__(self, subsystem: PowerSubsystem, power: float, name: Optional[str] = None):
        super().__init__(subsystem, name=name)
        self.subsystem = subsystem
        self.power = power

    def execute(self) -> None:
        self.subsystem.run(self.power)

    def end(self, interrupted: bool) -> None:
        self.subsystem.stop()


class RunPivot(RunPower):
    """Drive the intake pivot at a fixed power (hold or manual move)."""


class RunClimber(RunPower):
    """Drive the climber winch at a fixed power."""


class RunIntake(Command):
    """Run the intake rollers from the driver's triggers (right in, left out)."""

    def __init__(self, intake: PowerSubsystem, reverse: Supplier, forward: Supplier):
        super().__init__(intake)
        self.intake = intake
        self._reverse = reverse
        self._forward = forward

    def execute(self) -> None:
        self.intake.run(self._forward() - self._reverse())

    def end(self, interrupted: bool) -> None:
        self.intake.stop()


class RunStorage(Command):
    """Run storage from the operator controller.

    Triggers drive the belt (right forward, left reverse); the right and
    left stick Y axes drive the upper and lower feeder wheels.
    """

    def __init__(
        self,
        storage: Storage,
        belt_reverse: Supplier,
        belt_forward: Supplier,
        upper: Supplier,
        lower: Supplier,
    ):
        super().__init__(storage)
        self.storage = storage
        self._belt_reverse = belt_reverse
        self._belt_forward = belt_forward
        self._upper = upper
        self._lower = lower

    def execute(self) -> None:
        self.storage.run(
            self._belt_forward() - self._belt_reverse(),
            apply_deadzone(self._upper()),
            apply_deadzone(self._lower()),
        )

    def end(self, interrupted: bool) -> None:
        self.storage.stop()


class RunShooter(Command):
    """Spin the flywheel to a target speed with feedforward + P feedback."""

    def __init__(
        self,
        shooter: Shooter,
        target_rpm: float,
        feedforward: Optional[SimpleMotorFeedforward] = None,
        controller: Optional[PIDController] = None,
    ):
        super().__init__(shooter)
        self.shooter = shooter
        self.target_rpm = target_rpm
        self.feedforward = feedforward or SimpleMotorFeedforward(
            config.SHOOTER_KS_VOLTS, config.SHOOTER_KV_VOLTS_PER_RPM
        )
        self.controller = controller or PIDController(
            config.SHOOTER_KP, period=config.CONTROL_PERIOD
        )

    def initialize(self) -> None:
        self.controller.reset()

    def execute(self) -> None:
        volts = self.feedforward.calculate(self.target_rpm) + self.controller.calculate(
            self.shooter.rpm, self.target_rpm
        )
        self.shooter.set_voltage(volts)

    def end(self, interrupted: bool) -> None:
        self.shooter.stop()


class SwitchRelay(InstantCommand):
    """Flip a relay once."""

    def __init__(self, relay: ToggleOutput):
        super().__init__(relay.toggle)
        self.relay = relay


class PneumaticShift(InstantCommand):
    """Flip the drivetrain gear shifter once."""

    def __init__(self, shifter: ToggleOutput):
        super().__init__(shifter.toggle)
        self.shifter = shifter


class GyroTurn(Command):
    """Turn in place toward a vision target using the gyro.

    The target heading is latched on initialize as the current yaw plus the
    vision yaw error. Without a target the error reads as 0.0 and the
    command finishes on its first cycle.
    """

    def __init__(
        self,
        drivetrain: Drivetrain,
        kp: float,
        min_power: float,
        yaw_error: YawErrorSource,
        telemetry: Optional[TelemetrySink] = None,
        tolerance: float = config.GYRO_TURN_TOLERANCE_DEGREES,
    ):
        """Initialize the turn command.

        Args:
            drivetrain: Drivetrain to turn
            kp: Power per degree of heading error
            min_power: Minimum turning power to overcome static friction
            yaw_error: Vision yaw error in degrees, or None without a target
            telemetry: Receives the commanded power every cycle
            tolerance: Finish when |error| is within this band (degrees)
        """
        super().__init__(drivetrain)
        self.drivetrain = drivetrain
        self.kp = kp
        self.min_power = min_power
        self._yaw_error = yaw_error
        self._telemetry = telemetry
        self.tolerance = tolerance
        self.target_yaw = 0.0
        self.error = 0.0

    def initialize(self) -> None:
        offset = self._yaw_error()
        if offset is None:
            logging.debug("GyroTurn: no vision target, holding heading")
            offset = 0.0
        self.target_yaw = self.drivetrain.yaw + offset
        self.error = offset

    def execute(self) -> None:
        self.error = self.target_yaw - self.drivetrain.yaw
        if abs(self.error) <= self.tolerance:
            power = 0.0
        else:
            power = self.kp * self.error + math.copysign(self.min_power, self.error)
            power = max(-1.0, min(1.0, power))
        if self._telemetry is not None:
            self._telemetry("gyro_turn_power", power)
        self.drivetrain.arcade_drive(0.0, power)

    def is_finished(self) -> bool:
        return abs(self.error) <= self.tolerance

    def end(self, interrupted: bool) -> None:
        self.drivetrain.arcade_drive(0.0, 0.0)
