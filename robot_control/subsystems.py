"""Robot subsystems.

Each subsystem wraps one or more actuator channels, named
"<subsystem>.<channel>", and is the only place that calls
Actuator.set_output(). Commands reach the hardware exclusively through the
methods defined here.
"""

import logging
import math
from typing import Callable, Optional

from .command import Subsystem
from .interfaces import Actuator, PoseSource, WheelSpeedSource
from .model import DifferentialDriveKinematics, Pose2d, WheelSpeeds


def _clamp(value: float, limit: float) -> float:
    return max(-limit, min(limit, value))


class ToggleOutput:
    """Binary auxiliary output such as a relay or a pneumatic shifter.

    Not a subsystem: it has no default behavior and is only flipped by
    instant commands bound to a button edge.
    """

    def __init__(self, actuator: Actuator, channel: str, on: bool = False):
        self._actuator = actuator
        self.channel = channel
        self.on = on
        self._actuator.set_output(self.channel, 1.0 if on else 0.0)

    def set(self, on: bool) -> None:
        self.on = on
        self._actuator.set_output(self.channel, 1.0 if on else 0.0)

    def toggle(self) -> None:
        self.set(not self.on)
        logging.debug(f"{self.channel} -> {'on' if self.on else 'off'}")


class Drivetrain(Subsystem):
    """Differential drivetrain with voltage and arcade power control.

    Pose and wheel speed feedback come from external sources (odometry,
    encoders) and may be unavailable for a cycle, in which case they read
    as None.
    """

    def __init__(
        self,
        actuator: Actuator,
        kinematics: DifferentialDriveKinematics,
        pose_source: PoseSource,
        wheel_speed_source: WheelSpeedSource,
        yaw_source: Optional[Callable[[], float]] = None,
        max_voltage: float = 12.0,
        name: str = "drivetrain",
    ):
        """Initialize the drivetrain.

        Args:
            actuator: Actuator sink for "<name>.left" / "<name>.right"
            kinematics: Track-width kinematic model
            pose_source: Returns the estimated pose, or None
            wheel_speed_source: Returns wheel speeds in m/s, or None
            yaw_source: Returns the gyro yaw in degrees. Defaults to the
                pose heading converted to degrees.
            max_voltage: Clamp applied to tank_drive_volts (V)
            name: Subsystem name
        """
        super().__init__(name)
        self._actuator = actuator
        self.kinematics = kinematics
        self._pose_source = pose_source
        self._wheel_speed_source = wheel_speed_source
        self._yaw_source = yaw_source
        self.max_voltage = max_voltage
        self.gear_shifter = ToggleOutput(actuator, f"{name}.shifter")

    @property
    def pose(self) -> Optional[Pose2d]:
        return self._pose_source()

    @property
    def wheel_speeds(self) -> Optional[WheelSpeeds]:
        return self._wheel_speed_source()

    @property
    def yaw(self) -> float:
        """Heading in degrees (CCW positive)."""
        if self._yaw_source is not None:
            return self._yaw_source()
        pose = self.pose
        return math.degrees(pose.heading) if pose is not None else 0.0

    def tank_drive_volts(self, left: float, right: float) -> None:
        """Apply voltages to the left and right sides (V)."""
        self._actuator.set_output(f"{self.name}.left", _clamp(left, self.max_voltage))
        self._actuator.set_output(f"{self.name}.right", _clamp(right, self.max_voltage))

    def arcade_drive(self, forward: float, turn: float) -> None:
        """Drive with normalized forward and turn powers in [-1, 1].

        Sides are desaturated together so the turn ratio is preserved when
        the sum exceeds full power.
        """
        left = forward - turn
        right = forward + turn
        magnitude = max(abs(left), abs(right))
        if magnitude > 1.0:
            left /= magnitude
            right /= magnitude
        self._actuator.set_output(f"{self.name}.left_power", left)
        self._actuator.set_output(f"{self.name}.right_power", right)

    def stop(self) -> None:
        self.tank_drive_volts(0.0, 0.0)


class PowerSubsystem(Subsystem):
    """Single-channel open-loop mechanism driven by a normalized power."""

    def __init__(self, actuator: Actuator, name: str):
        super().__init__(name)
        self._actuator = actuator

    def run(self, power: float) -> None:
        """Run the mechanism at a normalized power in [-1, 1]."""
        self._actuator.set_output(f"{self.name}.motor", _clamp(power, 1.0))

    def stop(self) -> None:
        self.run(0.0)


class Intake(PowerSubsystem):
    """Roller intake. The follower motor mirrors the leader in hardware."""

    def __init__(self, actuator: Actuator, name: str = "intake"):
        super().__init__(actuator, name)


class Pivot(PowerSubsystem):
    """Intake arm pivot."""

    def __init__(self, actuator: Actuator, name: str = "pivot"):
        super().__init__(actuator, name)


class Climber(PowerSubsystem):
    """Winch climber."""

    def __init__(self, actuator: Actuator, name: str = "climber"):
        super().__init__(actuator, name)


class Storage(Subsystem):
    """Ball storage: a conveyor belt and an upper and lower feeder wheel."""

    def __init__(self, actuator: Actuator, name: str = "storage"):
        super().__init__(name)
        self._actuator = actuator

    def run(self, belt: float, upper: float, lower: float) -> None:
        self._actuator.set_output(f"{self.name}.belt", _clamp(belt, 1.0))
        self._actuator.set_output(f"{self.name}.upper", _clamp(upper, 1.0))
        self._actuator.set_output(f"{self.name}.lower", _clamp(lower, 1.0))

    def stop(self) -> None:
        self.run(0.0, 0.0, 0.0)


class Shooter(Subsystem):
    """Flywheel shooter driven by voltage, with measured speed in RPM."""

    def __init__(
        self,
        actuator: Actuator,
        speed_source: Callable[[], float],
        max_voltage: float = 12.0,
        name: str = "shooter",
    ):
        super().__init__(name)
        self._actuator = actuator
        self._speed_source = speed_source
        self.max_voltage = max_voltage

    @property
    def rpm(self) -> float:
        return self._speed_source()

    def set_voltage(self, volts: float) -> None:
        self._actuator.set_output(f"{self.name}.flywheel", _clamp(volts, self.max_voltage))

    def stop(self) -> None:
        self.set_voltage(0.0)
