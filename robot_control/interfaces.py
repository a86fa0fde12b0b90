"""
Interfaces (protocols) for the external collaborators of the control core.

The actuator layer, operator input devices and vision pipeline are not part
of this package. They are consumed through these protocols and through plain
callables, and are always invoked synchronously from inside run_cycle().
"""

from enum import IntEnum
from typing import Callable, Optional, Protocol

from .model import Pose2d, WheelSpeeds


class XboxButton(IntEnum):
    """Button indices of an Xbox-style controller."""

    A = 1
    B = 2
    X = 3
    Y = 4
    BUMPER_LEFT = 5
    BUMPER_RIGHT = 6
    BACK = 7
    START = 8


class XboxAxis(IntEnum):
    """Axis indices of an Xbox-style controller."""

    LEFT_X = 0
    LEFT_Y = 1
    LEFT_TRIGGER = 2
    RIGHT_TRIGGER = 3
    RIGHT_X = 4
    RIGHT_Y = 5


class Actuator(Protocol):
    """Sink for actuator outputs (motor controllers, relays, solenoids)."""

    def set_output(self, subsystem_id: str, value: float) -> None:
        """
        Apply an output value to an actuator channel.

        Args:
            subsystem_id: Channel name, e.g. "drivetrain.left"
            value: Normalized power in [-1, 1] or a voltage, depending on
                   the channel. Relays and solenoids use 0.0 / 1.0.
        """
        ...


class InputSource(Protocol):
    """Operator input devices, polled once per cycle."""

    def get_axis(self, device_id: int, axis_id: int) -> float:
        """
        Read an analog axis.

        Returns:
            Axis value in [-1, 1]
        """
        ...

    def get_button(self, device_id: int, button_id: int) -> bool:
        """
        Read a button level.

        Returns:
            True while the button is held
        """
        ...


PoseSource = Callable[[], Optional[Pose2d]]
"""Returns the current estimated pose, or None if unavailable this cycle."""

WheelSpeedSource = Callable[[], Optional[WheelSpeeds]]
"""Returns the current wheel speeds (m/s), or None if unavailable this cycle."""

YawErrorSource = Callable[[], Optional[float]]
"""Returns the vision yaw error to target (degrees), or None without a target."""

TelemetrySink = Callable[[str, float], None]
"""Publishes a named number to the dashboard."""
