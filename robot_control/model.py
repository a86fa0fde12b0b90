"""
Differential drive kinematic model and shared geometry types.

This module provides the pose and wheel speed types exchanged with the
feedback sources, and the kinematics of a differential drive robot,
converting chassis linear and angular velocities into individual wheel
velocities and back.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Pose2d:
    """Robot pose in the field frame.

    Attributes:
        x: Position along the field x axis (meters)
        y: Position along the field y axis (meters)
        heading: Heading angle from the +x axis (radians, CCW positive)
    """

    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    def relative_to(self, other: "Pose2d") -> "Pose2d":
        """Express this pose in the frame of another pose.

        Args:
            other: Pose whose frame is used as the origin

        Returns:
            Pose2d with the position error rotated into other's frame and
            the heading error wrapped to [-pi, pi]
        """
        dx = self.x - other.x
        dy = self.y - other.y
        cos_h = math.cos(other.heading)
        sin_h = math.sin(other.heading)
        return Pose2d(
            x=dx * cos_h + dy * sin_h,
            y=-dx * sin_h + dy * cos_h,
            heading=wrap_angle(self.heading - other.heading),
        )


@dataclass(frozen=True)
class WheelSpeeds:
    """Left and right wheel surface speeds (m/s)."""

    left: float = 0.0
    right: float = 0.0


@dataclass(frozen=True)
class ChassisSpeeds:
    """Robot-frame linear velocity (m/s) and angular velocity (rad/s)."""

    v: float = 0.0
    omega: float = 0.0


def wrap_angle(angle: float) -> float:
    """Wrap an angle to [-pi, pi]."""
    return math.atan2(math.sin(angle), math.cos(angle))


class DifferentialDriveKinematics:
    """Kinematics of a differential drive with a given track width.

    For a differential drive robot, the relationship between the robot's
    linear velocity (v), angular velocity (omega), and the individual
    wheel velocities is:
        v_left = v - (W/2) * omega
        v_right = v + (W/2) * omega

    where W is the track width (distance between wheel contact patches).
    """

    def __init__(self, track_width: float):
        """Initialize the kinematic model.

        Args:
            track_width: Distance between left and right wheels (meters)

        Raises:
            ValueError: If track_width is not positive
        """
        if track_width <= 0:
            raise ValueError(f"track_width must be positive, got {track_width}")
        self.track_width = track_width

    def to_wheel_speeds(self, chassis: ChassisSpeeds) -> WheelSpeeds:
        """Compute wheel velocities from chassis velocities.

        Args:
            chassis: Desired linear (m/s) and angular (rad/s) velocity.
                     Positive omega results in counter-clockwise rotation

        Returns:
            WheelSpeeds in m/s

        Example:
            >>> kinematics = DifferentialDriveKinematics(0.5)
            >>> kinematics.to_wheel_speeds(ChassisSpeeds(1.0, 0.5))
            WheelSpeeds(left=0.875, right=1.125)
        """
        half = self.track_width / 2.0
        return WheelSpeeds(
            left=chassis.v - half * chassis.omega,
            right=chassis.v + half * chassis.omega,
        )

    def to_chassis_speeds(self, wheels: WheelSpeeds) -> ChassisSpeeds:
        """Compute chassis velocities from wheel velocities.

        Args:
            wheels: Measured left and right wheel speeds (m/s)

        Returns:
            ChassisSpeeds with v in m/s and omega in rad/s
        """
        return ChassisSpeeds(
            v=(wheels.left + wheels.right) / 2.0,
            omega=(wheels.right - wheels.left) / self.track_width,
        )
