"""Ramsete trajectory follower.

This module implements the Ramsete nonlinear pose-tracking law that:
- Expresses the pose error in the robot frame
- Scales its correction gain with the reference velocities
- Produces corrected linear and angular velocity commands

The law converges globally for any b > 0 and 0 < zeta < 1 while the
reference velocity is non-zero.
"""

import math
from typing import Dict

from .model import ChassisSpeeds, Pose2d


def _sinc(x: float) -> float:
    """sin(x)/x with the removable singularity at 0 filled in."""
    if abs(x) < 1e-9:
        return 1.0 - x * x / 6.0
    return math.sin(x) / x


class RamseteController:
    """Ramsete controller for unicycle-model pose tracking.

    Control law, with (e_x, e_y, e_theta) the reference pose expressed in
    the robot frame:
        k = 2 * zeta * sqrt(omega_ref² + b * v_ref²)
        v_cmd = v_ref * cos(e_theta) + k * e_x
        omega_cmd = omega_ref + k * e_theta + b * v_ref * sinc(e_theta) * e_y
    """

    def __init__(self, b: float = 2.0, zeta: float = 0.7):
        """Initialize the Ramsete controller.

        Args:
            b: Convergence gain (rad²/m²). Larger values converge more
                aggressively, like a proportional term. Must be > 0.
                Default: 2.0
            zeta: Damping ratio (dimensionless). Larger values reduce the
                sensitivity to heading error. Range (0, 1). Default: 0.7

        Raises:
            ValueError: If a gain is out of range
        """
        if b <= 0:
            raise ValueError(f"b must be positive, got {b}")
        if not 0 < zeta < 1:
            raise ValueError(f"zeta must be in (0, 1), got {zeta}")
        self.b = b
        self.zeta = zeta
        self.pose_error = Pose2d()

    def calculate(
        self, current: Pose2d, reference: Pose2d, v_ref: float, omega_ref: float
    ) -> ChassisSpeeds:
        """Compute corrected chassis velocities.

        Args:
            current: Measured robot pose
            reference: Reference pose sampled from the trajectory
            v_ref: Reference linear velocity (m/s)
            omega_ref: Reference angular velocity (rad/s)

        Returns:
            ChassisSpeeds with the corrected v (m/s) and omega (rad/s)
        """
        error = reference.relative_to(current)
        self.pose_error = error

        k = 2.0 * self.zeta * math.sqrt(omega_ref**2 + self.b * v_ref**2)
        v_cmd = v_ref * math.cos(error.heading) + k * error.x
        omega_cmd = (
            omega_ref
            + k * error.heading
            + self.b * v_ref * _sinc(error.heading) * error.y
        )
        return ChassisSpeeds(v=v_cmd, omega=omega_cmd)

    def get_diagnostics(self) -> Dict[str, float]:
        """Get the last pose error for logging."""
        return {
            "error_x": self.pose_error.x,
            "error_y": self.pose_error.y,
            "error_theta": self.pose_error.heading,
        }
