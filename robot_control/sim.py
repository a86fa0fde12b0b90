"""Simulated differential drivetrain.

A first-order plant that stands in for the motor controllers, encoders and
odometry so the full control loop can run without hardware:

- Implements the Actuator protocol for the drivetrain channels (volts on
  "<prefix>.left/right", normalized power on "<prefix>.left_power/right_power")
- Integrates each wheel with the same model the feedforward inverts:
      V = ks * sign(v) + kv * v + ka * a
- Integrates the pose from the wheel speeds (unicycle kinematics)
- Provides pose and wheel speed feedback sources
"""

import math
from typing import Dict, Optional

from .model import DifferentialDriveKinematics, Pose2d, WheelSpeeds
from .motor_controller import SimpleMotorFeedforward


class SimDrivetrain:
    """Simulated drivetrain plant.

    Attributes:
        outputs: Last value written to every actuator channel (all channels,
            including non-drivetrain ones, so it doubles as an output log)
        pose: Current true pose
        wheel_speeds: Current true wheel speeds (m/s)
    """

    def __init__(
        self,
        feedforward: SimpleMotorFeedforward,
        kinematics: DifferentialDriveKinematics,
        pose: Optional[Pose2d] = None,
        prefix: str = "drivetrain",
        battery_voltage: float = 12.0,
        substeps: int = 4,
    ):
        """Initialize the simulated drivetrain.

        Args:
            feedforward: Motor model (V, m/s, m/s²) of each side
            kinematics: Track-width model
            pose: Initial pose. Default: origin
            prefix: Actuator channel prefix of the drivetrain
            battery_voltage: Voltage corresponding to full normalized power (V)
            substeps: Integration substeps per step()
        """
        self.feedforward = feedforward
        self.kinematics = kinematics
        self.pose = pose or Pose2d()
        self.wheel_speeds = WheelSpeeds()
        self.prefix = prefix
        self.battery_voltage = battery_voltage
        self.substeps = substeps
        self.outputs: Dict[str, float] = {}
        self.time = 0.0

        self._left_volts = 0.0
        self._right_volts = 0.0

    def set_output(self, subsystem_id: str, value: float) -> None:
        self.outputs[subsystem_id] = value
        if subsystem_id == f"{self.prefix}.left":
            self._left_volts = value
        elif subsystem_id == f"{self.prefix}.right":
            self._right_volts = value
        elif subsystem_id == f"{self.prefix}.left_power":
            self._left_volts = value * self.battery_voltage
        elif subsystem_id == f"{self.prefix}.right_power":
            self._right_volts = value * self.battery_voltage

    def get_pose(self) -> Pose2d:
        return self.pose

    def get_wheel_speeds(self) -> WheelSpeeds:
        return self.wheel_speeds

    def _wheel_step(self, speed: float, volts: float, dt: float) -> float:
        ff = self.feedforward
        if speed == 0.0 and abs(volts) <= ff.ks:
            # Static friction holds the wheel
            return 0.0
        direction = math.copysign(1.0, speed if speed != 0.0 else volts)
        drive = volts - ff.ks * direction
        if ff.ka == 0.0:
            return drive / ff.kv
        new_speed = speed + (drive - ff.kv * speed) / ff.ka * dt
        # Kinetic friction can stop the wheel but never reverse it
        if speed != 0.0 and math.copysign(1.0, new_speed) != direction and abs(volts) <= ff.ks:
            return 0.0
        return new_speed

    def step(self, dt: float) -> None:
        """Advance the simulation by dt seconds."""
        h = dt / self.substeps
        for _ in range(self.substeps):
            left = self._wheel_step(self.wheel_speeds.left, self._left_volts, h)
            right = self._wheel_step(self.wheel_speeds.right, self._right_volts, h)
            self.wheel_speeds = WheelSpeeds(left, right)

            chassis = self.kinematics.to_chassis_speeds(self.wheel_speeds)
            heading = self.pose.heading + chassis.omega * h / 2.0
            self.pose = Pose2d(
                x=self.pose.x + chassis.v * math.cos(heading) * h,
                y=self.pose.y + chassis.v * math.sin(heading) * h,
                heading=self.pose.heading + chassis.omega * h,
            )
        self.time += dt
