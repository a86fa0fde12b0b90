"""Motor feedforward and feedback controllers.

This module provides the two halves of each wheel's voltage command:
- SimpleMotorFeedforward: open-loop voltage estimate from the characterized
  static, velocity and acceleration gains of a motor + gearbox
- PIDController: closed-loop correction from the error between a target
  and a measured velocity, with anti-windup on the integral term

The trajectory command runs one feedforward shared by both wheels and one
independent PIDController per wheel; the shooter reuses both for its
flywheel velocity loop.
"""

import math
from typing import Dict, Tuple


class SimpleMotorFeedforward:
    """Permanent-magnet DC motor feedforward.

    Control law:
        V = ks * sign(v) + kv * v + ka * a

    Attributes:
        ks: Static friction voltage (V)
        kv: Velocity gain (V per unit/s)
        ka: Acceleration gain (V per unit/s²)
    """

    def __init__(self, ks: float, kv: float, ka: float = 0.0):
        """Initialize the feedforward.

        Args:
            ks: Static gain (V). Must be >= 0.
            kv: Velocity gain (V·s/m for drivetrains). Must be > 0.
            ka: Acceleration gain (V·s²/m for drivetrains). Must be >= 0.

        Raises:
            ValueError: If a gain is out of range
        """
        if ks < 0 or kv <= 0 or ka < 0:
            raise ValueError(f"Invalid feedforward gains: ks={ks}, kv={kv}, ka={ka}")
        self.ks = ks
        self.kv = kv
        self.ka = ka

    def calculate(self, velocity: float, acceleration: float = 0.0) -> float:
        """Compute the feedforward voltage.

        Args:
            velocity: Target velocity
            acceleration: Target acceleration. Default: 0.0

        Returns:
            Voltage (V)
        """
        sign = math.copysign(1.0, velocity) if velocity != 0.0 else 0.0
        return self.ks * sign + self.kv * velocity + self.ka * acceleration

    def max_achievable_velocity(self, max_voltage: float, acceleration: float = 0.0) -> float:
        """Highest velocity reachable with the given voltage budget."""
        return (max_voltage - self.ks - self.ka * acceleration) / self.kv

    def acceleration_bounds(self, max_voltage: float, velocity: float) -> Tuple[float, float]:
        """Achievable acceleration range at a velocity with a voltage budget.

        Static friction opposes the direction of motion; from standstill it
        must be overcome in whichever direction the motor accelerates.

        Args:
            max_voltage: Voltage budget (V)
            velocity: Current velocity

        Returns:
            (min_acceleration, max_acceleration). With ka == 0 the motor is
            treated as able to reach any acceleration.
        """
        if self.ka == 0.0:
            return -math.inf, math.inf
        ks_forward = self.ks if velocity >= 0.0 else -self.ks
        ks_backward = -self.ks if velocity <= 0.0 else self.ks
        max_accel = (max_voltage - ks_forward - self.kv * velocity) / self.ka
        min_accel = (-max_voltage - ks_backward - self.kv * velocity) / self.ka
        return min_accel, max_accel


class PIDController:
    """PID feedback controller with integral anti-windup.

    Control law:
        u = kp * e + ki * integral(e) + kd * de/dt

    where e = setpoint - measurement.

    Attributes:
        kp: Proportional gain
        ki: Integral gain
        kd: Derivative gain
        period: Nominal update period (seconds), used for the integral and
            derivative terms
        integral_limit: Clamp on the accumulated integral
    """

    def __init__(
        self,
        kp: float,
        ki: float = 0.0,
        kd: float = 0.0,
        period: float = 0.02,
        integral_limit: float = 0.5,
    ):
        """Initialize the controller.

        Args:
            kp: Proportional gain. Higher = more aggressive correction.
            ki: Integral gain. Eliminates steady-state error. Default: 0.0
            kd: Derivative gain. Adds damping. Default: 0.0
            period: Update period in seconds. Default: 0.02 (50 Hz)
            integral_limit: Anti-windup clamp on the integral. Default: 0.5

        Raises:
            ValueError: If period is not positive
        """
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.period = period
        self.integral_limit = integral_limit

        # Integral state (accumulated error)
        self.integral: float = 0.0

        # Previous error for derivative computation
        self.prev_error: float = 0.0
        self._has_prev = False

        self.setpoint: float = 0.0
        self.error: float = 0.0

    def calculate(self, measurement: float, setpoint: float) -> float:
        """Compute the feedback output.

        Args:
            measurement: Measured process value
            setpoint: Target process value

        Returns:
            Controller output (volts when used on a motor)
        """
        self.setpoint = setpoint
        error = setpoint - measurement
        self.error = error

        if self._has_prev:
            derivative = (error - self.prev_error) / self.period
        else:
            derivative = 0.0
        self.prev_error = error
        self._has_prev = True

        self.integral += error * self.period
        self.integral = max(-self.integral_limit, min(self.integral_limit, self.integral))

        return self.kp * error + self.ki * self.integral + self.kd * derivative

    def reset(self) -> None:
        """Reset integral and derivative states to zero.

        Call this when starting a new control session or when integral
        windup needs to be cleared.
        """
        self.integral = 0.0
        self.prev_error = 0.0
        self._has_prev = False
        self.error = 0.0

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging."""
        return {
            "setpoint": self.setpoint,
            "error": self.error,
            "integral": self.integral,
        }
