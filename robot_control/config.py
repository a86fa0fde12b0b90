"""Configuration parameters for the robot control core.

This module centralizes all configuration parameters including:
- Physical drivetrain parameters
- Drivetrain feedforward characterization
- Trajectory tracking gains (Ramsete + per-wheel feedback)
- Operator input mapping
- Mechanism powers and setpoints
- Terminal output colors

All parameters are documented with their purpose, units, and origin.
Units are SI throughout: meters, seconds, radians, volts.
"""

# ============================================================================
# Control Loop
# ============================================================================

CONTROL_PERIOD = 0.02
"""Fixed period of the external control loop (seconds).

The scheduler does not own this timer; it is the rate at which the robot
loop calls run_cycle(). 20 ms matches the driver station packet rate."""


# ============================================================================
# Physical Drivetrain Parameters
# ============================================================================

TRACK_WIDTH = 0.69
"""Effective distance between left and right wheel contact patches (meters).

Measured by spinning in place, so it already absorbs wheel scrub and is
slightly larger than the tape-measured frame width."""

LOW_GEAR_MAX_VELOCITY = 1.5
"""Maximum chassis velocity used for autonomous paths in low gear (m/s)."""

LOW_GEAR_MAX_ACCELERATION = 1.0
"""Maximum chassis acceleration used for autonomous paths in low gear (m/s²)."""


# ============================================================================
# Drivetrain Feedforward (characterization results)
# ============================================================================

KS_VOLTS = 0.22
"""Static friction voltage (V). Minimum voltage that starts the wheels moving."""

KV_VOLT_SECONDS_PER_METER = 1.98
"""Velocity gain (V·s/m). Voltage needed per m/s of steady-state wheel speed."""

KA_VOLT_SECONDS_SQUARED_PER_METER = 0.2
"""Acceleration gain (V·s²/m). Voltage needed per m/s² of wheel acceleration."""

AUTO_MAX_VOLTAGE = 7.0
"""Voltage ceiling used when generating autonomous trajectories (V).

Kept well below battery voltage so the wheel feedback loops still have
headroom to correct tracking errors while the feedforward follows the path."""

MAX_OUTPUT_VOLTAGE = 12.0
"""Clamp applied to every voltage sent to the drivetrain (V). Nominal battery."""


# ============================================================================
# Trajectory Tracking Gains
# ============================================================================

RAMSETE_B = 2.0
"""Ramsete convergence gain (rad²/m²). Must be > 0.

Larger values converge more aggressively toward the reference pose, like a
proportional term."""

RAMSETE_ZETA = 0.7
"""Ramsete damping ratio (dimensionless). Range (0, 1).

Larger values give more damping and lower sensitivity to heading error."""

WHEEL_KP = 2.0
"""Proportional gain of each wheel velocity loop (V per m/s of error)."""

WHEEL_KI = 0.0
"""Integral gain of each wheel velocity loop (V per m of accumulated error).

Disabled: the feedforward removes steady-state error on the drivetrain."""

WHEEL_KD = 0.0
"""Derivative gain of each wheel velocity loop (V·s per m/s)."""

WHEEL_INTEGRAL_LIMIT = 0.5
"""Anti-windup clamp on the wheel velocity integral (m)."""


# ============================================================================
# Stock Autonomous Path
# ============================================================================

AUTO_START_POSE = (0.0, 0.0, 0.0)
"""Start pose (x m, y m, heading rad) of the stock autonomous routine."""

AUTO_INTERIOR_WAYPOINTS = [(1.0, 1.0), (2.0, -1.0)]
"""Interior waypoints (x m, y m) of the stock S-curve."""

AUTO_END_POSE = (3.0, 0.0, 0.0)
"""End pose (x m, y m, heading rad) of the stock autonomous routine."""

PATH_SAMPLES_PER_SEGMENT = 100
"""Number of spline samples per segment when generating trajectories.

Higher values reduce arc-length error on tight curves at the cost of
generation time. 100 keeps arc-length error below 1 mm for field-scale paths."""


# ============================================================================
# Operator Input Mapping
# ============================================================================

PRIMARY_CONTROLLER = 0
"""Device index of the driver controller."""

SECONDARY_CONTROLLER = 1
"""Device index of the operator controller."""

DRIVE_FORWARD_AXIS = 1
"""Axis index on the driver controller that commands forward speed (left stick Y)."""

DRIVE_TURN_AXIS = 4
"""Axis index on the driver controller that commands rotation (right stick X).

Configurable because the stick assignment is a driver preference; swap
DRIVE_FORWARD_AXIS and DRIVE_TURN_AXIS to change hands."""

INPUT_DEADZONE = 0.08
"""Stick values with magnitude below this are treated as zero.

Rescaled so that full deflection still commands full output."""


# ============================================================================
# Mechanisms
# ============================================================================

PIVOT_HOLD_POWER = -0.05
"""Pivot default power. Small negative power holds the intake arm stowed."""

PIVOT_MANUAL_POWER = 0.5
"""Pivot power while a bumper is held (sign chosen by bumper)."""

CLIMBER_POWER = 0.5
"""Climber power while a climb button is held (sign chosen by button)."""

SHOOTER_TARGET_RPM = 4800.0
"""Flywheel target speed while the shoot button is held (RPM)."""

SHOOTER_KS_VOLTS = 0.3
"""Shooter static friction voltage (V)."""

SHOOTER_KV_VOLTS_PER_RPM = 0.0021
"""Shooter velocity gain (V per RPM)."""

SHOOTER_KP = 0.0005
"""Shooter velocity loop proportional gain (V per RPM of error)."""


# ============================================================================
# Vision-Assisted Turn
# ============================================================================

GYRO_TURN_KP = 1.0 / 120.0
"""Proportional gain of the turn-to-target command (power per degree)."""

GYRO_TURN_MIN_POWER = KS_VOLTS / 12.0
"""Minimum turning power (normalized). Static friction voltage over battery."""

GYRO_TURN_TOLERANCE_DEGREES = 1.0
"""Turn-to-target finishes when the heading error is within this band (degrees)."""


# ============================================================================
# Terminal Colors
# ============================================================================

TERM_BLUE = "\033[38;2;35;116;247m"
"""Terminal color for status lines."""

TERM_ORANGE = "\033[38;2;247;72;35m"
"""Terminal color for warnings shown in summaries."""

TERM_RESET = "\033[0m"
"""Reset terminal color."""

PLOT_REFERENCE_COLOR = "#f74823"
"""Color of the reference trajectory in plots."""

PLOT_ACTUAL_COLOR = "#2374f7"
"""Color of the measured trajectory in plots."""
