"""Trajectory generation for autonomous path following.

This module turns a start pose, interior waypoints and an end pose into a
time-parameterized Trajectory:

1. Geometry: a C2-continuous cubic Hermite spline passes through every
   point. The end tangents follow the start and end headings; interior
   tangents are solved so curvature is continuous across waypoints.
2. Timing: a forward pass limits acceleration and a backward pass limits
   deceleration along the arc length, subject to the maximum velocity and
   acceleration and to any additional constraints (such as the drivetrain
   voltage constraint).

The resulting Trajectory is immutable and sampled by time.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .config import PATH_SAMPLES_PER_SEGMENT
from .errors import InfeasibleTrajectory
from .model import Pose2d, wrap_angle
from .motor_controller import SimpleMotorFeedforward

# Hermite tangents at the path ends are this multiple of the chord length
TANGENT_SCALE = 1.2


@dataclass(frozen=True)
class TrajectoryState:
    """Reference sample of a trajectory.

    Attributes:
        time: Time since the start of the trajectory (s)
        pose: Reference pose
        velocity: Reference linear velocity (m/s)
        acceleration: Reference linear acceleration (m/s²)
        curvature: Path curvature (rad/m)
    """

    time: float
    pose: Pose2d
    velocity: float
    acceleration: float
    curvature: float

    @property
    def angular_velocity(self) -> float:
        """Reference angular velocity (rad/s)."""
        return self.velocity * self.curvature


class DifferentialDriveVoltageConstraint:
    """Keeps both wheels within a voltage budget given the motor feedforward.

    For chassis velocity v on curvature k, the wheels move at
        v_left = v * (1 - k * W/2),  v_right = v * (1 + k * W/2)
    and each must satisfy ks*sign(v_w) + kv*v_w + ka*a_w <= max_voltage.
    """

    def __init__(self, feedforward: SimpleMotorFeedforward, track_width: float, max_voltage: float):
        """Initialize the constraint.

        Args:
            feedforward: Drivetrain feedforward (V, m/s, m/s²)
            track_width: Distance between wheels (meters)
            max_voltage: Voltage ceiling (V)

        Raises:
            InfeasibleTrajectory: If the ceiling cannot overcome static friction
        """
        if max_voltage <= feedforward.ks:
            raise InfeasibleTrajectory(
                f"Voltage ceiling {max_voltage} V does not exceed static friction {feedforward.ks} V"
            )
        self.feedforward = feedforward
        self.track_width = track_width
        self.max_voltage = max_voltage

    def _wheel_factors(self, curvature: float) -> Tuple[float, float]:
        half = self.track_width / 2.0
        return 1.0 - curvature * half, 1.0 + curvature * half

    def max_velocity(self, curvature: float) -> float:
        """Highest chassis velocity keeping the outer wheel within budget (m/s)."""
        wheel_max = self.feedforward.max_achievable_velocity(self.max_voltage)
        factor = max(abs(f) for f in self._wheel_factors(curvature))
        return wheel_max / factor

    def acceleration_bounds(self, velocity: float, curvature: float) -> Tuple[float, float]:
        """Chassis acceleration range keeping both wheels within budget (m/s²)."""
        low, high = -math.inf, math.inf
        for factor in self._wheel_factors(curvature):
            if abs(factor) < 1e-9:
                continue
            wheel_min, wheel_max = self.feedforward.acceleration_bounds(
                self.max_voltage, velocity * factor
            )
            if factor > 0:
                low = max(low, wheel_min / factor)
                high = min(high, wheel_max / factor)
            else:
                low = max(low, wheel_max / factor)
                high = min(high, wheel_min / factor)
        return low, high


@dataclass
class TrajectoryLimits:
    """Velocity and acceleration limits of a trajectory.

    Attributes:
        max_velocity: Maximum chassis velocity (m/s)
        max_acceleration: Maximum chassis acceleration magnitude (m/s²)
        start_velocity: Velocity at the start pose (m/s). Default: 0.0
        end_velocity: Velocity at the end pose (m/s). Default: 0.0
        constraints: Additional constraints, e.g. DifferentialDriveVoltageConstraint
    """

    max_velocity: float
    max_acceleration: float
    start_velocity: float = 0.0
    end_velocity: float = 0.0
    constraints: List[DifferentialDriveVoltageConstraint] = field(default_factory=list)

    def acceleration_bounds(self, velocity: float, curvature: float) -> Tuple[float, float]:
        low, high = -self.max_acceleration, self.max_acceleration
        for constraint in self.constraints:
            c_low, c_high = constraint.acceleration_bounds(velocity, curvature)
            low = max(low, c_low)
            high = min(high, c_high)
        return low, high

    def velocity_bound(self, curvature: float) -> float:
        bound = self.max_velocity
        for constraint in self.constraints:
            bound = min(bound, constraint.max_velocity(curvature))
        return bound


class Trajectory:
    """Immutable time-parameterized reference trajectory.

    Stores the samples as read-only numpy arrays. Headings are stored
    unwrapped so interpolation never jumps across ±pi.
    """

    def __init__(
        self,
        times: npt.ArrayLike,
        x: npt.ArrayLike,
        y: npt.ArrayLike,
        heading: npt.ArrayLike,
        velocity: npt.ArrayLike,
        acceleration: npt.ArrayLike,
        curvature: npt.ArrayLike,
    ):
        self._t = self._freeze(times)
        self._x = self._freeze(x)
        self._y = self._freeze(y)
        self._heading = self._freeze(np.unwrap(np.asarray(heading, dtype=np.float64)))
        self._v = self._freeze(velocity)
        self._a = self._freeze(acceleration)
        self._k = self._freeze(curvature)
        if len(self._t) == 0:
            raise ValueError("Trajectory needs at least one sample")

    @staticmethod
    def _freeze(values: npt.ArrayLike) -> npt.NDArray[np.float64]:
        array = np.array(values, dtype=np.float64)
        array.setflags(write=False)
        return array

    @property
    def total_time(self) -> float:
        """Duration of the trajectory (s)."""
        return float(self._t[-1])

    @property
    def initial_pose(self) -> Pose2d:
        return self.sample(0.0).pose

    @property
    def times(self) -> npt.NDArray[np.float64]:
        return self._t

    @property
    def x(self) -> npt.NDArray[np.float64]:
        return self._x

    @property
    def y(self) -> npt.NDArray[np.float64]:
        return self._y

    @property
    def velocities(self) -> npt.NDArray[np.float64]:
        return self._v

    @property
    def curvatures(self) -> npt.NDArray[np.float64]:
        return self._k

    def __len__(self) -> int:
        return len(self._t)

    def sample(self, t: float) -> TrajectoryState:
        """Interpolate the reference state at time t.

        Args:
            t: Time since the start of the trajectory (s). Clamped to
               [0, total_time].

        Returns:
            TrajectoryState at time t
        """
        t = min(max(t, 0.0), self.total_time)

        def interp(values: npt.NDArray[np.float64]) -> float:
            return float(np.interp(t, self._t, values))

        return TrajectoryState(
            time=t,
            pose=Pose2d(interp(self._x), interp(self._y), wrap_angle(interp(self._heading))),
            velocity=interp(self._v),
            acceleration=interp(self._a),
            curvature=interp(self._k),
        )


def _spline_tangents(
    points: npt.NDArray[np.float64], start_heading: float, end_heading: float
) -> npt.NDArray[np.float64]:
    """Solve Hermite tangents so the spline is C2 at interior points.

    For unit-parameter cubic Hermite segments, second-derivative continuity
    at point i gives:
        D[i-1] + 4 D[i] + D[i+1] = 3 (P[i+1] - P[i-1])
    with D[0] and D[n-1] fixed by the start and end headings.
    """
    n = len(points)
    tangents = np.zeros_like(points)
    start_scale = TANGENT_SCALE * float(np.linalg.norm(points[1] - points[0]))
    end_scale = TANGENT_SCALE * float(np.linalg.norm(points[-1] - points[-2]))
    tangents[0] = start_scale * np.array([math.cos(start_heading), math.sin(start_heading)])
    tangents[-1] = end_scale * np.array([math.cos(end_heading), math.sin(end_heading)])

    if n > 2:
        m = n - 2
        system = 4.0 * np.eye(m) + np.eye(m, k=1) + np.eye(m, k=-1)
        rhs = 3.0 * (points[2:] - points[:-2])
        rhs[0] -= tangents[0]
        rhs[-1] -= tangents[-1]
        tangents[1:-1] = np.linalg.solve(system, rhs)

    return tangents


def _sample_spline(
    points: npt.NDArray[np.float64],
    tangents: npt.NDArray[np.float64],
    samples_per_segment: int,
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Sample positions and first/second parameter derivatives along the spline."""
    u = np.linspace(0.0, 1.0, samples_per_segment + 1)[:, None]
    u2 = u * u
    u3 = u2 * u

    h = (2 * u3 - 3 * u2 + 1, u3 - 2 * u2 + u, -2 * u3 + 3 * u2, u3 - u2)
    dh = (6 * u2 - 6 * u, 3 * u2 - 4 * u + 1, -6 * u2 + 6 * u, 3 * u2 - 2 * u)
    ddh = (12 * u - 6, 6 * u - 4, -12 * u + 6, 6 * u - 2)

    positions, firsts, seconds = [], [], []
    for i in range(len(points) - 1):
        basis = (points[i], tangents[i], points[i + 1], tangents[i + 1])
        pos = sum(w * b for w, b in zip(h, basis))
        d1 = sum(w * b for w, b in zip(dh, basis))
        d2 = sum(w * b for w, b in zip(ddh, basis))
        # Drop the shared first sample of every segment after the first
        start = 0 if i == 0 else 1
        positions.append(pos[start:])
        firsts.append(d1[start:])
        seconds.append(d2[start:])

    return np.vstack(positions), np.vstack(firsts), np.vstack(seconds)


def _time_parameterize(
    s: npt.NDArray[np.float64], curvature: npt.NDArray[np.float64], limits: TrajectoryLimits
) -> Tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Assign velocities, accelerations and times along the arc length."""
    n = len(s)
    max_v = np.array([limits.velocity_bound(float(k)) for k in curvature])
    v = np.zeros(n)
    v[0] = min(limits.start_velocity, max_v[0])

    # Forward pass: acceleration limit
    for i in range(1, n):
        ds = s[i] - s[i - 1]
        a_min, a_max = limits.acceleration_bounds(v[i - 1], float(curvature[i - 1]))
        if a_min > a_max:
            raise InfeasibleTrajectory(
                f"No feasible acceleration at s={s[i - 1]:.3f} m (v={v[i - 1]:.3f} m/s)"
            )
        v[i] = min(max_v[i], math.sqrt(v[i - 1] ** 2 + 2.0 * max(a_max, 0.0) * ds))

    # Backward pass: deceleration limit
    v[-1] = min(v[-1], limits.end_velocity)
    for i in range(n - 2, -1, -1):
        ds = s[i + 1] - s[i]
        a_min, a_max = limits.acceleration_bounds(v[i + 1], float(curvature[i + 1]))
        if a_min > a_max:
            raise InfeasibleTrajectory(
                f"No feasible deceleration at s={s[i + 1]:.3f} m (v={v[i + 1]:.3f} m/s)"
            )
        v[i] = min(v[i], math.sqrt(v[i + 1] ** 2 + 2.0 * max(-a_min, 0.0) * ds))

    times = np.zeros(n)
    accel = np.zeros(n)
    for i in range(1, n):
        ds = s[i] - s[i - 1]
        v_sum = v[i] + v[i - 1]
        if v_sum <= 1e-12:
            if ds > 1e-12:
                raise InfeasibleTrajectory(f"Robot cannot move past s={s[i - 1]:.3f} m")
            dt = 0.0
        else:
            dt = 2.0 * ds / v_sum
        times[i] = times[i - 1] + dt
        accel[i - 1] = (v[i] - v[i - 1]) / dt if dt > 0 else 0.0
    if n > 1:
        accel[-1] = accel[-2]

    return times, v, accel


def generate_trajectory(
    start: Pose2d,
    waypoints: Sequence[Tuple[float, float]],
    end: Pose2d,
    limits: TrajectoryLimits,
    samples_per_segment: int = PATH_SAMPLES_PER_SEGMENT,
) -> Trajectory:
    """Generate a trajectory from start, through waypoints, to end.

    Args:
        start: Start pose (meters, radians)
        waypoints: Interior (x, y) points in meters
        end: End pose (meters, radians)
        limits: Velocity / acceleration limits and constraints
        samples_per_segment: Spline samples per segment

    Returns:
        Trajectory. If start and end coincide and there are no waypoints,
        a single-sample trajectory of zero duration.

    Raises:
        InfeasibleTrajectory: If the limits are not positive, the path has a
            cusp, or the constraints leave no feasible velocity profile
    """
    if limits.max_velocity <= 0 or limits.max_acceleration <= 0:
        raise InfeasibleTrajectory(
            f"Limits must be positive: max_velocity={limits.max_velocity}, "
            f"max_acceleration={limits.max_acceleration}"
        )
    if limits.start_velocity < 0 or limits.end_velocity < 0:
        raise InfeasibleTrajectory("Start and end velocities must not be negative")

    points = np.array(
        [(start.x, start.y)] + [tuple(p) for p in waypoints] + [(end.x, end.y)],
        dtype=np.float64,
    )
    if not np.all(np.isfinite(points)):
        raise InfeasibleTrajectory("Waypoints must be finite")

    chords = np.linalg.norm(np.diff(points, axis=0), axis=1)
    if np.all(chords < 1e-9):
        logging.debug("Generated zero-length trajectory")
        return Trajectory([0.0], [start.x], [start.y], [start.heading], [0.0], [0.0], [0.0])
    if np.any(chords < 1e-9):
        raise InfeasibleTrajectory("Consecutive waypoints must be distinct")

    tangents = _spline_tangents(points, start.heading, end.heading)
    pos, d1, d2 = _sample_spline(points, tangents, samples_per_segment)

    speed = np.hypot(d1[:, 0], d1[:, 1])
    if np.any(speed < 1e-9):
        raise InfeasibleTrajectory("Path has a cusp (zero tangent)")

    heading = np.arctan2(d1[:, 1], d1[:, 0])
    curvature = (d1[:, 0] * d2[:, 1] - d1[:, 1] * d2[:, 0]) / speed**3
    s = np.concatenate(([0.0], np.cumsum(np.hypot(*np.diff(pos, axis=0).T))))

    times, velocity, accel = _time_parameterize(s, curvature, limits)

    trajectory = Trajectory(times, pos[:, 0], pos[:, 1], heading, velocity, accel, curvature)
    logging.debug(
        f"Generated trajectory: {s[-1]:.3f} m in {trajectory.total_time:.3f} s "
        f"({len(trajectory)} samples)"
    )
    return trajectory
