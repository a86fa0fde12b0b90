"""Tests for feedforward and PID controllers"""

import math

import pytest

from robot_control.motor_controller import PIDController, SimpleMotorFeedforward


def test_feedforward_law():
    """Test V = ks*sign(v) + kv*v + ka*a"""
    ff = SimpleMotorFeedforward(0.22, 1.98, 0.2)

    assert ff.calculate(1.0, 0.5) == pytest.approx(0.22 + 1.98 + 0.1)
    assert ff.calculate(-1.0, 0.0) == pytest.approx(-0.22 - 1.98)


def test_feedforward_zero_velocity_has_no_static_term():
    """Test that sign(0) = 0, so standing still needs no voltage"""
    ff = SimpleMotorFeedforward(0.22, 1.98, 0.2)

    assert ff.calculate(0.0) == 0.0
    assert ff.calculate(0.0, 1.0) == pytest.approx(0.2)


@pytest.mark.parametrize("ks,kv,ka", [(-0.1, 1.0, 0.0), (0.1, 0.0, 0.0), (0.1, 1.0, -0.1)])
def test_feedforward_rejects_invalid_gains(ks, kv, ka):
    """Test gain validation"""
    with pytest.raises(ValueError):
        SimpleMotorFeedforward(ks, kv, ka)


def test_feedforward_max_velocity():
    """Test velocity reachable under a voltage budget"""
    ff = SimpleMotorFeedforward(0.22, 1.98, 0.2)
    assert ff.max_achievable_velocity(7.0) == pytest.approx((7.0 - 0.22) / 1.98)


def test_feedforward_without_ka_has_unbounded_acceleration():
    """Test that ka = 0 imposes no acceleration bound"""
    ff = SimpleMotorFeedforward(0.22, 1.98)
    assert ff.acceleration_bounds(7.0, 1.0) == (-math.inf, math.inf)


def test_pid_proportional():
    """Test proportional response"""
    pid = PIDController(kp=2.0)
    assert pid.calculate(measurement=1.0, setpoint=1.5) == pytest.approx(1.0)
    assert pid.error == pytest.approx(0.5)


def test_pid_derivative_zero_on_first_call():
    """Test that the first update has no derivative kick"""
    pid = PIDController(kp=0.0, kd=1.0, period=0.02)
    assert pid.calculate(0.0, 1.0) == 0.0
    # Error drops from 1.0 to 0.5 in one period
    assert pid.calculate(0.5, 1.0) == pytest.approx(-0.5 / 0.02)


def test_pid_integral_anti_windup():
    """Test that the integral saturates at the limit"""
    pid = PIDController(kp=0.0, ki=1.0, period=0.1, integral_limit=0.5)
    for _ in range(100):
        output = pid.calculate(0.0, 1.0)

    assert pid.integral == pytest.approx(0.5)
    assert output == pytest.approx(0.5)


def test_pid_reset():
    """Test that reset clears integral and derivative state"""
    pid = PIDController(kp=1.0, ki=1.0, kd=1.0)
    pid.calculate(0.0, 1.0)
    pid.calculate(0.2, 1.0)
    pid.reset()

    assert pid.integral == 0.0
    assert pid.get_diagnostics()["error"] == 0.0
    # No derivative kick after reset
    assert pid.calculate(0.0, 1.0) == pytest.approx(1.0 + 1.0 * 0.02)


def test_pid_rejects_bad_period():
    """Test period validation"""
    with pytest.raises(ValueError):
        PIDController(kp=1.0, period=0.0)
