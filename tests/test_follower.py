"""Tests for the Ramsete controller and kinematics"""

import math

import pytest

from robot_control.follower import RamseteController
from robot_control.model import (
    ChassisSpeeds,
    DifferentialDriveKinematics,
    Pose2d,
    WheelSpeeds,
    wrap_angle,
)


def test_zero_error_passes_reference_through():
    """Test that on-track tracking returns the reference velocities"""
    controller = RamseteController()
    pose = Pose2d(1.0, 2.0, 0.3)

    speeds = controller.calculate(pose, pose, 1.2, 0.4)

    assert speeds.v == pytest.approx(1.2)
    assert speeds.omega == pytest.approx(0.4)


def test_behind_reference_speeds_up():
    """Test that a robot behind its reference is commanded faster"""
    controller = RamseteController(b=2.0, zeta=0.7)
    speeds = controller.calculate(Pose2d(0, 0, 0), Pose2d(0.5, 0, 0), 1.0, 0.0)

    k = 2.0 * 0.7 * math.sqrt(2.0)
    assert speeds.v == pytest.approx(1.0 + k * 0.5)
    assert speeds.omega == pytest.approx(0.0)


def test_left_of_robot_turns_left():
    """Test that a reference to the robot's left yields positive omega"""
    controller = RamseteController()
    speeds = controller.calculate(Pose2d(0, 0, 0), Pose2d(0, 0.2, 0), 1.0, 0.0)

    assert speeds.omega > 0.0
    assert controller.get_diagnostics()["error_y"] == pytest.approx(0.2)


def test_error_in_robot_frame():
    """Test that the pose error is rotated into the robot frame"""
    controller = RamseteController()
    controller.calculate(Pose2d(0, 0, math.pi / 2), Pose2d(0, 1, math.pi / 2), 1.0, 0.0)

    error = controller.pose_error
    assert error.x == pytest.approx(1.0)
    assert error.y == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("b,zeta", [(0.0, 0.7), (2.0, 0.0), (2.0, 1.0)])
def test_rejects_invalid_gains(b, zeta):
    """Test gain validation"""
    with pytest.raises(ValueError):
        RamseteController(b, zeta)


def test_kinematics_round_trip():
    """Test chassis -> wheel -> chassis"""
    kinematics = DifferentialDriveKinematics(0.69)
    wheels = kinematics.to_wheel_speeds(ChassisSpeeds(1.0, 2.0))

    assert wheels.left == pytest.approx(1.0 - 0.69)
    assert wheels.right == pytest.approx(1.0 + 0.69)
    chassis = kinematics.to_chassis_speeds(wheels)
    assert chassis.v == pytest.approx(1.0)
    assert chassis.omega == pytest.approx(2.0)


def test_kinematics_turn_in_place():
    """Test that opposite wheel speeds produce pure rotation"""
    kinematics = DifferentialDriveKinematics(0.5)
    chassis = kinematics.to_chassis_speeds(WheelSpeeds(-0.5, 0.5))

    assert chassis.v == 0.0
    assert chassis.omega == pytest.approx(2.0)


def test_kinematics_rejects_bad_track_width():
    """Test track width validation"""
    with pytest.raises(ValueError):
        DifferentialDriveKinematics(0.0)


def test_wrap_angle():
    """Test wrapping to [-pi, pi]"""
    assert wrap_angle(3 * math.pi / 2) == pytest.approx(-math.pi / 2)
    assert wrap_angle(-3 * math.pi / 2) == pytest.approx(math.pi / 2)
