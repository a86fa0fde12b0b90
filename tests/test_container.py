"""Tests for RobotContainer wiring"""

import pytest

from robot_control import config
from robot_control.commands import GyroTurn, RunClimber, RunPivot, RunShooter
from robot_control.container import RobotContainer
from robot_control.interfaces import XboxAxis, XboxButton
from robot_control.model import Pose2d, WheelSpeeds

PRIMARY = config.PRIMARY_CONTROLLER
SECONDARY = config.SECONDARY_CONTROLLER


@pytest.fixture
def container(actuator, inputs, clock):
    return RobotContainer(
        actuator,
        inputs,
        lambda: Pose2d(),
        lambda: WheelSpeeds(),
        clock=clock,
    )


def press(container, inputs, device, button, cycles=1):
    inputs.set_button(device, button, True)
    for _ in range(cycles):
        container.scheduler.run_cycle()


def release(container, inputs, device, button):
    inputs.set_button(device, button, False)
    container.scheduler.run_cycle()


def test_every_subsystem_runs_its_default(container):
    """Test that after one cycle every subsystem is owned by its default"""
    container.scheduler.run_cycle()

    subsystems = container.scheduler.subsystems
    assert len(subsystems) == 6
    for subsystem in subsystems:
        assert container.scheduler.active_command(subsystem) is subsystem.default_command


def test_drive_from_primary_sticks(container, inputs, actuator):
    """Test that the primary sticks drive the drivetrain"""
    inputs.set_axis(PRIMARY, config.DRIVE_FORWARD_AXIS, 0.54)
    container.scheduler.run_cycle()

    assert actuator.outputs["drivetrain.left_power"] == pytest.approx(0.5)
    assert actuator.outputs["drivetrain.right_power"] == pytest.approx(0.5)


def test_intake_from_primary_triggers(container, inputs, actuator):
    """Test that the primary triggers run the intake"""
    inputs.set_axis(PRIMARY, XboxAxis.RIGHT_TRIGGER, 0.8)
    container.scheduler.run_cycle()

    assert actuator.outputs["intake.motor"] == pytest.approx(0.8)


def test_pivot_hold_and_manual(container, inputs, actuator):
    """Test that bumpers move the pivot and release returns to hold power"""
    container.scheduler.run_cycle()
    assert actuator.outputs["pivot.motor"] == pytest.approx(config.PIVOT_HOLD_POWER)

    press(container, inputs, PRIMARY, XboxButton.BUMPER_LEFT, cycles=3)
    assert isinstance(container.scheduler.active_command(container.pivot), RunPivot)
    assert actuator.outputs["pivot.motor"] == pytest.approx(config.PIVOT_MANUAL_POWER)

    release(container, inputs, PRIMARY, XboxButton.BUMPER_LEFT)
    container.scheduler.run_cycle()
    assert actuator.outputs["pivot.motor"] == pytest.approx(config.PIVOT_HOLD_POWER)

    press(container, inputs, PRIMARY, XboxButton.BUMPER_RIGHT)
    assert actuator.outputs["pivot.motor"] == pytest.approx(-config.PIVOT_MANUAL_POWER)


def test_shift_and_relay_toggle_once_per_press(container, inputs, actuator):
    """Test that holding A or X flips the shifter or relay once"""
    press(container, inputs, PRIMARY, XboxButton.A, cycles=4)
    press(container, inputs, PRIMARY, XboxButton.X, cycles=4)

    assert actuator.writes("drivetrain.shifter") == [0.0, 1.0]
    assert actuator.writes("relay") == [0.0, 1.0]

    release(container, inputs, PRIMARY, XboxButton.X)
    press(container, inputs, PRIMARY, XboxButton.X)
    assert actuator.writes("relay") == [0.0, 1.0, 0.0]


def test_shooter_while_held(container, inputs):
    """Test that the operator X button spins the shooter while held"""
    press(container, inputs, SECONDARY, XboxButton.X, cycles=2)
    assert isinstance(container.scheduler.active_command(container.shooter), RunShooter)

    release(container, inputs, SECONDARY, XboxButton.X)
    assert container.scheduler.active_command(container.shooter) is container.shooter.default_command


def test_climber_buttons(container, inputs, actuator):
    """Test that operator A and B run the climber up and down"""
    press(container, inputs, SECONDARY, XboxButton.A)
    assert isinstance(container.scheduler.active_command(container.climber), RunClimber)
    assert actuator.outputs["climber.motor"] == pytest.approx(config.CLIMBER_POWER)

    release(container, inputs, SECONDARY, XboxButton.A)
    press(container, inputs, SECONDARY, XboxButton.B)
    assert actuator.outputs["climber.motor"] == pytest.approx(-config.CLIMBER_POWER)


def test_gyro_turn_without_target_returns_to_drive(container, inputs):
    """Test that Y without a vision target ends at once and driving resumes"""
    container.scheduler.run_cycle()
    press(container, inputs, PRIMARY, XboxButton.Y)

    owner = container.scheduler.active_command(container.drivetrain)
    assert not isinstance(owner, GyroTurn)
    assert owner is container.drivetrain.default_command


def test_stock_autonomous_routine(container):
    """Test the stock autonomous path from (0, 0) to (3, 0) through two waypoints"""
    routine = container.get_autonomous_routine()
    trajectory = routine.trajectory

    assert trajectory.total_time > 0.0
    end = trajectory.sample(trajectory.total_time).pose
    assert end.x == pytest.approx(3.0)
    assert end.y == pytest.approx(0.0, abs=1e-9)
    assert routine.command.max_output_voltage == config.MAX_OUTPUT_VOLTAGE
    assert routine.command.requirements == frozenset({container.drivetrain})
