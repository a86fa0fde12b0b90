"""Tests for subsystems and teleoperated commands"""

import pytest
from conftest import RecordingCommand

from robot_control import config
from robot_control.commands import (
    Drive,
    GyroTurn,
    PneumaticShift,
    RunClimber,
    RunIntake,
    RunPivot,
    RunShooter,
    RunStorage,
    SwitchRelay,
    apply_deadzone,
)
from robot_control.model import DifferentialDriveKinematics, Pose2d, WheelSpeeds
from robot_control.motor_controller import PIDController, SimpleMotorFeedforward
from robot_control.scheduler import CommandScheduler
from robot_control.subsystems import (
    Climber,
    Drivetrain,
    Intake,
    Pivot,
    Shooter,
    Storage,
    ToggleOutput,
)
from robot_control.triggers import TriggerKind


class Yaw:
    def __init__(self, degrees=0.0):
        self.degrees = degrees

    def __call__(self):
        return self.degrees


@pytest.fixture
def yaw():
    return Yaw()


@pytest.fixture
def drivetrain(actuator, yaw):
    return Drivetrain(
        actuator,
        DifferentialDriveKinematics(0.69),
        lambda: Pose2d(),
        lambda: WheelSpeeds(),
        yaw_source=yaw,
        max_voltage=12.0,
    )


def run(scheduler, command, cycles=1):
    scheduler.schedule(command)
    for _ in range(cycles):
        scheduler.run_cycle()


@pytest.mark.parametrize(
    "value,expected",
    [(0.0, 0.0), (0.05, 0.0), (-0.079, 0.0), (1.0, 1.0), (-1.0, -1.0), (0.54, 0.5)],
)
def test_apply_deadzone(value, expected):
    """Test deadzone filtering and rescaling"""
    assert apply_deadzone(value, 0.08) == pytest.approx(expected)


def test_arcade_drive_desaturates(drivetrain, actuator):
    """Test that arcade drive keeps the turn ratio when saturated"""
    drivetrain.arcade_drive(1.0, 0.5)

    assert actuator.outputs["drivetrain.left_power"] == pytest.approx(1.0 / 3.0)
    assert actuator.outputs["drivetrain.right_power"] == pytest.approx(1.0)


def test_tank_drive_volts_clamped(drivetrain, actuator):
    """Test that tank drive voltages are clamped to the drivetrain limit"""
    drivetrain.tank_drive_volts(15.0, -20.0)

    assert actuator.outputs["drivetrain.left"] == 12.0
    assert actuator.outputs["drivetrain.right"] == -12.0


def test_drive_command(drivetrain, actuator):
    """Test arcade teleop from two suppliers"""
    scheduler = CommandScheduler()
    sticks = {"forward": 0.54, "turn": 0.05}
    drive = Drive(drivetrain, lambda: sticks["forward"], lambda: sticks["turn"])
    scheduler.set_default_command(drivetrain, drive)

    scheduler.run_cycle()
    assert actuator.outputs["drivetrain.left_power"] == pytest.approx(0.5)
    assert actuator.outputs["drivetrain.right_power"] == pytest.approx(0.5)

    scheduler.cancel(drive)
    assert actuator.outputs["drivetrain.left_power"] == 0.0


def test_pivot_and_climber_power(actuator):
    """Test fixed-power mechanism commands and stop on end"""
    scheduler = CommandScheduler()
    pivot = Pivot(actuator)
    climber = Climber(actuator)
    scheduler.set_default_command(pivot, RunPivot(pivot, config.PIVOT_HOLD_POWER))
    scheduler.set_default_command(climber, RunClimber(climber, 0.0))

    scheduler.run_cycle()
    assert actuator.outputs["pivot.motor"] == pytest.approx(-0.05)

    up = RunClimber(climber, 0.5)
    run(scheduler, up)
    assert actuator.outputs["climber.motor"] == 0.5

    scheduler.cancel(up)
    assert actuator.outputs["climber.motor"] == 0.0


def test_run_intake_from_triggers(actuator):
    """Test that the intake runs forward minus reverse trigger"""
    scheduler = CommandScheduler()
    intake = Intake(actuator)
    triggers = {"reverse": 0.2, "forward": 0.9}
    scheduler.set_default_command(
        intake, RunIntake(intake, lambda: triggers["reverse"], lambda: triggers["forward"])
    )

    scheduler.run_cycle()
    assert actuator.outputs["intake.motor"] == pytest.approx(0.7)


def test_run_storage(actuator):
    """Test belt from triggers and feeder wheels from sticks"""
    scheduler = CommandScheduler()
    storage = Storage(actuator)
    scheduler.set_default_command(
        storage, RunStorage(storage, lambda: 0.0, lambda: 1.0, lambda: -0.54, lambda: 0.02)
    )

    scheduler.run_cycle()
    assert actuator.outputs["storage.belt"] == 1.0
    assert actuator.outputs["storage.upper"] == pytest.approx(-0.5)
    assert actuator.outputs["storage.lower"] == 0.0


def test_run_shooter_feedforward_plus_feedback(actuator):
    """Test flywheel voltage and stop on end"""
    scheduler = CommandScheduler()
    shooter = Shooter(actuator, lambda: 4000.0)
    scheduler.set_default_command(shooter, RecordingCommand(shooter, name="Idle"))
    feedforward = SimpleMotorFeedforward(0.3, 0.002)
    command = RunShooter(shooter, 4800.0, feedforward, PIDController(0.001))

    run(scheduler, command)
    assert actuator.outputs["shooter.flywheel"] == pytest.approx(0.3 + 9.6 + 0.8)

    scheduler.cancel(command)
    assert actuator.outputs["shooter.flywheel"] == 0.0


def test_relay_flips_once_per_press(actuator):
    """Test that holding the relay button flips the relay once"""
    scheduler = CommandScheduler()
    relay = ToggleOutput(actuator, "relay")
    button = {"pressed": False}
    scheduler.bind(TriggerKind.WHEN_PRESSED, lambda: button["pressed"], SwitchRelay(relay))

    button["pressed"] = True
    for _ in range(5):
        scheduler.run_cycle()
    assert relay.on
    assert actuator.writes("relay") == [0.0, 1.0]

    button["pressed"] = False
    scheduler.run_cycle()
    button["pressed"] = True
    scheduler.run_cycle()
    assert not relay.on
    assert actuator.writes("relay") == [0.0, 1.0, 0.0]


def test_pneumatic_shift_toggles_shifter(drivetrain, actuator):
    """Test that the gear shift flips the shifter without taking the drivetrain"""
    scheduler = CommandScheduler()
    idle = RecordingCommand(drivetrain, name="Idle")
    scheduler.set_default_command(drivetrain, idle)
    scheduler.run_cycle()

    run(scheduler, PneumaticShift(drivetrain.gear_shifter))

    assert drivetrain.gear_shifter.on
    assert actuator.outputs["drivetrain.shifter"] == 1.0
    assert "end(interrupted=True)" not in idle.events


def test_gyro_turn_without_target_finishes(drivetrain, actuator):
    """Test that a turn without a vision target finishes at once with zero power"""
    scheduler = CommandScheduler()
    scheduler.set_default_command(drivetrain, RecordingCommand(drivetrain, name="Idle"))
    telemetry = []
    turn = GyroTurn(drivetrain, 1 / 120, 0.02, lambda: None, lambda name, value: telemetry.append((name, value)))

    run(scheduler, turn)

    assert not scheduler.is_scheduled(turn)
    assert telemetry == [("gyro_turn_power", 0.0)]
    assert actuator.outputs["drivetrain.right_power"] == 0.0


def test_gyro_turn_toward_target(drivetrain, actuator, yaw):
    """Test that the turn drives toward the latched target and stops within tolerance"""
    scheduler = CommandScheduler()
    scheduler.set_default_command(drivetrain, RecordingCommand(drivetrain, name="Idle"))
    telemetry = []
    turn = GyroTurn(
        drivetrain, 1 / 120, 0.02, lambda: 12.0, lambda name, value: telemetry.append(value),
        tolerance=1.0,
    )

    run(scheduler, turn)
    assert telemetry[-1] == pytest.approx(12.0 / 120 + 0.02)
    assert actuator.outputs["drivetrain.left_power"] == pytest.approx(-telemetry[-1])
    assert actuator.outputs["drivetrain.right_power"] == pytest.approx(telemetry[-1])
    assert turn.target_yaw == 12.0

    yaw.degrees = 11.5
    scheduler.run_cycle()
    assert not scheduler.is_scheduled(turn)
    assert actuator.outputs["drivetrain.right_power"] == 0.0
