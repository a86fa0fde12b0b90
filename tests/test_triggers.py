"""Tests for trigger bindings and joystick buttons"""

import pytest
from conftest import RecordingCommand

from robot_control.interfaces import XboxButton
from robot_control.scheduler import CommandScheduler
from robot_control.triggers import JoystickButton, TriggerAction, TriggerBinding, TriggerKind


def poll_sequence(kind, levels):
    state = {"level": False}
    binding = TriggerBinding(kind=kind, condition=lambda: state["level"], command=RecordingCommand())
    actions = []
    for level in levels:
        state["level"] = level
        actions.append(binding.poll())
    return actions


def test_when_pressed_edges():
    """Test that when-pressed only reports rising edges"""
    actions = poll_sequence(TriggerKind.WHEN_PRESSED, [False, True, True, False, True])
    assert actions == [None, TriggerAction.SCHEDULE, None, None, TriggerAction.SCHEDULE]


def test_while_held_actions():
    """Test that while-held requests scheduling while pressed and cancels on release"""
    actions = poll_sequence(TriggerKind.WHILE_HELD, [True, True, False, False, True])
    assert actions == [
        TriggerAction.SCHEDULE,
        TriggerAction.SCHEDULE,
        TriggerAction.CANCEL,
        None,
        TriggerAction.SCHEDULE,
    ]


def test_toggle_edges():
    """Test that toggle reports each rising edge"""
    actions = poll_sequence(TriggerKind.TOGGLE, [True, False, True, True])
    assert actions == [TriggerAction.TOGGLE, None, TriggerAction.TOGGLE, None]


def test_condition_is_coerced_to_bool():
    """Test that truthy condition values count as pressed"""
    actions = poll_sequence(TriggerKind.WHEN_PRESSED, [0, 1, 2])
    assert actions == [None, TriggerAction.SCHEDULE, None]


def test_joystick_button_reads_input(inputs):
    """Test that a joystick button reads its device and button"""
    button = JoystickButton(CommandScheduler(), inputs, 1, XboxButton.B)
    assert button.get() is False

    inputs.set_button(1, XboxButton.B, True)
    assert button.get() is True

    inputs.set_button(0, XboxButton.B, False)
    assert button.get() is True


def test_joystick_button_binds_to_scheduler(inputs, arm):
    """Test that joystick bindings drive the scheduler"""
    scheduler = CommandScheduler()
    scheduler.set_default_command(arm, RecordingCommand(arm, name="Default"))
    held = RecordingCommand(arm, name="Held")

    button = JoystickButton(scheduler, inputs, 0, XboxButton.A)
    assert button.while_held(held) is button

    inputs.set_button(0, XboxButton.A, True)
    scheduler.run_cycle()
    assert scheduler.active_command(arm) is held

    inputs.set_button(0, XboxButton.A, False)
    scheduler.run_cycle()
    assert scheduler.active_command(arm) is arm.default_command


def test_scripted_input_rejects_out_of_range(inputs):
    """Test that axis values stay within [-1, 1]"""
    with pytest.raises(ValueError):
        inputs.set_axis(0, 1, 1.5)
