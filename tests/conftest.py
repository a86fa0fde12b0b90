"""Shared fixtures: recording actuator, scripted input, fake clock"""

from typing import Dict, List, Tuple

import pytest

from robot_control.command import Command, Subsystem
from robot_control.robot import ScriptedInput


class RecordingActuator:
    """Actuator sink keeping the last value and the full history of every channel"""

    def __init__(self):
        self.outputs: Dict[str, float] = {}
        self.history: List[Tuple[str, float]] = []

    def set_output(self, subsystem_id: str, value: float) -> None:
        self.outputs[subsystem_id] = value
        self.history.append((subsystem_id, value))

    def writes(self, channel: str) -> List[float]:
        return [value for name, value in self.history if name == channel]


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


class RecordingCommand(Command):
    """Command that records its lifecycle calls"""

    def __init__(self, *requirements, name=None, interruptible=True, finish_after=None):
        super().__init__(*requirements, interruptible=interruptible, name=name)
        self.finish_after = finish_after
        self.events: List[str] = []
        self.executions = 0

    def initialize(self):
        self.executions = 0
        self.events.append("initialize")

    def execute(self):
        self.executions += 1
        self.events.append("execute")

    def is_finished(self):
        return self.finish_after is not None and self.executions >= self.finish_after

    def end(self, interrupted):
        self.events.append(f"end(interrupted={interrupted})")


@pytest.fixture
def actuator():
    return RecordingActuator()


@pytest.fixture
def inputs():
    return ScriptedInput()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def arm():
    return Subsystem("arm")


@pytest.fixture
def wheels():
    return Subsystem("wheels")
