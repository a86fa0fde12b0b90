"""Trigger bindings: map an input condition to a scheduling action.

The set of trigger kinds is closed:

- WHEN_PRESSED: schedule the command on the rising edge of the condition
- WHILE_HELD: request scheduling on every cycle the condition is true,
  cancel on the falling edge
- TOGGLE: on each rising edge, cancel the command if it is running,
  otherwise schedule it

Scheduling an active command does nothing, so holding a button across many
cycles never re-initializes a running command. A while-held command that was
interrupted or finished comes back on the next cycle the button is still held.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .command import Command


class TriggerKind(Enum):
    """How a trigger condition maps to scheduling requests."""

    WHEN_PRESSED = "when_pressed"
    WHILE_HELD = "while_held"
    TOGGLE = "toggle"


class TriggerAction(Enum):
    """Scheduling request produced by polling a binding."""

    SCHEDULE = "schedule"
    CANCEL = "cancel"
    TOGGLE = "toggle"


@dataclass
class TriggerBinding:
    """Association of a boolean condition with a command.

    Attributes:
        kind: Binding kind (see TriggerKind)
        condition: Polled once per cycle, True while the trigger is active
        command: Command to schedule or cancel
    """

    kind: TriggerKind
    condition: Callable[[], bool]
    command: Command
    _last: bool = field(default=False, repr=False)

    def poll(self) -> Optional[TriggerAction]:
        """Sample the condition and return the request for this cycle, if any."""
        current = bool(self.condition())
        rising = current and not self._last
        falling = self._last and not current
        self._last = current

        if self.kind is TriggerKind.WHEN_PRESSED:
            return TriggerAction.SCHEDULE if rising else None
        if self.kind is TriggerKind.WHILE_HELD:
            if current:
                return TriggerAction.SCHEDULE
            if falling:
                return TriggerAction.CANCEL
            return None
        if self.kind is TriggerKind.TOGGLE:
            return TriggerAction.TOGGLE if rising else None
        raise ValueError(f"Unknown trigger kind: {self.kind}")


class JoystickButton:
    """Button on an operator device, bindable to commands.

    Example:
        >>> JoystickButton(scheduler, inputs, 0, XboxButton.A).when_pressed(shift)
    """

    def __init__(self, scheduler, input_source, device_id: int, button_id: int):
        self._scheduler = scheduler
        self._input = input_source
        self.device_id = device_id
        self.button_id = int(button_id)

    def get(self) -> bool:
        """Current button level."""
        return bool(self._input.get_button(self.device_id, self.button_id))

    def when_pressed(self, command: Command) -> "JoystickButton":
        self._scheduler.bind(TriggerKind.WHEN_PRESSED, self.get, command)
        return self

    def while_held(self, command: Command) -> "JoystickButton":
        self._scheduler.bind(TriggerKind.WHILE_HELD, self.get, command)
        return self

    def toggle_when_pressed(self, command: Command) -> "JoystickButton":
        self._scheduler.bind(TriggerKind.TOGGLE, self.get, command)
        return self
