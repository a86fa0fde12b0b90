"""Commands and subsystems.

A Subsystem is a group of actuators scheduled as a unit. A Command is a
time-extended behavior that requires exclusive use of zero or more
subsystems. Every command exposes the same four-step interface, which the
scheduler drives:

    initialize()          once, when the command becomes active
    execute()             once per cycle while active
    is_finished()         polled after execute()
    end(interrupted)      once, when finished, canceled or superseded

Commands never write to a subsystem's actuators outside these calls, so a
subsystem's outputs are only touched by its current owner.
"""

import logging
from enum import Enum
from typing import Callable, FrozenSet, List, Optional


class CommandState(Enum):
    """Lifecycle state of a command."""

    IDLE = "idle"
    INITIALIZED = "initialized"
    EXECUTING = "executing"
    ENDING = "ending"


class Subsystem:
    """An addressable actuator group owned by at most one command at a time.

    Attributes:
        name: Unique identity used in logs and as actuator channel prefix.
        default_command: Lowest-priority command, installed through
            CommandScheduler.set_default_command().
    """

    def __init__(self, name: str):
        self.name = name
        self.default_command: Optional["Command"] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Command:
    """Base class of all commands.

    Subclasses override the lifecycle hooks they need. The default
    implementation does nothing and never finishes.
    """

    def __init__(
        self,
        *requirements: Subsystem,
        interruptible: bool = True,
        name: Optional[str] = None,
    ):
        """Initialize the command.

        Args:
            requirements: Subsystems this command needs exclusive use of.
            interruptible: If False, other commands cannot evict this one.
            name: Name used in logs. Defaults to the class name.
        """
        self.requirements: FrozenSet[Subsystem] = frozenset(requirements)
        self.interruptible = interruptible
        self.name = name or type(self).__name__
        self.state = CommandState.IDLE

    def initialize(self) -> None:
        pass

    def execute(self) -> None:
        pass

    def is_finished(self) -> bool:
        return False

    def end(self, interrupted: bool) -> None:
        pass

    def then(self, *commands: "Command") -> "SequentialCommand":
        """Run this command, then each of the given commands in order."""
        return SequentialCommand(self, *commands)

    def __repr__(self) -> str:
        return f"<{self.name} {self.state.value}>"


class InstantCommand(Command):
    """Runs an action once on initialize and finishes immediately."""

    def __init__(self, action: Callable[[], None], *requirements: Subsystem, name=None):
        super().__init__(*requirements, name=name)
        self._action = action

    def initialize(self) -> None:
        self._action()

    def is_finished(self) -> bool:
        return True


class RunCommand(Command):
    """Runs an action every cycle until interrupted."""

    def __init__(self, action: Callable[[], None], *requirements: Subsystem, name=None):
        super().__init__(*requirements, name=name)
        self._action = action

    def execute(self) -> None:
        self._action()


class SequentialCommand(Command):
    """Runs commands one after another, holding the union of their requirements.

    The next command is initialized in the same cycle the previous one
    finishes, and executes from the following cycle.
    """

    def __init__(self, *commands: Command, name: Optional[str] = None):
        if not commands:
            raise ValueError("SequentialCommand needs at least one command")
        requirements: List[Subsystem] = []
        for command in commands:
            requirements.extend(command.requirements)
        super().__init__(
            *requirements,
            interruptible=all(c.interruptible for c in commands),
            name=name or " -> ".join(c.name for c in commands),
        )
        self.commands = list(commands)
        self._index = 0

    def initialize(self) -> None:
        self._index = 0
        self._start_current()

    def execute(self) -> None:
        if self._index >= len(self.commands):
            return
        current = self.commands[self._index]
        current.execute()
        current.state = CommandState.EXECUTING
        if current.is_finished():
            self._finish_current(interrupted=False)
            self._index += 1
            self._start_current()

    def is_finished(self) -> bool:
        return self._index >= len(self.commands)

    def end(self, interrupted: bool) -> None:
        if interrupted and self._index < len(self.commands):
            self._finish_current(interrupted=True)

    def _start_current(self) -> None:
        if self._index < len(self.commands):
            current = self.commands[self._index]
            current.state = CommandState.INITIALIZED
            current.initialize()

    def _finish_current(self, interrupted: bool) -> None:
        current = self.commands[self._index]
        current.state = CommandState.ENDING
        current.end(interrupted)
        current.state = CommandState.IDLE
        logging.debug(f"{self.name}: step {current.name} ended (interrupted={interrupted})")
