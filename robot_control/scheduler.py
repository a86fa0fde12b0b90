"""
Command scheduler - arbitrates subsystem ownership and runs commands.

The scheduler is a single-threaded cooperative loop. It owns no timer: an
external periodic caller invokes run_cycle() once per control period. Each
cycle, in order:

1. Poll trigger bindings (registration order) and collect requests
2. Apply requests: schedule (evicting interruptible owners), cancel, toggle
3. Activate the default command of every subsystem without an owner
4. Execute one step of every active command (scheduling order)
5. End every command that reports itself finished and free its subsystems
6. Re-activate defaults on the freed subsystems (executed next cycle)

Ownership only changes in steps 2, 3, 5 and 6, never while a command is
executing. When two requests target the same subsystem, the later one wins
and the earlier command is ended with interrupted=True.

A fault in one command (any exception from its lifecycle hooks) is logged,
recorded in `faults`, and ends that command as interrupted. The other
commands still run that cycle.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .command import Command, CommandState, Subsystem
from .errors import MissingDefaultCommand, SchedulingConflict
from .triggers import TriggerAction, TriggerBinding, TriggerKind


class CommandScheduler:
    """
    Per-robot command scheduler.

    Constructed once at startup and owned by the robot container; there is
    no global instance.

    Attributes:
        faults: (command, exception) pairs caught by fault isolation
        cycle_count: Number of completed run_cycle() calls
    """

    def __init__(self) -> None:
        self._subsystems: List[Subsystem] = []
        self._owners: Dict[Subsystem, Command] = {}
        self._active: List[Command] = []
        self._bindings: List[TriggerBinding] = []
        self._validated = False

        self.faults: List[Tuple[Command, Exception]] = []
        self.cycle_count = 0

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def register_subsystem(self, *subsystems: Subsystem) -> None:
        """Register subsystems for default-command resolution."""
        for subsystem in subsystems:
            if subsystem in self._subsystems:
                continue
            if any(s.name == subsystem.name for s in self._subsystems):
                raise ValueError(f"Duplicate subsystem name: {subsystem.name}")
            self._subsystems.append(subsystem)
        self._validated = False

    @property
    def subsystems(self) -> List[Subsystem]:
        return list(self._subsystems)

    def set_default_command(self, subsystem: Subsystem, command: Command) -> None:
        """
        Install the default command of a subsystem.

        If the previous default is currently active it is ended (not
        interrupted) and the new default takes over immediately.

        Args:
            subsystem: Subsystem to configure (registered if needed)
            command: Fallback command; must require exactly the subsystem

        Raises:
            ValueError: If the command requires anything but the subsystem
        """
        if command.requirements != frozenset((subsystem,)):
            raise ValueError(f"Default command {command.name} must require only {subsystem.name}")

        self.register_subsystem(subsystem)
        previous = subsystem.default_command
        subsystem.default_command = command

        if previous is not None and previous is not command and self.is_scheduled(previous):
            logging.debug(f"Replacing default command {previous.name} on {subsystem.name}")
            self._end(previous, interrupted=False)
            self._activate_defaults()

    def bind(self, kind: TriggerKind, condition: Callable[[], bool], command: Command) -> TriggerBinding:
        """
        Bind a trigger condition to a command.

        Args:
            kind: WHEN_PRESSED, WHILE_HELD or TOGGLE
            condition: Polled once per cycle
            command: Command to schedule or cancel

        Returns:
            The created TriggerBinding
        """
        binding = TriggerBinding(kind=kind, condition=condition, command=command)
        self._bindings.append(binding)
        return binding

    def validate(self) -> None:
        """
        Check that every registered subsystem has a default command.

        Raises:
            MissingDefaultCommand: For the first subsystem without a default
        """
        for subsystem in self._subsystems:
            if subsystem.default_command is None:
                raise MissingDefaultCommand(subsystem)
        self._validated = True

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule(self, command: Command) -> None:
        """
        Schedule a command, evicting interruptible owners of its requirements.

        Scheduling an already active command does nothing.

        Raises:
            SchedulingConflict: If a requirement is held by a non-interruptible
                command. Nothing is changed in that case.
        """
        if self.is_scheduled(command):
            return

        incumbents: List[Command] = []
        for subsystem in command.requirements:
            owner = self._owners.get(subsystem)
            if owner is None or owner in incumbents:
                continue
            if not owner.interruptible:
                raise SchedulingConflict(command, owner, subsystem)
            incumbents.append(owner)

        for owner in incumbents:
            logging.debug(f"{command.name} interrupts {owner.name}")
            self._end(owner, interrupted=True)

        for subsystem in command.requirements:
            self._owners[subsystem] = command
        self._active.append(command)
        command.state = CommandState.INITIALIZED
        logging.debug(f"Initialized {command.name}")

        try:
            command.initialize()
        except Exception as e:
            self._fault(command, e, "initialize")

    def cancel(self, command: Command) -> None:
        """End a command as interrupted if it is active."""
        if self.is_scheduled(command):
            self._end(command, interrupted=True)

    def cancel_all(self) -> None:
        """End every active command as interrupted."""
        for command in list(self._active):
            self.cancel(command)

    def is_scheduled(self, command: Command) -> bool:
        return command in self._active

    def active_command(self, subsystem: Subsystem) -> Optional[Command]:
        """Command currently owning a subsystem, or None."""
        return self._owners.get(subsystem)

    @property
    def active_commands(self) -> List[Command]:
        return list(self._active)

    # ------------------------------------------------------------------
    # Control cycle
    # ------------------------------------------------------------------

    def run_cycle(self) -> None:
        """
        Run one control cycle.

        Raises:
            MissingDefaultCommand: On the first cycle if a subsystem has no
                default command
        """
        if not self._validated:
            self.validate()

        # 1. Poll triggers
        requests = []
        for binding in self._bindings:
            action = binding.poll()
            if action is not None:
                requests.append((action, binding.command))

        # 2. Apply requests in order (last writer wins)
        for action, command in requests:
            if action is TriggerAction.CANCEL or (
                action is TriggerAction.TOGGLE and self.is_scheduled(command)
            ):
                self.cancel(command)
                continue
            try:
                self.schedule(command)
            except SchedulingConflict as e:
                logging.warning(f"Refused trigger request: {e}")

        # 3. Defaults for free subsystems
        self._activate_defaults()

        # 4. Execute
        for command in list(self._active):
            if not self.is_scheduled(command):
                continue
            try:
                command.execute()
                command.state = CommandState.EXECUTING
            except Exception as e:
                self._fault(command, e, "execute")

        # 5. End finished commands
        for command in list(self._active):
            try:
                finished = command.is_finished()
            except Exception as e:
                self._fault(command, e, "is_finished")
                continue
            if finished:
                self._end(command, interrupted=False)

        # 6. Freed subsystems fall back to their defaults
        self._activate_defaults()

        self.cycle_count += 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _activate_defaults(self) -> None:
        for subsystem in self._subsystems:
            default = subsystem.default_command
            if default is None or subsystem in self._owners:
                continue
            self.schedule(default)

    def _end(self, command: Command, interrupted: bool) -> None:
        command.state = CommandState.ENDING
        try:
            command.end(interrupted)
        except Exception as e:
            logging.error(f"Error ending {command.name}: {e}", exc_info=True)
            self.faults.append((command, e))
        finally:
            for subsystem in command.requirements:
                if self._owners.get(subsystem) is command:
                    del self._owners[subsystem]
            if command in self._active:
                self._active.remove(command)
            command.state = CommandState.IDLE
        logging.debug(f"Ended {command.name} (interrupted={interrupted})")

    def _fault(self, command: Command, error: Exception, phase: str) -> None:
        logging.error(f"Command {command.name} failed in {phase}: {error}", exc_info=True)
        self.faults.append((command, error))
        if self.is_scheduled(command):
            self._end(command, interrupted=True)
