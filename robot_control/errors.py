"""Exception taxonomy for the robot control core."""


class RobotControlError(Exception):
    """Base class for all robot control errors."""


class SchedulingConflict(RobotControlError):
    """A command cannot acquire a subsystem held by a non-interruptible command.

    Attributes:
        command: The command that was refused.
        holder: The non-interruptible command that keeps the subsystem.
        subsystem: The contested subsystem.
    """

    def __init__(self, command, holder, subsystem):
        self.command = command
        self.holder = holder
        self.subsystem = subsystem
        super().__init__(
            f"Cannot schedule {command.name}: {subsystem.name} is held by "
            f"non-interruptible {holder.name}"
        )


class MissingDefaultCommand(RobotControlError):
    """A registered subsystem has no default command installed."""

    def __init__(self, subsystem):
        self.subsystem = subsystem
        super().__init__(f"Subsystem {subsystem.name} has no default command")


class FeedbackUnavailable(RobotControlError):
    """Pose or wheel speed feedback stayed missing for more than one cycle."""


class InfeasibleTrajectory(RobotControlError):
    """A path cannot be generated within the requested constraints."""
