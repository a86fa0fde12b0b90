"""Robot Control Core - Command Scheduling and Trajectory Following for Differential-Drive Robots

A cooperative, single-threaded control core for a competition robot: a command
scheduler that arbitrates exclusive subsystem ownership, edge-triggered operator
bindings, and a closed-loop trajectory follower for autonomous driving.

## Architecture Overview

Everything runs inside one periodic call, `CommandScheduler.run_cycle()`, made
every 20 ms by the robot loop:

### Layer 1: Scheduling (scheduler.py, command.py, triggers.py)
Arbitrates which command owns each subsystem.
- Every subsystem has exactly one owner between cycles
- Default commands resume whenever a subsystem is released
- Operator bindings: when-pressed, while-held and toggle, all edge-triggered
- Faulting commands are ended and logged; the loop keeps running

### Layer 2: Trajectory Generation (path.py)
Turns a start pose, interior waypoints and an end pose into a timed trajectory.
- C2 cubic spline through the waypoints
- Velocity profile bounded by max velocity, max acceleration and a voltage constraint

### Layer 3: Path Following (follower.py)
Nonlinear Ramsete feedback on the pose error.
- Output: Commanded linear and angular velocities (v_cmd, ω_cmd)

### Layer 4: Wheel Control (motor_controller.py, model.py)
Converts chassis velocities to wheel voltages.
- Differential drive kinematics (track width = 0.69m)
- Feedforward: V = ks·sign(v) + kv·v + ka·a
- Per-wheel PID correction on measured wheel speed

## Modules

### Core Control Modules
- `config.py` - Centralized configuration parameters with documentation
- `command.py` - Command lifecycle and composition
- `scheduler.py` - Command scheduler
- `triggers.py` - Edge-triggered operator bindings
- `path.py` - Trajectory generation
- `follower.py` - Ramsete controller
- `motor_controller.py` - Feedforward and PID
- `model.py` - Poses, speeds and kinematics
- `autonomous.py` - Trajectory-following command and autonomous routine

### Robot Program
- `subsystems.py` - Drivetrain, intake, storage, pivot, shooter, climber
- `commands.py` - Teleoperated and assisted commands
- `container.py` - Subsystems, default commands and button bindings
- `sim.py` - Simulated drivetrain plant
- `robot.py` - Loop runner and logging setup

### Data & Visualization
- `data_collector.py` - CSV data logging for autonomous runs
- `visualization.py` - Post-run plots
- `plot_results.py` - CLI for visualization tools

## Quick Start

```bash
# Run the stock autonomous routine in simulation and plot it
python -m robot_control --plot
```

## Version

0.1.0 - Initial implementation
"""

__version__ = "0.1.0"

# Export key classes for convenience
from .autonomous import AutonomousRoutine, TrajectoryCommand
from .command import Command, CommandState, Subsystem
from .container import RobotContainer
from .data_collector import DataCollector
from .errors import FeedbackUnavailable, InfeasibleTrajectory, MissingDefaultCommand, SchedulingConflict
from .follower import RamseteController
from .path import Trajectory, TrajectoryLimits, generate_trajectory
from .scheduler import CommandScheduler
from .triggers import TriggerKind

__all__ = [
    "AutonomousRoutine",
    "Command",
    "CommandScheduler",
    "CommandState",
    "DataCollector",
    "FeedbackUnavailable",
    "InfeasibleTrajectory",
    "MissingDefaultCommand",
    "RamseteController",
    "RobotContainer",
    "SchedulingConflict",
    "Subsystem",
    "Trajectory",
    "TrajectoryCommand",
    "TrajectoryLimits",
    "TriggerKind",
    "generate_trajectory",
]
