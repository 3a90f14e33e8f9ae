from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from shared.errors import InvalidActionError

# Frames & units: x = column axis, z = row axis (grid rows grow toward +z),
# continuous units are grid indices scaled by the cell edge length.
# Facing angle 0 looks toward -z; positive angles turn left (CCW from above).

Cell = Tuple[int, int]  # grid (x, z)
Vec2 = Tuple[float, float]  # continuous (x, z)


class Action(str, Enum):
    MOVE_FORWARD = "move_forward"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    STOP = "stop"


# Actions the look-ahead evaluates; STOP is not a motion primitive.
MOTION_ACTIONS: Tuple[Action, ...] = (Action.MOVE_FORWARD, Action.TURN_LEFT, Action.TURN_RIGHT)


def parse_action(value: object) -> Action:
    """Coerce an action symbol (or Action) into an Action; reject anything else."""
    if isinstance(value, Action):
        return value
    if isinstance(value, str):
        try:
            return Action(value.strip().lower())
        except ValueError:
            pass
    raise InvalidActionError(value)


@dataclass(frozen=True)
class AgentState:
    x: float
    z: float
    angle: float = 0.0  # rad, not normalized

    @property
    def position(self) -> Vec2:
        return self.x, self.z


@dataclass(frozen=True)
class DriveInput:
    """Raw continuous-drive intents for one tick."""

    forward: bool = False
    backward: bool = False
    turn_left: bool = False
    turn_right: bool = False


@dataclass(frozen=True)
class SimulationResult:
    position: Vec2
    angle: float
    blocked: bool


@dataclass(frozen=True)
class ActionOutcome:
    """Payload of the completion signal for one finished action."""

    action: Action
    blocked: bool
    state: AgentState
