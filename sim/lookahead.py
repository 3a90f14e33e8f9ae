from __future__ import annotations

import math
from typing import Dict

from maze.collision import collides
from maze.grid_map import GridMap
from shared.types import MOTION_ACTIONS, Action, AgentState, SimulationResult, Vec2

QUARTER_TURN = math.pi / 2.0


def forward_vector(angle: float) -> Vec2:
    """Unit heading in (x, z); angle 0 faces -z."""
    return -math.sin(angle), -math.cos(angle)


def step_offset(action: Action, angle: float, cell_size: float) -> tuple[float, float, float]:
    """Full terminal offset (dx, dz, dangle) of one discrete action."""
    if action is Action.MOVE_FORWARD:
        fx, fz = forward_vector(angle)
        return fx * cell_size, fz * cell_size, 0.0
    if action is Action.TURN_LEFT:
        return 0.0, 0.0, QUARTER_TURN
    if action is Action.TURN_RIGHT:
        return 0.0, 0.0, -QUARTER_TURN
    return 0.0, 0.0, 0.0


def simulate_action(
    grid: GridMap, state: AgentState, action: Action, radius: float
) -> SimulationResult:
    dx, dz, da = step_offset(action, state.angle, grid.cell_size)
    target = (state.x + dx, state.z + dz)
    if action is Action.MOVE_FORWARD and collides(grid, target, radius):
        # no partial slide: a blocked step leaves the agent where it started
        return SimulationResult(position=state.position, angle=state.angle, blocked=True)
    return SimulationResult(position=target, angle=state.angle + da, blocked=False)


def simulate(grid: GridMap, state: AgentState, radius: float) -> Dict[Action, SimulationResult]:
    """Terminal outcome of each motion action from a committed (idle) state.

    Pure: neither the state nor the grid is touched, so repeated calls with
    the same inputs return equal results.
    """
    return {a: simulate_action(grid, state, a, radius) for a in MOTION_ACTIONS}
