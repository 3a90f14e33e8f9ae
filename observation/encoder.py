from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from maze.grid_map import CellKind, GridMap
from shared.types import AgentState, Vec2

TWO_PI = 2.0 * math.pi
SECTOR = math.pi / 4.0

# 0 faces -z (up on the map), positive angles turn left
GLYPHS = ("^", "<", "v", ">")
SYMBOLS = {CellKind.WALL: "#", CellKind.OPEN: ".", CellKind.VISITED: "o"}
START_SYMBOL = "S"
GOAL_SYMBOL = "G"

SCHEMATIC_SCALE = 60  # px per cell
# marker triangle in its own frame, tip pointing up (-y on screen)
MARKER_SHAPE = np.array([[0.0, -25.0], [18.0, 18.0], [-18.0, 18.0]])

Rect = Tuple[float, float, float, float]  # x, y, w, h in px


def normalize_angle(angle: float) -> float:
    """Wrap into [0, 2*pi); negative angles wrap to the positive side."""
    r = math.fmod(angle, TWO_PI)
    if r < 0.0:
        r += TWO_PI
    return 0.0 if r >= TWO_PI else r


def direction_glyph(angle: float) -> str:
    """One of four glyphs; sector boundaries sit at odd multiples of 45 deg."""
    r = normalize_angle(angle)
    # shift by half a sector so [7pi/4, pi/4) lands in sector 0
    idx = int((r + SECTOR) // (2.0 * SECTOR)) % 4
    return GLYPHS[idx]


def encode_ascii(grid: GridMap, state: AgentState) -> str:
    """Text grid of the maze with the agent's glyph on its cell.

    Side effect: marks the agent's current cell Visited (Start/Goal excepted)
    before rendering, which is how the breadcrumb trail is built.
    """
    ax, az = grid.cell_of(state.x, state.z)
    grid.mark_visited(ax, az)
    glyph = direction_glyph(state.angle)

    lines = ["Current Map:"]
    for z in range(grid.height):
        line = ""
        for x in range(grid.width):
            if (x, z) == (ax, az):
                ch = glyph
            elif grid.is_start(x, z):
                ch = START_SYMBOL
            elif grid.is_goal(x, z):
                ch = GOAL_SYMBOL
            else:
                ch = SYMBOLS[grid.cell_at(x, z)]
            line += ch + " "
        lines.append(line)
    text = "\n".join(lines) + "\n"

    if grid.is_start(ax, az):
        text += "\n[STATUS]: You are currently standing on the START point."
    elif grid.is_goal(ax, az):
        text += "\n[STATUS]: You are currently standing on the GOAL point."
    return text


def format_ascii_history(maps: Sequence[str]) -> str:
    out = []
    for i, m in enumerate(maps):
        label = f"{i + 1} step (latest):" if i == len(maps) - 1 else f"{i + 1} step:"
        out.append(f"{label}\n{m}")
    return "\n\n".join(out)


@dataclass
class Schematic:
    """Drawing primitives for the overhead map, in pixel space (y down)."""

    width: int
    height: int
    walls: List[Rect]
    start: Rect
    goal: Rect
    marker: np.ndarray  # (3, 2) triangle vertices
    marker_center: Tuple[float, float]
    marker_rotation: float  # rad, already negated
    trail: List[Tuple[float, float]] = field(default_factory=list)


def to_schematic_point(grid: GridMap, pos: Vec2, scale: float = SCHEMATIC_SCALE) -> Tuple[float, float]:
    return (
        pos[0] / grid.cell_size * scale + scale / 2.0,
        pos[1] / grid.cell_size * scale + scale / 2.0,
    )


def _cell_rect(cell: Tuple[int, int], scale: float) -> Rect:
    return (cell[0] * scale, cell[1] * scale, scale, scale)


def marker_polygon(center: Tuple[float, float], rotation: float) -> np.ndarray:
    """Rotate the marker shape (screen convention) and move it to center."""
    c, s = math.cos(rotation), math.sin(rotation)
    rot = np.array([[c, -s], [s, c]])
    return MARKER_SHAPE @ rot.T + np.asarray(center)


def encode_schematic(
    grid: GridMap,
    state: AgentState,
    history: Sequence[Vec2] = (),
    scale: float = SCHEMATIC_SCALE,
) -> Schematic:
    """Overhead primitives; rasterizing them is left to the caller.

    The marker turns by -angle: the map is seen from above, so a left turn
    in the scene is a counter-clockwise (negative, y-down) turn on screen.
    """
    center = to_schematic_point(grid, state.position, scale)
    rotation = -state.angle
    return Schematic(
        width=int(grid.width * scale),
        height=int(grid.height * scale),
        walls=[_cell_rect(c, scale) for c in grid.wall_cells()],
        start=_cell_rect(grid.start, scale),
        goal=_cell_rect(grid.goal, scale),
        marker=marker_polygon(center, rotation),
        marker_center=center,
        marker_rotation=rotation,
        trail=[to_schematic_point(grid, p, scale) for p in history],
    )
