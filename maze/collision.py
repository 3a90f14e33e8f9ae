from __future__ import annotations

from maze.grid_map import GridMap
from shared.types import Vec2


def _clamp(v: float, lo: float, hi: float) -> float:
    return hi if v > hi else lo if v < lo else v


def collides(grid: GridMap, position: Vec2, radius: float) -> bool:
    """Circle vs. wall-cell test on the 3x3 neighbourhood of the nearest cell.

    Closest-point test against each wall square (centred on index * edge,
    half-width edge/2). Only valid for radius < edge/2, which is checked once
    when motion params are built, not here.
    """
    px, pz = position
    gx, gz = grid.to_grid(px), grid.to_grid(pz)
    half = grid.cell_size / 2.0
    r2 = radius * radius

    for z in range(gz - 1, gz + 2):
        for x in range(gx - 1, gx + 2):
            if not grid.is_wall(x, z):
                continue
            cx, cz = grid.to_continuous(x), grid.to_continuous(z)
            qx = _clamp(px, cx - half, cx + half)
            qz = _clamp(pz, cz - half, cz + half)
            dx, dz = px - qx, pz - qz
            if dx * dx + dz * dz < r2:
                return True
    return False
