from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set, Union

import numpy as np

from shared.types import Cell

WALL = 1
OPEN = 0

# Row index = z, column index = x.
REFERENCE_LAYOUT: List[List[int]] = [
    [1, 1, 1, 1, 1, 1, 1, 1],
    [1, 0, 0, 0, 1, 0, 0, 1],
    [1, 0, 1, 0, 1, 0, 1, 1],
    [1, 0, 1, 0, 0, 0, 0, 1],
    [1, 0, 1, 1, 1, 1, 0, 1],
    [1, 0, 0, 0, 0, 0, 0, 1],
    [1, 1, 1, 1, 1, 1, 1, 1],
]
REFERENCE_CELL_SIZE = 2.0
REFERENCE_START: Cell = (6, 5)
REFERENCE_GOAL: Cell = (1, 1)


class CellKind(str, Enum):
    WALL = "wall"
    OPEN = "open"
    VISITED = "visited"


Row = Union[str, Sequence[int]]


def _parse_row(row: Row) -> List[int]:
    if isinstance(row, str):
        return [WALL if ch == "#" else OPEN for ch in row.replace(" ", "")]
    return [WALL if int(v) == WALL else OPEN for v in row]


def _find_marker(rows: Sequence[Row], marker: str) -> Optional[Cell]:
    for z, row in enumerate(rows):
        if isinstance(row, str):
            x = row.replace(" ", "").find(marker)
            if x >= 0:
                return x, z
    return None


class GridMap:
    """Fixed maze layout plus a breadcrumb layer of visited cells.

    The layout table is immutable after construction; the only runtime
    mutation is Open -> Visited via mark_visited(). Anything outside the
    grid reads as Wall.
    """

    def __init__(
        self,
        layout: Iterable[Sequence[int]],
        start: Cell,
        goal: Cell,
        cell_size: float = REFERENCE_CELL_SIZE,
    ) -> None:
        rows = [list(r) for r in layout]
        if not rows or not rows[0]:
            raise ValueError("layout must have at least one row and one column")
        if any(len(r) != len(rows[0]) for r in rows):
            raise ValueError("layout rows must all have the same length")
        if cell_size <= 0.0:
            raise ValueError("cell_size must be positive")

        self._layout = np.asarray(rows, dtype=np.int8)
        self._layout.setflags(write=False)
        self.cell_size = float(cell_size)
        self._visited: Set[Cell] = set()

        for name, (x, z) in (("start", start), ("goal", goal)):
            if not self.in_bounds(x, z):
                raise ValueError(f"{name} {(x, z)} is outside the layout")
            if self._layout[z, x] == WALL:
                raise ValueError(f"{name} {(x, z)} is on a wall cell")
        if tuple(start) == tuple(goal):
            raise ValueError("start and goal must be different cells")
        self._start: Cell = (int(start[0]), int(start[1]))
        self._goal: Cell = (int(goal[0]), int(goal[1]))

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Row],
        start: Optional[Cell] = None,
        goal: Optional[Cell] = None,
        cell_size: float = REFERENCE_CELL_SIZE,
    ) -> "GridMap":
        """Build from text rows ('#' wall, anything else open, spaces ignored)
        or 0/1 rows. Text rows may carry 'S'/'G' markers for start and goal."""
        start = start if start is not None else _find_marker(rows, "S")
        goal = goal if goal is not None else _find_marker(rows, "G")
        if start is None or goal is None:
            raise ValueError("start and goal must be given or marked with 'S'/'G'")
        return cls([_parse_row(r) for r in rows], tuple(start), tuple(goal), cell_size)

    @property
    def width(self) -> int:
        return int(self._layout.shape[1])

    @property
    def height(self) -> int:
        return int(self._layout.shape[0])

    @property
    def layout(self) -> np.ndarray:
        """Read-only (height, width) array, 1 = wall."""
        return self._layout

    @property
    def visited(self) -> frozenset:
        return frozenset(self._visited)

    @property
    def start(self) -> Cell:
        return self._start

    @property
    def goal(self) -> Cell:
        return self._goal

    def in_bounds(self, x: int, z: int) -> bool:
        return 0 <= x < self._layout.shape[1] and 0 <= z < self._layout.shape[0]

    def cell_at(self, x: int, z: int) -> CellKind:
        if not self.in_bounds(x, z):
            return CellKind.WALL
        if (x, z) in self._visited:
            return CellKind.VISITED
        return CellKind.WALL if self._layout[z, x] == WALL else CellKind.OPEN

    def is_wall(self, x: int, z: int) -> bool:
        return self.cell_at(x, z) is CellKind.WALL

    def is_start(self, x: int, z: int) -> bool:
        return (x, z) == self._start

    def is_goal(self, x: int, z: int) -> bool:
        return (x, z) == self._goal

    def mark_visited(self, x: int, z: int) -> bool:
        """Open -> Visited. Returns True only when the cell actually changed."""
        if self.is_start(x, z) or self.is_goal(x, z):
            return False
        if self.cell_at(x, z) is not CellKind.OPEN:
            return False
        self._visited.add((x, z))
        return True

    def clear_visited(self) -> None:
        self._visited.clear()

    def wall_cells(self) -> List[Cell]:
        zs, xs = np.nonzero(self._layout == WALL)
        return [(int(x), int(z)) for z, x in zip(zs, xs)]

    def to_grid(self, value: float) -> int:
        # halves round up (toward +inf), not to even
        return int(np.floor(value / self.cell_size + 0.5))

    def to_continuous(self, index: int) -> float:
        return float(index) * self.cell_size

    def cell_of(self, x: float, z: float) -> Cell:
        return self.to_grid(x), self.to_grid(z)

    def cell_center(self, cell: Cell) -> tuple[float, float]:
        return self.to_continuous(cell[0]), self.to_continuous(cell[1])


def reference_map() -> GridMap:
    """The 8x7 demo maze: start bottom-right, goal top-left."""
    return GridMap(REFERENCE_LAYOUT, REFERENCE_START, REFERENCE_GOAL, REFERENCE_CELL_SIZE)
