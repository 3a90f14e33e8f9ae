from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from control.motion import MotionParams
from maze.grid_map import (
    REFERENCE_CELL_SIZE,
    REFERENCE_GOAL,
    REFERENCE_LAYOUT,
    REFERENCE_START,
    GridMap,
)
from observation.encoder import SCHEMATIC_SCALE


@dataclass
class MazeConfig:
    layout: List[Any] = field(default_factory=lambda: [list(r) for r in REFERENCE_LAYOUT])
    cell_size: float = REFERENCE_CELL_SIZE
    start: Optional[tuple] = REFERENCE_START
    goal: Optional[tuple] = REFERENCE_GOAL

    def build(self) -> GridMap:
        return GridMap.from_rows(self.layout, self.start, self.goal, self.cell_size)


@dataclass
class EngineConfig:
    maze: MazeConfig = field(default_factory=MazeConfig)
    motion: MotionParams = field(default_factory=MotionParams)
    schematic_scale: float = SCHEMATIC_SCALE
    trail_interval: float = 0.5  # s between breadcrumb samples
    tick_dt: float = 1.0 / 60.0
    history_limit: int = 50  # text maps kept for the step-history prompt
    trail_limit: int = 2000  # breadcrumb samples kept for the schematic


def _cell(v: Any) -> Optional[tuple]:
    if v is None:
        return None
    if isinstance(v, dict):
        return int(v["x"]), int(v["z"])
    x, z = v
    return int(x), int(z)


def config_from_dict(cfg: Dict[str, Any]) -> EngineConfig:
    m = cfg.get("maze", {}) or {}
    mo = cfg.get("motion", {}) or {}
    defaults = MotionParams()

    layout = m.get("layout")
    cell_size = float(m.get("cell_size", REFERENCE_CELL_SIZE))
    if layout is None:
        maze = MazeConfig(cell_size=cell_size)
    else:
        # a custom layout carries its own start/goal (keys or 'S'/'G' markers)
        maze = MazeConfig(
            layout=list(layout),
            cell_size=cell_size,
            start=_cell(m.get("start")),
            goal=_cell(m.get("goal")),
        )

    motion = MotionParams(
        radius=float(mo.get("radius", defaults.radius)),
        drive_speed=float(mo.get("drive_speed", defaults.drive_speed)),
        turn_speed=float(mo.get("turn_speed", defaults.turn_speed)),
        animation_rate=float(mo.get("animation_rate", defaults.animation_rate)),
    )
    motion.validate(maze.cell_size)

    for key in ("history_limit", "trail_limit"):
        if key in cfg and int(cfg[key]) < 1:
            raise ValueError(f"{key} must be at least 1")

    return EngineConfig(
        maze=maze,
        motion=motion,
        schematic_scale=float(cfg.get("schematic_scale", SCHEMATIC_SCALE)),
        trail_interval=float(cfg.get("trail_interval", 0.5)),
        tick_dt=float(cfg.get("tick_dt", 1.0 / 60.0)),
        history_limit=int(cfg.get("history_limit", 50)),
        trail_limit=int(cfg.get("trail_limit", 2000)),
    )


def load_config(path: str | None) -> EngineConfig:
    """YAML -> EngineConfig. A missing path falls back to the reference maze."""
    if not path or not os.path.exists(path):
        return EngineConfig()
    with open(path, "r") as f:
        cfg = yaml.safe_load(f) or {}
    return config_from_dict(cfg)
