from pathlib import Path

import numpy as np
import pytest

from maze.grid_map import REFERENCE_LAYOUT
from shared.config import EngineConfig, config_from_dict, load_config

ROOT = Path(__file__).resolve().parents[2]


def test_missing_file_falls_back_to_reference():
    cfg = load_config("does/not/exist.yaml")
    assert isinstance(cfg, EngineConfig)
    g = cfg.maze.build()
    assert np.array_equal(g.layout, np.asarray(REFERENCE_LAYOUT))
    assert cfg.motion.radius == 0.4


def test_shipped_yaml_matches_reference_defaults():
    cfg = load_config(str(ROOT / "configs" / "maze.yaml"))
    ref = EngineConfig()
    g, g_ref = cfg.maze.build(), ref.maze.build()
    assert np.array_equal(g.layout, g_ref.layout)
    assert (g.start, g.goal, g.cell_size) == (g_ref.start, g_ref.goal, g_ref.cell_size)
    assert cfg.motion == ref.motion
    assert cfg.schematic_scale == 60


def test_custom_layout_with_explicit_cells():
    cfg = config_from_dict(
        {
            "maze": {"layout": [[1, 1, 1], [0, 0, 0]], "cell_size": 1.0, "start": [0, 1], "goal": {"x": 2, "z": 1}},
            "motion": {"radius": 0.3, "animation_rate": 4.0},
        }
    )
    g = cfg.maze.build()
    assert (g.start, g.goal) == ((0, 1), (2, 1))
    assert cfg.motion.animation_rate == 4.0 and cfg.motion.drive_speed == 3.0


def test_radius_too_large_for_cell_rejected():
    with pytest.raises(ValueError):
        config_from_dict({"maze": {"cell_size": 0.5}, "motion": {"radius": 0.4}})


def test_yaml_round_trip(tmp_path):
    p = tmp_path / "m.yaml"
    p.write_text('maze:\n  layout: ["#####", "#S.G#", "#####"]\ntrail_interval: 1.5\n')
    cfg = load_config(str(p))
    assert cfg.trail_interval == 1.5
    assert cfg.maze.build().start == (1, 1)


def test_history_limits():
    assert load_config(str(ROOT / "configs" / "maze.yaml")).history_limit == 50
    cfg = config_from_dict({"history_limit": 5, "trail_limit": 10})
    assert (cfg.history_limit, cfg.trail_limit) == (5, 10)
    with pytest.raises(ValueError):
        config_from_dict({"trail_limit": 0})
