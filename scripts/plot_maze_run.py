#!/usr/bin/env python3
from __future__ import annotations

import argparse
import os
from typing import Iterable

import pandas as pd

from agent.session import MazeSession
from observation.encoder import Schematic, encode_schematic, to_schematic_point
from shared.config import load_config
from shared.types import AgentState

# matplotlib is only needed for plotting; install locally if needed:
#   pip install matplotlib
try:
    import matplotlib.pyplot as plt  # type: ignore
    from matplotlib.patches import Polygon, Rectangle  # type: ignore
except Exception as e:  # pragma: no cover
    raise SystemExit("matplotlib is required for plotting. Try: pip install matplotlib") from e


def load_df(path: str) -> pd.DataFrame:
    df = pd.read_csv(path)
    required: Iterable[str] = ("t", "x", "z", "angle", "action", "blocked")
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise SystemExit(f"CSV missing required columns: {missing}")
    return df


def draw_schematic(ax, sch: Schematic) -> None:
    """Rasterize schematic primitives onto a matplotlib axis (y down)."""
    ax.add_patch(Rectangle((0, 0), sch.width, sch.height, color="#111111"))
    for x, y, w, h in sch.walls:
        ax.add_patch(Rectangle((x, y), w, h, color="#444444"))
    ax.add_patch(Rectangle(sch.start[:2], *sch.start[2:], color=(76 / 255, 175 / 255, 80 / 255, 0.5)))
    ax.add_patch(Rectangle(sch.goal[:2], *sch.goal[2:], color=(54 / 255, 57 / 255, 244 / 255, 0.5)))
    if sch.trail:
        xs, ys = zip(*sch.trail)
        ax.plot(xs, ys, color="#00bcd4", linewidth=1.0, alpha=0.7)
    ax.add_patch(Polygon(sch.marker, closed=True, color="red"))
    ax.set_xlim(0, sch.width)
    ax.set_ylim(sch.height, 0)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Plot a maze run CSV over the schematic map.")
    ap.add_argument("--csv", default="artifacts/maze_run.csv")
    ap.add_argument("--config", default="configs/maze.yaml")
    ap.add_argument("--out", default="artifacts/maze_run.png")
    ap.add_argument("--show", action="store_true")
    args = ap.parse_args(argv)

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    df = load_df(args.csv)
    session = MazeSession(load_config(args.config))

    last = df.iloc[-1]
    state = AgentState(float(last["x"]), float(last["z"]), float(last["angle"]))
    history = list(zip(df["x"].astype(float), df["z"].astype(float)))
    sch = encode_schematic(session.grid, state, history, session.cfg.schematic_scale)

    fig, ax = plt.subplots()
    draw_schematic(ax, sch)
    blocked = df[df["blocked"] == 1]
    if not blocked.empty:
        scale = session.cfg.schematic_scale
        pts = [to_schematic_point(session.grid, (x, z), scale) for x, z in zip(blocked["x"], blocked["z"])]
        bx, by = zip(*pts)
        ax.scatter(bx, by, marker="x", color="orange", label="blocked")
        ax.legend(loc="upper right")
    ax.set_title(f"Maze run ({len(df) - 1} actions)")
    fig.savefig(args.out, dpi=150, bbox_inches="tight")

    if args.show:
        plt.show()

    print(f"Wrote plot to: {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
