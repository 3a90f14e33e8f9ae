from __future__ import annotations

import argparse
import asyncio
import csv
import logging
import os

from agent.decision import DecisionLoop, ScriptedPolicy
from agent.session import MazeSession
from observation.encoder import encode_ascii
from shared.config import load_config
from shared.errors import InvalidActionError
from shared.types import ActionOutcome

# reaches the goal from the reference start
DEFAULT_ACTIONS = (
    "move_forward,move_forward,turn_left,move_forward,move_forward,move_forward,"
    "turn_right,move_forward,move_forward,turn_left,move_forward,move_forward"
)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Scripted maze run: actions -> engine -> CSV trace")
    ap.add_argument("--config", default="configs/maze.yaml")
    ap.add_argument("--actions", default=DEFAULT_ACTIONS, help="comma-separated action list")
    ap.add_argument("--dt", type=float, default=None, help="tick length [s] (config default)")
    ap.add_argument("--max-cycles", type=int, default=100)
    ap.add_argument("--csv-out", default="artifacts/maze_run.csv")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    os.makedirs(os.path.dirname(args.csv_out) or ".", exist_ok=True)

    cfg = load_config(args.config)
    session = MazeSession(cfg)
    try:
        policy = ScriptedPolicy([a for a in args.actions.split(",") if a.strip()])
    except InvalidActionError as e:
        print(f"Bad --actions: {e}")
        return 2

    rows: list[list] = []

    def record(outcome: ActionOutcome) -> None:
        s = outcome.state
        cx, cz = session.grid.cell_of(s.x, s.z)
        rows.append([session.time, s.x, s.z, s.angle, outcome.action.value, int(outcome.blocked), cx, cz])

    session.channel.subscribe(record)
    s0 = session.controller.state
    rows.append([0.0, s0.x, s0.z, s0.angle, "start", 0, *session.grid.start])

    loop = DecisionLoop(session, policy, tick_dt=args.dt)
    decisions = asyncio.run(loop.run(max_cycles=args.max_cycles))

    with open(args.csv_out, "w", newline="") as f:
        w = csv.writer(f)
        w.writerow(["t", "x", "z", "angle", "action", "blocked", "cell_x", "cell_z"])
        w.writerows(rows)

    final = session.controller.state
    cell = session.grid.cell_of(final.x, final.z)
    print(encode_ascii(session.grid, final))
    print(f"Run finished. Decisions: {len(decisions)}, blocked moves: {sum(r[5] for r in rows)}")
    print(f"Final cell: {cell} (goal {session.grid.goal}, reached={cell == session.grid.goal})")
    print(f"Wrote: {args.csv_out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
