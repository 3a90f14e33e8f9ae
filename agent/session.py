from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional

from control.motion import ActionChannel, MotionController
from observation.encoder import Schematic, encode_ascii, encode_schematic, format_ascii_history
from shared.config import EngineConfig
from shared.types import Action, ActionOutcome, AgentState, DriveInput, SimulationResult, Vec2


@dataclass
class Observation:
    """Everything one decision cycle hands to the policy."""

    state: AgentState
    ascii_map: str
    ascii_prompt: str  # recent step history, latest last
    lookahead: Dict[Action, SimulationResult]
    schematic: Schematic
    future_schematics: Dict[Action, Schematic]


class MazeSession:
    """Grid + controller + breadcrumb bookkeeping for one exploration run."""

    def __init__(self, cfg: EngineConfig | None = None) -> None:
        self.cfg = cfg or EngineConfig()
        self.grid = self.cfg.maze.build()
        self.controller = MotionController(self.grid, self.cfg.motion)
        self.trail: Deque[Vec2] = deque(maxlen=self.cfg.trail_limit)
        self.ascii_history: Deque[str] = deque(maxlen=self.cfg.history_limit)
        self.time = 0.0
        self._since_sample = 0.0

    @property
    def channel(self) -> ActionChannel:
        return self.controller.channel

    def tick(self, dt: float | None = None, drive: DriveInput | None = None) -> Optional[ActionOutcome]:
        dt = self.cfg.tick_dt if dt is None else dt
        outcome = self.controller.tick(dt, drive)
        self.time += dt
        self._since_sample += dt
        if self._since_sample >= self.cfg.trail_interval:
            self._since_sample = 0.0
            self.trail.append(self.controller.state.position)
        return outcome

    def observe(self) -> Observation:
        """Encode the committed state and its look-ahead siblings.

        Raises AnimationInProgressError mid-action. Marks the agent's cell
        visited as a side effect of the text encoding.
        """
        state = self.controller.committed_state()
        sims = self.controller.simulate()
        ascii_map = encode_ascii(self.grid, state)
        self.ascii_history.append(ascii_map)

        scale = self.cfg.schematic_scale
        future = {
            a: encode_schematic(self.grid, AgentState(r.position[0], r.position[1], r.angle), self.trail, scale)
            for a, r in sims.items()
        }
        return Observation(
            state=state,
            ascii_map=ascii_map,
            ascii_prompt=format_ascii_history(self.ascii_history),
            lookahead=sims,
            schematic=encode_schematic(self.grid, state, self.trail, scale),
            future_schematics=future,
        )

    def restart(self) -> None:
        """Back to start with an empty breadcrumb trail. Queued actions are kept."""
        self.controller.reset()
        self.grid.clear_visited()
        self.trail.clear()
        self.ascii_history.clear()
        self.time = 0.0
        self._since_sample = 0.0
