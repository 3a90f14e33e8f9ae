from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

from maze.collision import collides
from maze.grid_map import GridMap
from shared.errors import AnimationInProgressError
from shared.types import Action, ActionOutcome, AgentState, DriveInput, parse_action
from sim.lookahead import forward_vector, simulate, step_offset

logger = logging.getLogger(__name__)


@dataclass
class MotionParams:
    radius: float = 0.4  # agent circle radius (continuous units)
    drive_speed: float = 3.0  # continuous units / s
    turn_speed: float = 2.0  # rad / s
    animation_rate: float = 2.0  # progress / s, one action takes 1/rate seconds

    def validate(self, cell_size: float) -> None:
        # collision only scans the 3x3 neighbourhood, which needs radius < edge/2
        if not 0.0 < self.radius < cell_size / 2.0:
            raise ValueError(
                f"radius must be in (0, {cell_size / 2.0}) for cell size {cell_size}"
            )
        for name in ("drive_speed", "turn_speed", "animation_rate"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive")


@dataclass
class Animating:
    action: Action
    progress: float
    start: AgentState


class ActionChannel:
    """Explicit handle between the decision loop and the controller.

    Holds the FIFO of pending actions and a single-slot completion signal.
    The slot keeps only the latest outcome; wait()/take() consume it.
    wait() parks on a future of whichever event loop is running.
    """

    def __init__(self) -> None:
        self._queue: Deque[Action] = deque()
        self._last: Optional[ActionOutcome] = None
        self._ready = False
        self._waiter: Optional[asyncio.Future] = None
        self._listeners: List[Callable[[ActionOutcome], None]] = []
        self.completed = 0

    def submit(self, action: Action | str) -> Action:
        """Queue an action; raises InvalidActionError for unknown symbols."""
        act = parse_action(action)
        self._queue.append(act)
        return act

    @property
    def pending(self) -> int:
        return len(self._queue)

    def subscribe(self, callback: Callable[[ActionOutcome], None]) -> None:
        self._listeners.append(callback)

    def take(self) -> Optional[ActionOutcome]:
        """Non-blocking: pop the outcome in the slot, if any."""
        if not self._ready:
            return None
        self._ready = False
        return self._last

    async def wait(self) -> ActionOutcome:
        if not self._ready:
            self._waiter = asyncio.get_running_loop().create_future()
            try:
                await self._waiter
            finally:
                self._waiter = None
        self._ready = False
        if self._last is None:
            raise RuntimeError("completion signalled without an outcome")
        return self._last

    # Controller-facing side of the channel.

    def pop_next(self) -> Optional[Action]:
        return self._queue.popleft() if self._queue else None

    def notify(self, outcome: ActionOutcome) -> None:
        self.completed += 1
        self._last = outcome
        self._ready = True
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(None)
        for cb in self._listeners:
            cb(outcome)


class MotionController:
    """Agent pose owner: continuous drive when idle, animated discrete steps.

    One tick() per frame. While an action animates, drive input is ignored and
    further actions wait in the channel's queue.
    """

    def __init__(
        self,
        grid: GridMap,
        params: MotionParams | None = None,
        state: AgentState | None = None,
    ) -> None:
        self.grid = grid
        self.p = params or MotionParams()
        self.p.validate(grid.cell_size)
        self.channel = ActionChannel()
        self._state = state or self.spawn_state()
        self._phase: Optional[Animating] = None
        self.last_drive_blocked = False

    def spawn_state(self) -> AgentState:
        x, z = self.grid.cell_center(self.grid.start)
        return AgentState(x, z, 0.0)

    @property
    def state(self) -> AgentState:
        """Current pose, interpolated while animating."""
        return self._state

    @property
    def phase(self) -> Optional[Animating]:
        return self._phase

    @property
    def is_idle(self) -> bool:
        return self._phase is None

    def committed_state(self) -> AgentState:
        if self._phase is not None:
            raise AnimationInProgressError(
                f"{self._phase.action.value} is still animating "
                f"(progress {self._phase.progress:.2f})"
            )
        return self._state

    def enqueue(self, action: Action | str) -> Action:
        return self.channel.submit(action)

    def simulate(self):
        """Look-ahead from the committed state; raises while animating."""
        return simulate(self.grid, self.committed_state(), self.p.radius)

    def reset(self) -> None:
        self.committed_state()
        self._state = self.spawn_state()
        self.last_drive_blocked = False

    def tick(self, dt: float, drive: DriveInput | None = None) -> Optional[ActionOutcome]:
        """Advance one frame. Returns the outcome if an action finished."""
        if self._phase is None:
            action = self.channel.pop_next()
            if action is Action.STOP:
                # not a motion primitive: complete at once without animating
                return self._finish(action, blocked=False)
            if action is not None:
                self._phase = Animating(action, 0.0, self._state)
                logger.debug("start %s from %s", action.value, self._state)

        if self._phase is not None:
            return self._advance(self._phase, dt)

        if drive is not None:
            self._drive(dt, drive)
        return None

    def _advance(self, ph: Animating, dt: float) -> Optional[ActionOutcome]:
        ph.progress = min(ph.progress + dt * self.p.animation_rate, 1.0)

        s0 = ph.start
        dx, dz, da = step_offset(ph.action, s0.angle, self.grid.cell_size)
        k = ph.progress
        self._state = AgentState(s0.x + dx * k, s0.z + dz * k, s0.angle + da * k)

        if ph.progress < 1.0:
            return None

        blocked = False
        if ph.action is Action.MOVE_FORWARD and collides(
            self.grid, self._state.position, self.p.radius
        ):
            blocked = True
            self._state = s0
            logger.debug("move_forward blocked at %s, rolled back", (s0.x, s0.z))
        self._phase = None
        return self._finish(ph.action, blocked)

    def _finish(self, action: Action, blocked: bool) -> ActionOutcome:
        outcome = ActionOutcome(action=action, blocked=blocked, state=self._state)
        logger.info(
            "finished %s blocked=%s at (%.2f, %.2f) angle=%.3f",
            action.value,
            blocked,
            self._state.x,
            self._state.z,
            self._state.angle,
        )
        self.channel.notify(outcome)
        return outcome

    def _drive(self, dt: float, drive: DriveInput) -> None:
        s = self._state
        x, z, angle = s.x, s.z, s.angle
        fx, fz = forward_vector(angle)
        step = self.p.drive_speed * dt
        self.last_drive_blocked = False

        # each translation intent is gated on its own
        for sign, wanted in ((1.0, drive.forward), (-1.0, drive.backward)):
            if not wanted:
                continue
            cand = (x + sign * fx * step, z + sign * fz * step)
            if collides(self.grid, cand, self.p.radius):
                self.last_drive_blocked = True
            else:
                x, z = cand

        if drive.turn_left:
            angle += self.p.turn_speed * dt
        if drive.turn_right:
            angle -= self.p.turn_speed * dt

        if (x, z, angle) != (s.x, s.z, s.angle):
            self._state = AgentState(x, z, angle)
