from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional

from agent.session import MazeSession, Observation
from shared.errors import DecisionParseError, InvalidActionError
from shared.types import Action, parse_action

logger = logging.getLogger(__name__)

Policy = Callable[[Observation], Awaitable[str]]


@dataclass(frozen=True)
class Decision:
    thought: str
    action: Action


def _strip_fence(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def parse_decision(text: str) -> Decision:
    """Decode a {"thought": ..., "action": ...} response (fenced or bare)."""
    clean = _strip_fence(text)
    try:
        data = json.loads(clean)
    except json.JSONDecodeError as e:
        raise DecisionParseError(f"response is not valid JSON: {e.msg}", raw=text) from e
    if not isinstance(data, dict) or "action" not in data:
        raise DecisionParseError("response has no 'action' field", raw=text)
    try:
        action = parse_action(data["action"])
    except InvalidActionError as e:
        raise DecisionParseError(str(e), raw=text) from e
    return Decision(thought=str(data.get("thought", "")), action=action)


class ScriptedPolicy:
    """Replays a fixed action list, then answers 'stop'."""

    def __init__(self, actions: Iterable[Action | str]) -> None:
        self._actions = [parse_action(a) for a in actions]
        self.seen: List[Observation] = []

    async def __call__(self, obs: Observation) -> str:
        self.seen.append(obs)
        i = len(self.seen) - 1
        action = self._actions[i] if i < len(self._actions) else Action.STOP
        blocked = obs.lookahead[Action.MOVE_FORWARD].blocked
        thought = f"step {i + 1}: forward {'blocked' if blocked else 'clear'}"
        return json.dumps({"thought": thought, "action": action.value})


class DecisionLoop:
    """capture -> encode -> ask policy -> enqueue -> wait for completion.

    Only one cycle may be pending at a time; a second call while one is in
    flight returns None without doing anything.
    """

    def __init__(self, session: MazeSession, policy: Policy, tick_dt: float | None = None) -> None:
        self.session = session
        self.policy = policy
        self.tick_dt = tick_dt
        self.active = False
        self.decisions: List[Decision] = []
        self.rejected = 0
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    async def run_cycle(self) -> Optional[Decision]:
        if self._pending or not self.active:
            return None
        self._pending = True
        try:
            obs = self.session.observe()
            try:
                raw = await self.policy(obs)
            except Exception as e:
                self.rejected += 1
                logger.warning("policy call failed (%s: %s); retrying next cycle", type(e).__name__, e)
                return None
            try:
                decision = parse_decision(raw)
            except DecisionParseError as e:
                self.rejected += 1
                logger.warning("rejected decision response (%s); retrying next cycle", e)
                return None

            self.decisions.append(decision)
            logger.info("thought: %s | action: %s", decision.thought, decision.action.value)
            if decision.action is Action.STOP:
                self.active = False
                logger.info("session stopped after %d decisions", len(self.decisions))
                return decision

            self.session.channel.take()  # drop any stale outcome
            self.session.controller.enqueue(decision.action)
            await self.session.channel.wait()
            return decision
        finally:
            self._pending = False

    async def _ticker(self) -> None:
        while self.active:
            self.session.tick(self.tick_dt)
            await asyncio.sleep(0)

    async def run(self, max_cycles: int = 50) -> List[Decision]:
        self.active = True
        ticker = asyncio.create_task(self._ticker())
        try:
            for _ in range(max_cycles):
                if not self.active:
                    break
                await self.run_cycle()
        finally:
            self.active = False
            await ticker
        return self.decisions
