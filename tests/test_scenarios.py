import math

import pytest

from control.motion import MotionController
from maze.collision import collides
from maze.grid_map import reference_map
from shared.types import Action, AgentState
from sim.lookahead import forward_vector, simulate

R = 0.4


def _finish(ctrl, dt=1 / 60):
    for _ in range(1000):
        out = ctrl.tick(dt)
        if out is not None:
            return out
    raise AssertionError("action never finished")


def test_forward_into_open_cell_moves_one_edge_north():
    g = reference_map()
    ctrl = MotionController(g)
    ctrl.enqueue("move_forward")
    out = _finish(ctrl)
    assert not out.blocked
    assert out.state.position == pytest.approx((12.0, 8.0))
    assert g.cell_of(*out.state.position) == (6, 4)


def test_forward_into_wall_rolls_back_and_signals():
    g = reference_map()
    start = AgentState(12.0, 10.0, math.pi)  # facing +z, wall row 6 ahead
    ctrl = MotionController(g, state=start)
    fired = []
    ctrl.channel.subscribe(fired.append)
    ctrl.enqueue("move_forward")
    out = _finish(ctrl)
    assert out.blocked
    assert ctrl.committed_state().position == pytest.approx(start.position)
    assert fired == [out]
    assert ctrl.channel.completed == 1


def test_three_lefts_and_a_right_net_two_quarter_turns():
    ctrl = MotionController(reference_map())
    a0 = ctrl.state.angle
    for a in ("turn_left", "turn_left", "turn_left", "turn_right"):
        ctrl.enqueue(a)
    for _ in range(4):
        _finish(ctrl)
    # +3 quarter turns, -1 quarter turn
    assert ctrl.state.angle == pytest.approx(a0 + math.pi)
    got = ctrl.state.angle % (2 * math.pi)
    assert got == pytest.approx((a0 + math.pi) % (2 * math.pi))


def test_dead_end_has_exactly_one_way_out():
    # (6,1) facing north: wall ahead, wall to the right, open to the left
    g = reference_map()
    s = AgentState(g.to_continuous(6), g.to_continuous(1), 0.0)
    sims = simulate(g, s, R)

    heading = {
        Action.MOVE_FORWARD: s.angle,
        Action.TURN_LEFT: sims[Action.TURN_LEFT].angle,
        Action.TURN_RIGHT: sims[Action.TURN_RIGHT].angle,
    }
    open_ways = []
    for action, angle in heading.items():
        fwd = simulate(g, AgentState(s.x, s.z, angle), R)[Action.MOVE_FORWARD]
        fx, fz = forward_vector(angle)
        target = (s.x + fx * g.cell_size, s.z + fz * g.cell_size)
        assert fwd.blocked == collides(g, target, R)
        if not fwd.blocked:
            open_ways.append(action)

    assert open_ways == [Action.TURN_LEFT]
    assert sims[Action.MOVE_FORWARD].blocked
    assert not sims[Action.TURN_LEFT].blocked and not sims[Action.TURN_RIGHT].blocked
