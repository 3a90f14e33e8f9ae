import math

import pytest

from control.motion import MotionController
from maze.collision import collides
from maze.grid_map import reference_map
from shared.errors import AnimationInProgressError
from shared.types import Action, AgentState
from sim.lookahead import forward_vector, simulate

R = 0.4


def test_forward_vector_convention():
    assert forward_vector(0.0) == pytest.approx((0.0, -1.0))
    assert forward_vector(math.pi / 2) == pytest.approx((-1.0, 0.0))  # left of north is -x
    assert forward_vector(-math.pi / 2) == pytest.approx((1.0, 0.0))


def test_three_actions_from_start():
    res = simulate(reference_map(), AgentState(12.0, 10.0, 0.0), R)
    assert set(res) == {Action.MOVE_FORWARD, Action.TURN_LEFT, Action.TURN_RIGHT}
    fwd = res[Action.MOVE_FORWARD]
    assert not fwd.blocked and fwd.position == pytest.approx((12.0, 8.0)) and fwd.angle == 0.0
    assert res[Action.TURN_LEFT].angle == pytest.approx(math.pi / 2)
    assert res[Action.TURN_RIGHT].angle == pytest.approx(-math.pi / 2)
    assert res[Action.TURN_LEFT].position == (12.0, 10.0)


def test_blocked_forward_reports_start_position():
    s = AgentState(12.0, 10.0, -math.pi / 2)
    fwd = simulate(reference_map(), s, R)[Action.MOVE_FORWARD]
    assert fwd.blocked
    assert fwd.position == s.position and fwd.angle == s.angle


def test_simulate_is_pure_and_repeatable():
    g = reference_map()
    g.mark_visited(6, 4)
    s = AgentState(12.0, 10.0, 0.3)
    before = (g.visited, s)
    first = simulate(g, s, R)
    second = simulate(g, s, R)
    assert first == second
    assert (g.visited, s) == before


def test_controller_guard_while_animating():
    ctrl = MotionController(reference_map())
    assert not ctrl.simulate()[Action.MOVE_FORWARD].blocked
    ctrl.enqueue("move_forward")
    ctrl.tick(0.1)
    with pytest.raises(AnimationInProgressError):
        ctrl.simulate()


@pytest.mark.parametrize("cell", [(1, 5), (3, 3), (5, 1), (6, 3), (2, 1)])
@pytest.mark.parametrize("angle", [0.0, math.pi / 2, math.pi, -math.pi / 2])
def test_forward_blocked_flag_matches_collides(cell, angle):
    g = reference_map()
    s = AgentState(g.to_continuous(cell[0]), g.to_continuous(cell[1]), angle)
    fx, fz = forward_vector(angle)
    target = (s.x + fx * g.cell_size, s.z + fz * g.cell_size)
    fwd = simulate(g, s, R)[Action.MOVE_FORWARD]
    assert fwd.blocked == collides(g, target, R)
