import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from scent_rl.domain.qlearning import (  # noqa: E402
    BIN_BETTER,
    BIN_NEUTRAL,
    BIN_WORSE,
    NUM_PERCEPTUAL_STATES,
    PerceptualQAgent,
    make_agent,
)
from scent_rl.domain.signal_field import SignalField  # noqa: E402
from scent_rl.domain.types import AgentConfig  # noqa: E402
from scent_rl.utils.grid_factory import default_layout, transfer_layout  # noqa: E402
from scent_rl.utils.rng import SeededRNG  # noqa: E402


def _agent(layout, **config) -> PerceptualQAgent:
    return PerceptualQAgent(SignalField(layout), AgentConfig(**config), rng=SeededRNG(0))


def test_state_space_has_81_states():
    agent = _agent([[2, 0, 0]])
    assert NUM_PERCEPTUAL_STATES == 81
    assert agent.q.shape == (81 * 4,)


def test_flat_field_is_all_neutral():
    agent = _agent([[0, 0], [0, 0]])
    # 27 + 9 + 3 + 1
    assert agent.state_index(0, 0) == 40
    assert agent.decode_state(40) == (BIN_NEUTRAL,) * 4


def test_state_index_bins_each_direction():
    # field: 1.0, 0.5, 1/3
    agent = _agent([[2, 0, 0]], threshold=0.01)
    index = agent.state_index(0, 1)
    assert agent.decode_state(index) == (BIN_NEUTRAL, BIN_WORSE, BIN_NEUTRAL, BIN_BETTER)
    assert index == 27 * 1 + 9 * 0 + 3 * 1 + 1 * 2


def test_delta_equal_to_threshold_is_neutral():
    # left delta at (0, 1) is exactly 1.0 - 0.5
    agent = _agent([[2, 0, 0]], threshold=0.5)
    assert agent.decode_state(agent.state_index(0, 1)) == (BIN_NEUTRAL,) * 4


def test_zero_threshold_makes_any_change_extreme():
    agent = _agent([[2, 0, 0]], threshold=0.0)
    up, right, down, left = agent.decode_state(agent.state_index(0, 1))
    assert (up, down) == (BIN_NEUTRAL, BIN_NEUTRAL)
    assert right == BIN_WORSE
    assert left == BIN_BETTER


def test_threshold_is_read_live():
    config = AgentConfig(threshold=0.01)
    agent = PerceptualQAgent(SignalField([[2, 0, 0]]), config)
    before = agent.state_index(0, 1)
    config.threshold = 10.0
    assert agent.state_index(0, 1) != before
    assert agent.state_index(0, 1) == 40


def test_state_index_is_deterministic():
    layout, _ = default_layout()
    agent = _agent(layout)
    first = [agent.state_index(r, c) for r in range(6) for c in range(6) if layout[r][c] != 1]
    second = [agent.state_index(r, c) for r in range(6) for c in range(6) if layout[r][c] != 1]
    assert first == second
    assert all(0 <= index < NUM_PERCEPTUAL_STATES for index in first)


def test_positions_that_smell_alike_share_values():
    # Both cells sense: up/down flat, goal-ward left better, right worse
    agent = _agent([[2, 0, 0, 0, 0, 0]], alpha=0.5)
    assert agent.state_index(0, 2) == agent.state_index(0, 3)

    agent.learn((0, 2), 3, 1.0, (0, 1), True)
    assert agent.get_q(0, 3) == agent.get_q(0, 2)
    assert agent.get_q(0, 3)[3] == pytest.approx(0.5)


def test_repeated_blocks_map_to_same_state():
    # Two copies of [goal, empty] split by a wall
    agent = _agent([[2, 0, 1, 2, 0]], alpha=0.5)
    assert agent.decode_state(agent.state_index(0, 1)) == (BIN_NEUTRAL, BIN_NEUTRAL, BIN_NEUTRAL, BIN_BETTER)
    assert agent.state_index(0, 1) == agent.state_index(0, 4)

    agent.learn((0, 4), 3, 1.0, (0, 3), True)
    assert agent.get_q(0, 1)[3] == pytest.approx(0.5)


def test_corners_sense_the_goal_direction():
    layout = [
        [0, 0, 0],
        [0, 2, 0],
        [0, 0, 0],
    ]
    agent = _agent(layout)
    assert agent.decode_state(agent.state_index(0, 0)) == (BIN_NEUTRAL, BIN_BETTER, BIN_BETTER, BIN_NEUTRAL)
    assert agent.decode_state(agent.state_index(0, 2)) == (BIN_NEUTRAL, BIN_NEUTRAL, BIN_BETTER, BIN_BETTER)
    assert agent.decode_state(agent.state_index(0, 1)) == (BIN_NEUTRAL, BIN_WORSE, BIN_BETTER, BIN_WORSE)


def test_terminal_update_uses_state_index():
    agent = _agent([[2, 0, 0]], alpha=0.5, gamma=0.9)
    next_index = agent.state_index(0, 0)
    agent.q[next_index * 4:(next_index + 1) * 4] = 1e9
    agent.learn((0, 1), 3, 1.0, (0, 0), True)
    index = agent.state_index(0, 1)
    assert agent.get_state_q(index)[3] == pytest.approx(0.5)


def test_non_terminal_update_bootstraps():
    agent = _agent([[2, 0, 0]], alpha=1.0, gamma=0.5)
    next_index = agent.state_index(0, 1)
    agent.q[next_index * 4 + 3] = 0.8
    agent.learn((0, 2), 3, -0.01, (0, 1), False)
    assert agent.get_q(0, 2)[3] == pytest.approx(-0.01 + 0.5 * 0.8)


def test_reset_q_zeroes_every_state():
    agent = _agent([[2, 0, 3]], alpha=1.0)
    agent.learn((0, 1), 0, 1.0, (0, 0), True)
    agent.reset_q()
    for index in range(NUM_PERCEPTUAL_STATES):
        assert agent.get_state_q(index) == [0.0, 0.0, 0.0, 0.0]
    assert agent.total_updates == 0


def test_decode_state_rejects_out_of_range():
    with pytest.raises(IndexError):
        PerceptualQAgent.decode_state(81)
    with pytest.raises(IndexError):
        PerceptualQAgent.decode_state(-1)


def test_out_of_bounds_position_fails_fast():
    agent = _agent([[2, 0, 0]])
    with pytest.raises(IndexError):
        agent.act((1, 0))


def test_swapping_field_changes_perception_not_table():
    layout, _ = default_layout()
    other, _ = transfer_layout()
    agent = make_agent("perceptual", layout, AgentConfig(alpha=1.0))
    agent.learn((5, 0), 0, 1.0, (4, 0), True)
    table = agent.q.copy()

    agent.field = SignalField(other)
    assert (agent.q == table).all()
    index = agent.state_index(2, 1)
    assert agent.get_q(2, 1) == table[index * 4:(index + 1) * 4].tolist()
