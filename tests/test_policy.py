import pathlib
import sys
from collections import Counter

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from scent_rl.domain.policy import epsilon_greedy, greedy_actions  # noqa: E402
from scent_rl.utils.rng import SeededRNG  # noqa: E402


def test_greedy_actions_collects_ties():
    assert greedy_actions([0.0, 0.0, 0.0, 0.0]) == [0, 1, 2, 3]
    assert greedy_actions([0.1, 0.5, 0.5, -1.0]) == [1, 2]
    assert greedy_actions([-3.0, -1.0, -2.0, -5.0]) == [1]


def test_exploitation_picks_unique_best():
    rng = SeededRNG(0)
    picks = {epsilon_greedy([0.0, 0.0, 0.7, 0.2], 0.0, rng) for _ in range(200)}
    assert picks == {2}


def test_tie_break_has_no_directional_bias():
    rng = SeededRNG(1234)
    trials = 8000
    counts = Counter(epsilon_greedy([0.0, 0.0, 0.0, 0.0], 0.0, rng) for _ in range(trials))
    assert set(counts) == {0, 1, 2, 3}
    for action in range(4):
        assert abs(counts[action] - trials / 4) < trials * 0.04


def test_tie_break_stays_within_best_actions():
    rng = SeededRNG(5)
    counts = Counter(epsilon_greedy([1.0, -1.0, 1.0, 0.0], 0.0, rng) for _ in range(2000))
    assert set(counts) == {0, 2}
    assert abs(counts[0] - counts[2]) < 200


def test_full_exploration_ignores_values():
    rng = SeededRNG(99)
    trials = 8000
    counts = Counter(epsilon_greedy([100.0, 0.0, 0.0, 0.0], 1.0, rng) for _ in range(trials))
    for action in range(4):
        assert abs(counts[action] - trials / 4) < trials * 0.04


def test_epsilon_above_one_always_explores():
    rng = SeededRNG(3)
    picks = {epsilon_greedy([5.0, 0.0, 0.0, 0.0], 1.5, rng) for _ in range(500)}
    assert picks == {0, 1, 2, 3}


def test_same_seed_same_choices():
    rng_a, rng_b = SeededRNG(42), SeededRNG(42)
    seq_a = [epsilon_greedy([0.0] * 4, 0.3, rng_a) for _ in range(100)]
    seq_b = [epsilon_greedy([0.0] * 4, 0.3, rng_b) for _ in range(100)]
    assert seq_a == seq_b
