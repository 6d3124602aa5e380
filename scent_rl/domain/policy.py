"""Epsilon-greedy action selection shared by every tabular agent."""

from typing import List, Sequence

import numpy as np

from ..utils.rng import SeededRNG
from .types import NUM_ACTIONS


def greedy_actions(q_values: Sequence[float]) -> List[int]:
    """All actions attaining the maximum value."""
    values = np.asarray(q_values, dtype=np.float64)
    return [int(a) for a in np.flatnonzero(values == values.max())]


def epsilon_greedy(q_values: Sequence[float], epsilon: float, rng: SeededRNG) -> int:
    """
    Pick an action for one state.

    With probability epsilon the action is uniform over all actions, regardless
    of the values. Otherwise it is drawn uniformly among the best-valued
    actions, so equal values (e.g. a fresh all-zero table) never bias a direction.
    """
    if rng.random() < epsilon:
        return rng.randrange(NUM_ACTIONS)
    return rng.choice(greedy_actions(q_values))
