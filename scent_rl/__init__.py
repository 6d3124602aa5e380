"""Scent-following grid learner.

Tabular Q-learning agents that navigate a grid toward a goal while avoiding
a pit, either by remembering grid cells or by following a wall-aware scent
field radiated by the goal and the pit.
"""

from .domain.gridworld import GridWorld  # noqa: F401
from .domain.qlearning import PerceptualQAgent, PositionalQAgent, RandomAgent, make_agent  # noqa: F401
from .domain.signal_field import SignalField  # noqa: F401
from .domain.types import AgentConfig, RewardConfig, TrainingConfig  # noqa: F401
from .utils.rng import SeededRNG  # noqa: F401

__version__ = "1.0.0"
