"""Core type definitions for the scent-following grid learner."""

from dataclasses import dataclass, field, fields
from numbers import Real
from typing import List, Literal, NamedTuple, Tuple

# Coordinate type for grid positions, always (row, col)
Coord = Tuple[int, int]

# Grid layout: rows of cell codes
Layout = List[List[int]]

# Cell kinds
CELL_EMPTY = 0
CELL_WALL = 1
CELL_GOAL = 2
CELL_PIT = 3

CELL_KINDS = (CELL_EMPTY, CELL_WALL, CELL_GOAL, CELL_PIT)

# Actions the agent can take
ACTION_UP = 0
ACTION_RIGHT = 1
ACTION_DOWN = 2
ACTION_LEFT = 3
NUM_ACTIONS = 4

# (d_row, d_col) per action, in action order
ACTION_DELTAS: Tuple[Coord, ...] = (
    (-1, 0),  # up
    (0, 1),   # right
    (1, 0),   # down
    (0, -1),  # left
)

AgentKind = Literal["positional", "perceptual", "random"]


@dataclass(frozen=True)
class Emitter:
    """A cell radiating scent with a fixed signed strength."""
    row: int
    col: int
    strength: float


class Transition(NamedTuple):
    """Result of one environment step."""
    state: Coord
    reward: float
    done: bool


class Experience(NamedTuple):
    """A full (s, a, r, s', done) record consumed by ``Agent.update``."""
    state: Coord
    action: int
    reward: float
    next_state: Coord
    done: bool


@dataclass
class AgentConfig:
    """Live hyperparameters of a tabular agent.

    Agents keep a reference to this object and read it on every call, so
    changing a field between steps takes effect on the next ``act``/``learn``.
    """
    alpha: float = 0.1  # learning rate
    gamma: float = 0.95  # discount factor
    epsilon: float = 0.1  # exploration probability
    threshold: float = 0.01  # perceptual binning width

    def update(self, **values) -> None:
        """Set several fields at once.

        Values that are not real numbers are replaced by the field default.
        """
        defaults = {f.name: f.default for f in fields(self)}
        for name, value in values.items():
            if name not in defaults:
                raise ValueError(f"Unknown hyperparameter: {name}")
            if isinstance(value, bool) or not isinstance(value, Real):
                value = defaults[name]
            setattr(self, name, float(value))


@dataclass
class RewardConfig:
    """Rewards handed out by the grid environment."""
    step: float = -0.01
    goal: float = 1.0
    pit: float = -1.0


@dataclass
class TrainingConfig:
    """Configuration for a training run."""
    episodes: int = 500
    max_steps: int = 200
    log_every: int = 50  # episodes between progress lines, 0 disables
    epsilon_decay: float = 1.0  # multiplicative, applied after each episode
    epsilon_min: float = 0.0


@dataclass
class Episode:
    """Represents a single training episode."""
    number: int
    steps: int
    total_reward: float
    reached_goal: bool
    fell_in_pit: bool
    epsilon_used: float


@dataclass
class TrainingResult:
    """Result of a training run."""
    episodes: List[Episode] = field(default_factory=list)
    final_epsilon: float = 0.0

    @property
    def total_episodes(self) -> int:
        return len(self.episodes)

    @property
    def successful_episodes(self) -> int:
        return sum(1 for ep in self.episodes if ep.reached_goal)

    @property
    def success_rate(self) -> float:
        """Fraction of episodes that ended on a goal."""
        return self.successful_episodes / self.total_episodes if self.total_episodes > 0 else 0.0

    @property
    def average_reward(self) -> float:
        if not self.episodes:
            return 0.0
        return sum(ep.total_reward for ep in self.episodes) / len(self.episodes)

    def recent_success_rate(self, window: int = 100) -> float:
        recent = self.episodes[-window:]
        if not recent:
            return 0.0
        return sum(1 for ep in recent if ep.reached_goal) / len(recent)


@dataclass
class RolloutResult:
    """Result of following the greedy policy from the start cell."""
    path: List[Coord]
    total_reward: float = 0.0
    reached_goal: bool = False
    fell_in_pit: bool = False

    @property
    def steps_taken(self) -> int:
        return len(self.path) - 1
