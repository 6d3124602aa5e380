"""Tabular Q-learning agents.

Both learners share the same update (off-policy, max over next actions):

    Q(s, a) <- Q(s, a) + alpha * [ r + gamma * max_a' Q(s', a') - Q(s, a) ]

with the bracketed future term dropped when the transition is terminal. They
differ only in what "s" is: the grid cell itself, or a discretised reading
of the scent gradient around it.
"""

from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np

from ..utils.rng import SeededRNG, default_rng
from .neighbors import validate_layout
from .policy import epsilon_greedy
from .signal_field import SignalField
from .types import AgentConfig, AgentKind, Coord, Experience, NUM_ACTIONS

# Perceptual binning: 3 bins per direction, 4 directions
BIN_WORSE = 0
BIN_NEUTRAL = 1
BIN_BETTER = 2
NUM_BINS = 3
STATE_WEIGHTS = (27, 9, 3, 1)  # up, right, down, left
NUM_PERCEPTUAL_STATES = NUM_BINS ** len(STATE_WEIGHTS)


class Agent(Protocol):
    """Anything that can pick actions for grid states and learn from transitions."""

    name: str

    def act(self, state: Coord) -> int:
        ...

    def learn(self, state: Coord, action: int, reward: float, next_state: Coord, done: bool) -> None:
        ...

    def update(self, experience: Experience) -> None:
        ...

    def reset_q(self) -> None:
        ...


class RandomAgent:
    """Baseline that ignores the state and never learns."""

    name = "Random"

    def __init__(self, rng: Optional[SeededRNG] = None):
        self.rng = rng or default_rng

    def act(self, state: Coord) -> int:
        return self.rng.randrange(NUM_ACTIONS)

    def learn(self, state: Coord, action: int, reward: float, next_state: Coord, done: bool) -> None:
        return

    def update(self, experience: Experience) -> None:
        return

    def reset_q(self) -> None:
        return


class _TabularQAgent:
    """Flat Q-table storage and the Bellman update shared by both learners.

    Subclasses map a grid state to a row of the table via ``_row``.
    """

    name = "Tabular"

    def __init__(self, num_states: int, config: Optional[AgentConfig] = None,
                 rng: Optional[SeededRNG] = None):
        self.config = config or AgentConfig()
        self.rng = rng or default_rng
        self.num_states = num_states
        # q[row * NUM_ACTIONS + action]
        self.q = np.zeros(num_states * NUM_ACTIONS, dtype=np.float64)
        self.total_updates = 0

    def _row(self, state: Coord) -> int:
        raise NotImplementedError

    def _values(self, row: int) -> np.ndarray:
        start = row * NUM_ACTIONS
        return self.q[start:start + NUM_ACTIONS]

    def act(self, state: Coord) -> int:
        """Epsilon-greedy action selection with random tie-breaking."""
        return epsilon_greedy(self._values(self._row(state)), self.config.epsilon, self.rng)

    def learn(self, state: Coord, action: int, reward: float, next_state: Coord, done: bool) -> None:
        """Nudge Q(state, action) toward the one-step target."""
        if not 0 <= action < NUM_ACTIONS:
            raise IndexError(f"Action {action} is outside 0..{NUM_ACTIONS - 1}")
        index = self._row(state) * NUM_ACTIONS + action
        current_q = float(self.q[index])

        if done:
            # No future reward after a terminal transition
            target = reward
        else:
            max_next_q = float(self._values(self._row(next_state)).max())
            target = reward + self.config.gamma * max_next_q

        # (target - current_q) is the TD error
        self.q[index] = current_q + self.config.alpha * (target - current_q)
        self.total_updates += 1

    def update(self, experience: Experience) -> None:
        self.learn(*experience)

    def reset_q(self) -> None:
        """Zero every table entry; hyperparameters are untouched."""
        self.q.fill(0.0)
        self.total_updates = 0


class PositionalQAgent(_TabularQAgent):
    """Q-learning agent whose state is the (row, col) grid cell."""

    name = "Q-Learning"

    def __init__(self, rows: int, cols: int, config: Optional[AgentConfig] = None,
                 rng: Optional[SeededRNG] = None):
        super().__init__(rows * cols, config, rng)
        self.rows = rows
        self.cols = cols

    def _row(self, state: Coord) -> int:
        row, col = state
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise IndexError(
                f"Coordinate ({row}, {col}) is out of bounds for a {self.rows}x{self.cols} grid"
            )
        return row * self.cols + col

    def get_q(self, row: int, col: int) -> List[float]:
        """Copy of the 4 action values for a cell."""
        return self._values(self._row((row, col))).tolist()

    def get_max_q(self, row: int, col: int) -> float:
        """Best action value for a cell."""
        return float(self._values(self._row((row, col))).max())

    def q_grid(self) -> np.ndarray:
        """Copy of the table shaped (rows, cols, actions)."""
        return self.q.reshape(self.rows, self.cols, NUM_ACTIONS).copy()


class PerceptualQAgent(_TabularQAgent):
    """
    Q-learning agent whose state is what it smells, not where it is.

    Each of the 4 neighbor signals is compared to the signal at the current
    cell and binned as worse / neutral / better using ``config.threshold``.
    The 4 bins form a base-3 number in [0, 81). Cells that smell alike share
    their learned values, which is what lets a policy carry over to another
    layout with the same emitter semantics.
    """

    name = "Perceptual Q-Learning"

    def __init__(self, field: SignalField, config: Optional[AgentConfig] = None,
                 rng: Optional[SeededRNG] = None):
        super().__init__(NUM_PERCEPTUAL_STATES, config, rng)
        self.field = field

    def _row(self, state: Coord) -> int:
        return self.state_index(*state)

    def bin_delta(self, delta: float) -> int:
        threshold = self.config.threshold
        if delta < -threshold:
            return BIN_WORSE
        if delta > threshold:
            return BIN_BETTER
        return BIN_NEUTRAL

    def state_index(self, row: int, col: int) -> int:
        """Perceptual state of a grid cell under the current field and threshold."""
        here = self.field.read(row, col)
        neighbors = self.field.gradient(row, col)
        return sum(weight * self.bin_delta(value - here)
                   for weight, value in zip(STATE_WEIGHTS, neighbors))

    @staticmethod
    def decode_state(index: int) -> Tuple[int, int, int, int]:
        """Split a state index back into its (up, right, down, left) bins."""
        if not 0 <= index < NUM_PERCEPTUAL_STATES:
            raise IndexError(f"State index {index} is outside [0, {NUM_PERCEPTUAL_STATES})")
        return tuple((index // weight) % NUM_BINS for weight in STATE_WEIGHTS)

    def get_state_q(self, index: int) -> List[float]:
        """Copy of the 4 action values for a perceptual state."""
        self.decode_state(index)
        return self._values(index).tolist()

    def get_q(self, row: int, col: int) -> List[float]:
        """Copy of the action values for the state perceived at a cell."""
        return self._values(self.state_index(row, col)).tolist()

    def get_max_q(self, row: int, col: int) -> float:
        return float(self._values(self.state_index(row, col)).max())


def make_agent(kind: AgentKind, layout: Sequence[Sequence[int]],
               config: Optional[AgentConfig] = None,
               rng: Optional[SeededRNG] = None,
               field: Optional[SignalField] = None) -> Agent:
    """
    Build an agent for a layout.

    Args:
        kind: "positional", "perceptual" or "random"
        layout: Grid the agent will act on
        config: Shared hyperparameters (fresh defaults if None)
        rng: Random source for exploration and tie-breaks
        field: Prebuilt signal field for perceptual agents

    Raises:
        ValueError: If kind is unknown
    """
    if kind == "positional":
        validate_layout(layout)
        return PositionalQAgent(len(layout), len(layout[0]), config, rng)
    if kind == "perceptual":
        return PerceptualQAgent(field or SignalField(layout), config, rng)
    if kind == "random":
        return RandomAgent(rng)
    raise ValueError(f"Unknown agent kind: {kind}")
