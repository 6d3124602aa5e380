"""Grid environment with a goal, a pit and walls."""

from typing import Optional, Sequence

from .neighbors import in_bounds, is_wall, step_target, validate_layout
from .types import CELL_GOAL, CELL_PIT, Coord, Layout, RewardConfig, Transition


class GridWorld:
    """
    Environment for the scent-following agents.

    Moving off the grid or into a wall leaves the agent in place but still
    costs a step. Landing on a goal or pit ends the episode, and so does
    running out of steps.
    """

    def __init__(self, layout: Sequence[Sequence[int]], start: Coord, max_steps: int = 200,
                 rewards: Optional[RewardConfig] = None):
        validate_layout(layout)
        if not in_bounds(layout, *start):
            raise ValueError(f"Start position {start} is out of bounds")
        if is_wall(layout, *start):
            raise ValueError(f"Start position {start} is a wall")

        self.layout: Layout = [list(row) for row in layout]
        self.rows = len(self.layout)
        self.cols = len(self.layout[0])
        self.start = tuple(start)
        self.max_steps = max_steps
        self.rewards = rewards or RewardConfig()

        self.state: Coord = self.start
        self.done = False
        self.steps = 0
        self.total_reward = 0.0

    def reset(self) -> Coord:
        """Reset environment to initial state."""
        self.state = self.start
        self.done = False
        self.steps = 0
        self.total_reward = 0.0
        return self.state

    def cell(self, coord: Coord) -> int:
        return self.layout[coord[0]][coord[1]]

    def step(self, action: int) -> Transition:
        """
        Execute action and return (next_state, reward, done).

        Args:
            action: Action to take (0=up, 1=right, 2=down, 3=left)
        """
        if self.done:
            return Transition(self.state, 0.0, True)

        self.steps += 1
        target = step_target(self.layout, self.state, action)
        reward = self.rewards.step

        if target is not None:
            self.state = target
            kind = self.cell(target)
            if kind == CELL_GOAL:
                reward = self.rewards.goal
                self.done = True
            elif kind == CELL_PIT:
                reward = self.rewards.pit
                self.done = True

        self.total_reward += reward

        if not self.done and self.steps >= self.max_steps:
            self.done = True

        return Transition(self.state, reward, self.done)

    @property
    def at_goal(self) -> bool:
        return self.cell(self.state) == CELL_GOAL

    @property
    def in_pit(self) -> bool:
        return self.cell(self.state) == CELL_PIT
