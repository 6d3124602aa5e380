"""Episode loop driving an agent against a GridWorld."""

import logging
from typing import Callable, Optional, Sequence

from ..domain.gridworld import GridWorld
from ..domain.qlearning import Agent, PerceptualQAgent
from ..domain.signal_field import SignalField
from ..domain.types import Coord, Episode, RolloutResult, TrainingConfig, TrainingResult

logger = logging.getLogger(__name__)


class Trainer:
    """Runs the observe -> act -> step -> learn loop until the episode ends."""

    def __init__(self, env: GridWorld, agent: Agent, config: Optional[TrainingConfig] = None):
        self.env = env
        self.agent = agent
        self.config = config or TrainingConfig()
        self.episodes_completed = 0
        self.history = TrainingResult()

    @property
    def epsilon(self) -> float:
        agent_config = getattr(self.agent, "config", None)
        return agent_config.epsilon if agent_config is not None else 1.0

    def run_episode(self, learn: bool = True) -> Episode:
        """Play one episode from the start cell, updating the agent unless learn is False."""
        state = self.env.reset()
        epsilon_used = self.epsilon
        steps = 0

        for _ in range(self.config.max_steps):
            action = self.agent.act(state)
            next_state, reward, done = self.env.step(action)
            if learn:
                self.agent.learn(state, action, reward, next_state, done)
            state = next_state
            steps += 1
            if done:
                break

        episode = Episode(
            number=self.episodes_completed,
            steps=steps,
            total_reward=self.env.total_reward,
            reached_goal=self.env.at_goal,
            fell_in_pit=self.env.in_pit,
            epsilon_used=epsilon_used,
        )
        logger.debug("Episode %d: %d steps, reward %.3f, goal=%s",
                     episode.number, episode.steps, episode.total_reward, episode.reached_goal)
        return episode

    def decay_epsilon(self) -> None:
        """Decay epsilon for less exploration over time."""
        agent_config = getattr(self.agent, "config", None)
        if agent_config is None or self.config.epsilon_decay == 1.0:
            return
        agent_config.epsilon = max(self.config.epsilon_min,
                                   agent_config.epsilon * self.config.epsilon_decay)

    def train(self, episodes: Optional[int] = None,
              on_episode: Optional[Callable[[Episode], None]] = None) -> TrainingResult:
        """Train the agent for the given number of episodes (config default if None)."""
        total = self.config.episodes if episodes is None else episodes
        result = TrainingResult()

        for _ in range(total):
            episode = self.run_episode(learn=True)
            result.episodes.append(episode)
            self.history.episodes.append(episode)
            self.episodes_completed += 1
            self.decay_epsilon()

            if on_episode is not None:
                on_episode(episode)

            if self.config.log_every and self.episodes_completed % self.config.log_every == 0:
                window = result.episodes[-self.config.log_every:]
                mean_reward = sum(ep.total_reward for ep in window) / len(window)
                logger.info("Episode %d: success rate %.1f%%, mean reward %.3f, epsilon %.3f",
                            self.episodes_completed,
                            100.0 * result.recent_success_rate(self.config.log_every),
                            mean_reward, self.epsilon)

        result.final_epsilon = self.epsilon
        self.history.final_epsilon = result.final_epsilon
        return result

    def greedy_rollout(self, max_steps: Optional[int] = None) -> RolloutResult:
        """Follow the learned policy with exploration switched off; nothing is learned."""
        limit = self.config.max_steps if max_steps is None else max_steps
        agent_config = getattr(self.agent, "config", None)
        saved_epsilon = agent_config.epsilon if agent_config is not None else None

        if agent_config is not None:
            agent_config.epsilon = 0.0
        try:
            state = self.env.reset()
            result = RolloutResult(path=[state])
            for _ in range(limit):
                next_state, reward, done = self.env.step(self.agent.act(state))
                result.path.append(next_state)
                result.total_reward += reward
                state = next_state
                if done:
                    break
            result.reached_goal = self.env.at_goal
            result.fell_in_pit = self.env.in_pit
        finally:
            if agent_config is not None:
                agent_config.epsilon = saved_epsilon

        return result


def evaluate_transfer(agent: PerceptualQAgent, layout: Sequence[Sequence[int]], start: Coord,
                      episodes: int = 20, max_steps: int = 200) -> TrainingResult:
    """
    Run a trained perceptual agent greedily on another layout.

    The agent perceives through a field built for the new layout while
    evaluating, and gets its original field back afterwards. The table
    is not modified.
    """
    original_field = agent.field
    agent.field = SignalField(layout)
    try:
        trainer = Trainer(GridWorld(layout, start, max_steps=max_steps), agent,
                          TrainingConfig(episodes=episodes, max_steps=max_steps, log_every=0))
        result = TrainingResult()
        for _ in range(episodes):
            rollout = trainer.greedy_rollout()
            result.episodes.append(Episode(
                number=len(result.episodes),
                steps=rollout.steps_taken,
                total_reward=rollout.total_reward,
                reached_goal=rollout.reached_goal,
                fell_in_pit=rollout.fell_in_pit,
                epsilon_used=0.0,
            ))
    finally:
        agent.field = original_field

    logger.info("Transfer evaluation: %d/%d episodes reached the goal",
                result.successful_episodes, result.total_episodes)
    return result
