"""Headless training entry point: ``python -m scent_rl``."""

import argparse
import logging
import sys
from typing import List, Optional

from .app.trainer import Trainer, evaluate_transfer
from .domain.gridworld import GridWorld
from .domain.policy import greedy_actions
from .domain.qlearning import make_agent
from .domain.signal_field import SignalField
from .domain.types import AgentConfig, CELL_EMPTY, CELL_WALL, TrainingConfig
from .utils.grid_factory import CELL_SYMBOLS, default_layout, format_layout, transfer_layout
from .utils.layout_serialization import layout_name, load_layout
from .utils.rng import SeededRNG

ARROWS = "^>v<"


def format_field(field: SignalField) -> str:
    """Signal values as a text table, walls shown as ####."""
    lines = []
    for r in range(field.rows):
        cells = []
        for c in range(field.cols):
            if field.layout[r][c] == CELL_WALL:
                cells.append("  #### ")
            else:
                cells.append(f"{field.read(r, c):+7.3f}")
        lines.append(" ".join(cells))
    return "\n".join(lines)


def format_policy(agent, layout) -> str:
    """Greedy action per empty cell; ties show as ``*``."""
    lines = []
    for r, row in enumerate(layout):
        cells = []
        for c, cell in enumerate(row):
            if cell != CELL_EMPTY:
                cells.append(CELL_SYMBOLS[cell])
                continue
            best = greedy_actions(agent.get_q(r, c))
            cells.append(ARROWS[best[0]] if len(best) == 1 else "*")
        lines.append(" ".join(cells))
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scent_rl",
                                     description="Train a tabular agent to reach the goal and avoid the pit")
    parser.add_argument("--agent", choices=["positional", "perceptual", "random"], default="positional",
                        help="State representation used by the agent")
    parser.add_argument("--episodes", type=int, default=500, help="Number of episodes to train")
    parser.add_argument("--max-steps", type=int, default=200, help="Step limit per episode")
    parser.add_argument("--alpha", type=float, default=0.1, help="Learning rate")
    parser.add_argument("--gamma", type=float, default=0.95, help="Discount factor")
    parser.add_argument("--epsilon", type=float, default=0.1, help="Exploration probability")
    parser.add_argument("--threshold", type=float, default=0.01, help="Perceptual binning width")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--layout", type=str, help="Path to a saved layout JSON file")
    parser.add_argument("--transfer", action="store_true",
                        help="Evaluate a perceptual agent on the transfer layout after training")
    parser.add_argument("--show-field", action="store_true", help="Print the signal field")
    parser.add_argument("--log-every", type=int, default=50, help="Episodes between progress lines")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every episode")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.layout:
        try:
            layout_data = load_layout(args.layout)
        except (OSError, ValueError) as e:
            print(f"Error loading layout: {e}")
            return 1
        layout, start = layout_data.layout, layout_data.start
        name = layout_name(layout_data)
    else:
        layout, start = default_layout()
        name = "default"

    rng = SeededRNG(args.seed)
    config = AgentConfig(alpha=args.alpha, gamma=args.gamma, epsilon=args.epsilon,
                         threshold=args.threshold)
    field = SignalField(layout)
    agent = make_agent(args.agent, layout, config, rng, field=field)

    print(f"Layout: {name} ({len(layout)}x{len(layout[0])}), start {start}")
    print(format_layout(layout, agent=start))
    if args.show_field:
        print("\nSignal field:")
        print(format_field(field))

    print(f"\nTraining {agent.name} agent for {args.episodes} episodes "
          f"(alpha={config.alpha}, gamma={config.gamma}, epsilon={config.epsilon})")

    env = GridWorld(layout, start, max_steps=args.max_steps)
    trainer = Trainer(env, agent, TrainingConfig(episodes=args.episodes, max_steps=args.max_steps,
                                                 log_every=args.log_every))
    try:
        result = trainer.train()
    except KeyboardInterrupt:
        print("\nTraining interrupted by user")
        return 1

    print("\nTraining completed!")
    print(f"   Total episodes: {result.total_episodes}")
    print(f"   Successful episodes: {result.successful_episodes}")
    print(f"   Success rate: {result.success_rate:.1%}")
    print(f"   Last 100 success rate: {result.recent_success_rate(100):.1%}")
    print(f"   Average reward: {result.average_reward:.3f}")

    if args.agent != "random":
        print("\nGreedy policy:")
        print(format_policy(agent, layout))

    rollout = trainer.greedy_rollout()
    if rollout.reached_goal:
        print(f"\nGreedy rollout reached the goal in {rollout.steps_taken} steps")
    elif rollout.fell_in_pit:
        print(f"\nGreedy rollout fell in the pit after {rollout.steps_taken} steps")
    else:
        print(f"\nGreedy rollout did not finish within {rollout.steps_taken} steps")

    if args.transfer:
        if args.agent != "perceptual":
            print("\n--transfer only applies to the perceptual agent, skipping")
        else:
            other_layout, other_start = transfer_layout()
            transfer = evaluate_transfer(agent, other_layout, other_start, max_steps=args.max_steps)
            print(f"\nTransfer layout success rate: {transfer.success_rate:.1%}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
