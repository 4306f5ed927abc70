#!/usr/bin/env python3
"""Play two agents against each other from both sides and print the totals as JSON."""

import argparse
import json

import numpy as np
from tqdm.auto import tqdm

from kalah_agent.agents import POLICY_NAMES, make_policy
from kalah_agent.core import Geometry
from kalah_agent.env import KalahEnv
from kalah_agent.evaluation import compare_policies


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("agent", choices=POLICY_NAMES)
    parser.add_argument("opponent", choices=POLICY_NAMES)
    parser.add_argument("--episodes", type=int, default=10, help="Games per side.")
    parser.add_argument("--pits", type=int, default=6)
    parser.add_argument("--seeds", type=int, default=4)
    parser.add_argument("--depth", type=int, default=6)
    parser.add_argument("--time-budget", type=float)
    parser.add_argument("--mcts-simulations", type=int, default=200)
    parser.add_argument("--seed", type=int)
    args = parser.parse_args()

    geometry = Geometry(pits_per_side=args.pits, seeds_per_pit=args.seeds)
    depth = None if args.time_budget is not None else args.depth
    policies = [
        make_policy(
            name,
            seed=None if args.seed is None else args.seed + offset,
            depth=depth,
            time_budget=args.time_budget,
            mcts_simulations=args.mcts_simulations,
        )
        for offset, name in enumerate((args.agent, args.opponent))
    ]

    with tqdm(total=2 * args.episodes, desc="Games") as progress:
        result = compare_policies(
            policies[0],
            policies[1],
            episodes=args.episodes,
            env_factory=lambda: KalahEnv(geometry=geometry),
            rng=np.random.default_rng(args.seed),
            on_episode=lambda _: progress.update(1),
        )

    output = {
        "agent": args.agent,
        "opponent": args.opponent,
        "geometry": {"pits_per_side": geometry.pits_per_side, "seeds_per_pit": geometry.seeds_per_pit},
        "games": result.games_played,
        "wins": result.wins,
        "losses": result.losses,
        "draws": result.draws,
        "score": result.score(),
        "as_south": {
            "wins": result.as_south.south_wins,
            "losses": result.as_south.north_wins,
            "average_length": result.as_south.average_length,
            "average_margin": result.as_south.average_margin,
        },
        "as_north": {
            "wins": result.as_north.north_wins,
            "losses": result.as_north.south_wins,
            "average_length": result.as_north.average_length,
            "average_margin": -result.as_north.average_margin,
        },
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
