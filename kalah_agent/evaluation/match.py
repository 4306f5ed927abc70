from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from kalah_agent.agents import Policy
from kalah_agent.core import GameResult, KalahState, Player, outcome
from kalah_agent.env import KalahEnv


@dataclass
class EvaluationResult:
    games_played: int
    south_wins: int
    north_wins: int
    draws: int
    average_length: float
    # mean of (south store - north store) over finished games
    average_margin: float

    def winrate_south(self) -> float:
        return self.south_wins / max(1, self.games_played)

    def winrate_north(self) -> float:
        return self.north_wins / max(1, self.games_played)


@dataclass
class ComparisonResult:
    """Totals for two policies after playing both colours."""

    as_south: EvaluationResult
    as_north: EvaluationResult

    @property
    def games_played(self) -> int:
        return self.as_south.games_played + self.as_north.games_played

    @property
    def wins(self) -> int:
        return self.as_south.south_wins + self.as_north.north_wins

    @property
    def losses(self) -> int:
        return self.as_south.north_wins + self.as_north.south_wins

    @property
    def draws(self) -> int:
        return self.as_south.draws + self.as_north.draws

    def score(self) -> float:
        """Points per game for the first policy (win 1, draw 0.5)."""
        return (self.wins + 0.5 * self.draws) / max(1, self.games_played)


def play_game(
    policy_south: Policy,
    policy_north: Policy,
    *,
    env: Optional[KalahEnv] = None,
    rng: Optional[np.random.Generator] = None,
) -> KalahState:
    """Play one game to the end and return the finalized final position."""
    env = env or KalahEnv()
    rng = rng or np.random.default_rng()
    _, info = env.reset()
    terminated = False

    while not terminated:
        state_snapshot = env.state
        legal_mask = info["legal_action_mask"]
        policy = policy_south if state_snapshot.turn == Player.SOUTH else policy_north
        probs = policy.act(state_snapshot, legal_mask)
        if probs.sum() <= 0:
            probs = legal_mask.astype(np.float32)
        probs = probs / probs.sum()
        action_index = int(rng.choice(len(probs), p=probs))
        _, _, terminated, truncated, info = env.step(action_index)
        if truncated:
            terminated = True

    return env.state


def evaluate_policies(
    policy_south: Policy,
    policy_north: Policy,
    *,
    episodes: int,
    env_factory: Optional[Callable[[], KalahEnv]] = None,
    rng: Optional[np.random.Generator] = None,
    on_episode: Optional[Callable[[KalahState], None]] = None,
) -> EvaluationResult:
    env_factory = env_factory or KalahEnv
    rng = rng or np.random.default_rng()

    south_wins = 0
    north_wins = 0
    draws = 0
    total_ply = 0
    total_margin = 0

    for _ in range(episodes):
        final = play_game(policy_south, policy_north, env=env_factory(), rng=rng)
        total_ply += final.ply_count
        total_margin += final.store(Player.SOUTH) - final.store(Player.NORTH)
        result = outcome(final)
        if result == GameResult.SOUTH_WIN:
            south_wins += 1
        elif result == GameResult.NORTH_WIN:
            north_wins += 1
        else:
            draws += 1
        if on_episode is not None:
            on_episode(final)

    return EvaluationResult(
        games_played=episodes,
        south_wins=south_wins,
        north_wins=north_wins,
        draws=draws,
        average_length=total_ply / max(1, episodes),
        average_margin=total_margin / max(1, episodes),
    )


def compare_policies(
    policy_a: Policy,
    policy_b: Policy,
    *,
    episodes: int,
    env_factory: Optional[Callable[[], KalahEnv]] = None,
    rng: Optional[np.random.Generator] = None,
    on_episode: Optional[Callable[[KalahState], None]] = None,
) -> ComparisonResult:
    """Play ``episodes`` games with ``policy_a`` as SOUTH, then as many as NORTH."""
    as_south = evaluate_policies(
        policy_a, policy_b, episodes=episodes, env_factory=env_factory, rng=rng, on_episode=on_episode
    )
    as_north = evaluate_policies(
        policy_b, policy_a, episodes=episodes, env_factory=env_factory, rng=rng, on_episode=on_episode
    )
    return ComparisonResult(as_south=as_south, as_north=as_north)
