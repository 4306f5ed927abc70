import numpy as np

from kalah_agent.agents import FirstMovePolicy, GreedyPolicy, RandomPolicy
from kalah_agent.core import Geometry
from kalah_agent.env import KalahEnv
from kalah_agent.evaluation import compare_policies, evaluate_policies, play_game


def small_env() -> KalahEnv:
    return KalahEnv(geometry=Geometry(pits_per_side=4, seeds_per_pit=3))


def test_evaluate_policies_counts_games():
    result = evaluate_policies(
        RandomPolicy(np.random.default_rng(0)),
        RandomPolicy(np.random.default_rng(1)),
        episodes=5,
        env_factory=small_env,
        rng=np.random.default_rng(2),
    )

    assert result.games_played == 5
    assert result.south_wins + result.north_wins + result.draws == 5
    assert result.average_length > 0
    assert 0.0 <= result.winrate_south() <= 1.0


def test_deterministic_policies_repeat_the_same_game():
    first = evaluate_policies(FirstMovePolicy(), GreedyPolicy(), episodes=3, env_factory=small_env)
    final = play_game(FirstMovePolicy(), GreedyPolicy(), env=small_env())

    assert first.average_length == final.ply_count
    assert first.average_margin == final.store(0) - final.store(1)
    assert first.south_wins in (0, 3)
    assert first.north_wins in (0, 3)


def test_compare_policies_plays_both_sides():
    finished = []
    result = compare_policies(
        GreedyPolicy(),
        RandomPolicy(np.random.default_rng(5)),
        episodes=3,
        env_factory=small_env,
        rng=np.random.default_rng(6),
        on_episode=finished.append,
    )

    assert result.games_played == 6
    assert len(finished) == 6
    assert result.wins + result.losses + result.draws == 6
    assert result.as_south.games_played == result.as_north.games_played == 3
    assert 0.0 <= result.score() <= 1.0
