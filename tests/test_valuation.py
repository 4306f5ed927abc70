import pytest

from kalah_agent.core import Geometry, Player, apply_move, initial_state, make_state
from kalah_agent.search import (
    DEFAULT_WEIGHTS,
    SEED_DIFF,
    STORE_DIFF,
    ValuationWeights,
    evaluate,
    is_proven,
    terminal_scale,
)


def after_extra_turn():
    return apply_move(initial_state(), 2)


def test_opening_is_balanced() -> None:
    assert evaluate(initial_state(), Player.SOUTH) == 0.0


def test_default_weights_mix_store_and_pits() -> None:
    state = after_extra_turn()
    assert evaluate(state, Player.SOUTH) == pytest.approx(0.75)
    assert evaluate(state, Player.NORTH) == pytest.approx(-0.75)


def test_store_and_seed_diff_presets() -> None:
    state = after_extra_turn()
    assert evaluate(state, Player.SOUTH, STORE_DIFF) == pytest.approx(1.0)
    assert evaluate(state, Player.SOUTH, SEED_DIFF) == pytest.approx(1e-5, abs=1e-9)


def test_terminal_positions_are_scaled() -> None:
    state = make_state([0, 0], [1, 3], 2, 2)
    scale = terminal_scale(state.geometry)

    assert scale == pytest.approx(9.0)
    assert evaluate(state, Player.SOUTH) == pytest.approx(-4 * scale)
    assert is_proven(evaluate(state, Player.NORTH), state.geometry)


def test_heuristic_scores_are_never_proven() -> None:
    geometry = Geometry()
    lopsided = make_state([0, 0, 0, 0, 0, 1], [0, 0, 0, 0, 0, 0], 40, 7)
    assert not is_proven(evaluate(make_state([1] * 6, [1] * 6, 36, 0), Player.SOUTH), geometry)
    assert is_proven(evaluate(lopsided, Player.SOUTH), lopsided.geometry)


def test_weights_must_favour_stores() -> None:
    with pytest.raises(ValueError):
        ValuationWeights(store_weight=0.5, pit_weight=0.5)
    with pytest.raises(ValueError):
        ValuationWeights(store_weight=1.0, pit_weight=-0.1)
    assert DEFAULT_WEIGHTS.store_weight > DEFAULT_WEIGHTS.pit_weight
