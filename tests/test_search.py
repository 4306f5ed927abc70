import time

import pytest

from kalah_agent.core import (
    Geometry,
    NoLegalMoves,
    Player,
    apply_move,
    finalize,
    initial_state,
    is_terminal,
    legal_moves,
    make_state,
    winner,
)
from kalah_agent.search import AlphaBetaSearch, SearchConfig, SearchResult, terminal_scale


def extra_turn_then_capture():
    # House 2 ends in the store; the repeat move from house 1 then captures.
    return make_state([1, 1], [1, 1])


@pytest.mark.parametrize(
    "state, depths",
    [
        (make_state([2, 2], [2, 2]), range(1, 9)),
        (initial_state(), range(1, 4)),
    ],
)
@pytest.mark.parametrize("ordered", [True, False])
def test_pruning_matches_plain_minimax(state, depths, ordered: bool) -> None:
    pruned = AlphaBetaSearch(SearchConfig(prune=True, order_extra_turns_first=ordered))
    plain = AlphaBetaSearch(SearchConfig(prune=False, order_extra_turns_first=ordered))
    for depth in depths:
        assert pruned.search_value(state, depth) == pytest.approx(plain.search_value(state, depth))


def test_pruning_visits_fewer_nodes() -> None:
    state = initial_state()
    pruned = AlphaBetaSearch(SearchConfig(prune=True))
    plain = AlphaBetaSearch(SearchConfig(prune=False))
    assert pruned.search(state, depth=3).nodes < plain.search(state, depth=3).nodes


def test_extra_turn_does_not_consume_depth() -> None:
    state = extra_turn_then_capture()
    scale = terminal_scale(state.geometry)

    free = AlphaBetaSearch(SearchConfig(extra_turn_consumes_ply=False))
    counted = AlphaBetaSearch(SearchConfig(extra_turn_consumes_ply=True))

    assert free.search_value(state, 1) == pytest.approx(2 * scale)
    assert counted.search_value(state, 1) == pytest.approx(0.75)


def test_search_finds_forced_win_and_stops() -> None:
    state = extra_turn_then_capture()

    result = AlphaBetaSearch().search(state, time_budget=1.0)

    assert result.move == 1
    assert result.principal_variation == (1, 0)
    assert result.proven
    assert result.depth == 1
    assert not result.timed_out


def test_single_move_capture_is_proven() -> None:
    state = make_state([1, 0], [1, 0], 1, 1)
    result = AlphaBetaSearch().search(state, depth=4)
    assert result.move == 0
    assert result.score == pytest.approx(2 * terminal_scale(state.geometry))
    assert result.proven


def test_depth_limited_search_reports_iterations() -> None:
    seen = []
    result = AlphaBetaSearch().search(initial_state(), depth=3, on_iteration=seen.append)

    assert [r.depth for r in seen] == [1, 2, 3]
    assert result.depth == 3
    assert result.move in legal_moves(initial_state())
    assert result.principal_variation[0] == result.move
    assert all(isinstance(r, SearchResult) for r in seen)


def test_search_does_not_touch_the_input() -> None:
    state = initial_state()
    AlphaBetaSearch().search(state, depth=3)
    assert state.pits.tolist() == [4] * 12
    assert state.ply_count == 0


def test_deadline_is_respected() -> None:
    state = initial_state(Geometry(pits_per_side=6, seeds_per_pit=4))
    budget = 0.05

    start = time.perf_counter()
    result = AlphaBetaSearch().search(state, time_budget=budget)
    elapsed = time.perf_counter() - start

    assert result.move in legal_moves(state)
    assert elapsed < 2 * budget
    assert result.timed_out
    assert result.depth >= 1


def test_expired_clock_falls_back_to_greedy_move() -> None:
    ticks = iter(range(1000))
    search = AlphaBetaSearch(clock=lambda: float(next(ticks)))

    result = search.search(initial_state(), time_budget=0.5)

    assert result.timed_out
    assert result.depth == 0
    # House 3 banks a seed and keeps the move.
    assert result.move == 2


def test_terminal_position_has_nothing_to_search() -> None:
    with pytest.raises(NoLegalMoves):
        AlphaBetaSearch().search(make_state([0, 0], [2, 2], 2, 2))


def test_invalid_config() -> None:
    with pytest.raises(ValueError):
        SearchConfig(max_depth=0)
    with pytest.raises(ValueError):
        SearchConfig(check_interval=0)
    with pytest.raises(ValueError):
        AlphaBetaSearch().search(initial_state(), depth=0)


def test_end_to_end_opening_and_finish() -> None:
    state = initial_state()
    state = apply_move(state, 2)
    assert state.turn == Player.SOUTH
    assert state.store(Player.SOUTH) == 1

    finished = make_state([0, 0, 0, 0, 0, 0], [1, 0, 2, 0, 0, 0], 25, 20)
    assert is_terminal(finished)
    final = finalize(finished)
    assert final.stores.tolist() == [25, 23]
    assert winner(finished) == Player.SOUTH
