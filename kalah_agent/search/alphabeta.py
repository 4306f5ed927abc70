from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, Tuple

from kalah_agent.core import (
    KalahState,
    Player,
    apply_move,
    grants_extra_turn,
    is_terminal,
    legal_moves,
)

from .valuation import DEFAULT_WEIGHTS, ValuationWeights, evaluate, is_proven

logger = logging.getLogger(__name__)

Evaluator = Callable[[KalahState, Player, Optional[ValuationWeights]], float]


class SearchTimeout(Exception):
    """Deadline passed inside an iteration; handled by ``AlphaBetaSearch.search``."""


@dataclass
class SearchConfig:
    max_depth: int = 64
    # node expansions between clock polls
    check_interval: int = 32
    prune: bool = True
    extra_turn_consumes_ply: bool = False
    order_extra_turns_first: bool = True
    weights: ValuationWeights = field(default_factory=lambda: DEFAULT_WEIGHTS)

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1.")
        if self.check_interval < 1:
            raise ValueError("check_interval must be at least 1.")


@dataclass
class SearchResult:
    move: int
    score: float
    depth: int
    principal_variation: Tuple[int, ...] = ()
    nodes: int = 0
    elapsed: float = 0.0
    timed_out: bool = False
    proven: bool = False


class AlphaBetaSearch:
    """Iterative-deepening negamax with alpha-beta pruning.

    Every explored position is a private copy produced by ``apply_move``, so
    sibling branches never observe each other's state. The clock is polled
    every ``check_interval`` node expansions; an iteration that runs past the
    deadline is discarded and the last complete iteration is reported.
    """

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        *,
        evaluator: Evaluator = evaluate,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.config = config or SearchConfig()
        self.evaluator = evaluator
        self.clock = clock
        self._nodes = 0
        self._deadline: Optional[float] = None
        self._frontier_reached = False

    # ------------------------------------------------------------------
    def search(
        self,
        state: KalahState,
        *,
        time_budget: Optional[float] = None,
        depth: Optional[int] = None,
        on_iteration: Optional[Callable[[SearchResult], None]] = None,
    ) -> SearchResult:
        root_moves = legal_moves(state)
        max_depth = depth if depth is not None else self.config.max_depth
        if max_depth < 1:
            raise ValueError("Search depth must be at least 1.")

        start = self.clock()
        self._deadline = None if time_budget is None else start + max(0.0, time_budget)
        self._nodes = 0

        best: Optional[SearchResult] = None
        previous_pv: Tuple[int, ...] = ()
        timed_out = False

        for current_depth in range(1, max_depth + 1):
            if self._deadline is not None and self.clock() >= self._deadline:
                timed_out = True
                break
            self._frontier_reached = False
            try:
                score, line = self._negamax(state, current_depth, -math.inf, math.inf, previous_pv)
            except SearchTimeout:
                timed_out = True
                break

            best = SearchResult(
                move=line[0],
                score=score,
                depth=current_depth,
                principal_variation=tuple(line),
                nodes=self._nodes,
                elapsed=self.clock() - start,
                proven=is_proven(score, state.geometry, self.config.weights),
            )
            logger.debug(
                "depth %d: move=%d score=%.3f nodes=%d pv=%s",
                current_depth,
                best.move,
                best.score,
                best.nodes,
                list(best.principal_variation),
            )
            if on_iteration is not None:
                on_iteration(best)
            previous_pv = best.principal_variation

            if best.proven or not self._frontier_reached:
                break

        if best is None:
            best = self._greedy(state, root_moves)
            logger.debug("no iteration completed; falling back to one-ply choice %d", best.move)

        return replace(best, nodes=self._nodes, elapsed=self.clock() - start, timed_out=timed_out)

    def search_value(self, state: KalahState, depth: int) -> float:
        """Value of ``state`` for the player to move at a fixed depth, without a deadline."""
        self._deadline = None
        self._nodes = 0
        value, _ = self._negamax(state, depth, -math.inf, math.inf, ())
        return value

    # ------------------------------------------------------------------
    def _negamax(
        self,
        state: KalahState,
        depth: int,
        alpha: float,
        beta: float,
        pv_hint: Sequence[int],
    ) -> Tuple[float, List[int]]:
        self._tick()

        if is_terminal(state):
            return self._evaluate(state), []
        if depth <= 0:
            self._frontier_reached = True
            return self._evaluate(state), []

        mover = state.turn
        best_value = -math.inf
        best_line: List[int] = []

        for pit in self._ordered_moves(state, pv_hint):
            child = apply_move(state, pit)
            hint = pv_hint[1:] if pv_hint and pv_hint[0] == pit else ()

            if child.turn == mover:
                # Extra turn: same player, same window.
                child_depth = depth - 1 if self.config.extra_turn_consumes_ply else depth
                value, line = self._negamax(child, child_depth, alpha, beta, hint)
            else:
                value, line = self._negamax(child, depth - 1, -beta, -alpha, hint)
                value = -value

            if value > best_value:
                best_value = value
                best_line = [pit] + line

            if self.config.prune:
                alpha = max(alpha, value)
                if alpha >= beta:
                    break

        return best_value, best_line

    def _ordered_moves(self, state: KalahState, pv_hint: Sequence[int]) -> List[int]:
        moves = legal_moves(state)
        if self.config.order_extra_turns_first:
            moves.sort(key=lambda pit: not grants_extra_turn(state, pit))
        if pv_hint and pv_hint[0] in moves:
            moves.remove(pv_hint[0])
            moves.insert(0, pv_hint[0])
        return moves

    def _evaluate(self, state: KalahState) -> float:
        return self.evaluator(state, state.turn, self.config.weights)

    def _tick(self) -> None:
        self._nodes += 1
        if (
            self._deadline is not None
            and self._nodes % self.config.check_interval == 0
            and self.clock() >= self._deadline
        ):
            raise SearchTimeout()

    def _greedy(self, state: KalahState, moves: Sequence[int]) -> SearchResult:
        mover = state.turn
        scored = [
            (self.evaluator(apply_move(state, pit), mover, self.config.weights), pit)
            for pit in moves
        ]
        score, pit = max(scored, key=lambda entry: entry[0])
        return SearchResult(move=pit, score=score, depth=0, principal_variation=(pit,))
