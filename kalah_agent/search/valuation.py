"""Static position scoring for the game-tree search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from kalah_agent.core import Geometry, KalahState, Player, is_terminal


@dataclass(frozen=True)
class ValuationWeights:
    store_weight: float = 1.0
    pit_weight: float = 0.25

    def __post_init__(self) -> None:
        if self.pit_weight < 0 or self.store_weight <= self.pit_weight:
            raise ValueError("Banked seeds must weigh more than seeds in pits.")


DEFAULT_WEIGHTS = ValuationWeights()
STORE_DIFF = ValuationWeights(store_weight=1.0, pit_weight=0.0)
SEED_DIFF = ValuationWeights(store_weight=1.0 + 1e-5, pit_weight=1.0)


def terminal_scale(geometry: Geometry, weights: Optional[ValuationWeights] = None) -> float:
    # Heuristic scores stay strictly below store_weight * total_seeds.
    weights = weights or DEFAULT_WEIGHTS
    return weights.store_weight * geometry.total_seeds + 1.0


def is_proven(value: float, geometry: Geometry, weights: Optional[ValuationWeights] = None) -> bool:
    return abs(value) >= terminal_scale(geometry, weights)


def evaluate(
    state: KalahState,
    perspective: Player,
    weights: Optional[ValuationWeights] = None,
) -> float:
    """Score ``state`` for ``perspective``; positive values favour that player.

    Finished games are scored by their final store difference, scaled so
    that a proven win outranks every heuristic score.
    """
    weights = weights or DEFAULT_WEIGHTS
    opponent = perspective.other
    own_pits = int(state.side(perspective).sum())
    opp_pits = int(state.side(opponent).sum())
    store_diff = state.store(perspective) - state.store(opponent)

    if is_terminal(state):
        # Remaining seeds are swept into their owner's store.
        final_diff = store_diff + own_pits - opp_pits
        return final_diff * terminal_scale(state.geometry, weights)

    return weights.store_weight * store_diff + weights.pit_weight * (own_pits - opp_pits)
