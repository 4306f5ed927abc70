"""Game-tree search and static evaluation."""

from .alphabeta import AlphaBetaSearch, SearchConfig, SearchResult, SearchTimeout
from .valuation import (
    DEFAULT_WEIGHTS,
    SEED_DIFF,
    STORE_DIFF,
    ValuationWeights,
    evaluate,
    is_proven,
    terminal_scale,
)

__all__ = [
    "AlphaBetaSearch",
    "SearchConfig",
    "SearchResult",
    "SearchTimeout",
    "DEFAULT_WEIGHTS",
    "SEED_DIFF",
    "STORE_DIFF",
    "ValuationWeights",
    "evaluate",
    "is_proven",
    "terminal_scale",
]
