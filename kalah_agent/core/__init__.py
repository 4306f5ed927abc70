"""Core game logic for the Kalah agent."""

from .state import GameResult, Geometry, KalahState, MoveRecord, Player, make_state
from .rules import (
    IllegalMove,
    NoLegalMoves,
    apply_move,
    finalize,
    grants_extra_turn,
    house_from_pit,
    initial_state,
    is_terminal,
    legal_moves,
    opposite_pit,
    outcome,
    pit_from_house,
    winner,
)

__all__ = [
    "GameResult",
    "Geometry",
    "KalahState",
    "MoveRecord",
    "Player",
    "make_state",
    "IllegalMove",
    "NoLegalMoves",
    "apply_move",
    "finalize",
    "grants_extra_turn",
    "house_from_pit",
    "initial_state",
    "is_terminal",
    "legal_moves",
    "opposite_pit",
    "outcome",
    "pit_from_house",
    "winner",
]
