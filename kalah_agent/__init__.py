"""Kalah agent: rules, search, and a KGP client."""

from . import core, search, kgp, mcts, agents, env, evaluation
from .core import GameResult, Geometry, KalahState, Player, apply_move, initial_state, legal_moves
from .search import AlphaBetaSearch, SearchConfig, SearchResult
from .kgp import KGPSession, SessionConfig, SessionState
from .mcts import MCTS, MCTSConfig
from .agents import AlphaBetaPolicy, MCTSPolicy, RandomPolicy
from .env import KalahEnv
from .evaluation import EvaluationResult, compare_policies, evaluate_policies

__all__ = [
    "core",
    "search",
    "kgp",
    "mcts",
    "agents",
    "env",
    "evaluation",
    "GameResult",
    "Geometry",
    "KalahState",
    "Player",
    "apply_move",
    "initial_state",
    "legal_moves",
    "AlphaBetaSearch",
    "SearchConfig",
    "SearchResult",
    "KGPSession",
    "SessionConfig",
    "SessionState",
    "MCTS",
    "MCTSConfig",
    "AlphaBetaPolicy",
    "MCTSPolicy",
    "RandomPolicy",
    "KalahEnv",
    "EvaluationResult",
    "compare_policies",
    "evaluate_policies",
]
