from .policies import (
    AlphaBetaPolicy,
    FirstMovePolicy,
    GreedyPolicy,
    MCTSPolicy,
    POLICY_NAMES,
    Policy,
    RandomPolicy,
    make_policy,
    select_action,
)

__all__ = [
    "AlphaBetaPolicy",
    "FirstMovePolicy",
    "GreedyPolicy",
    "MCTSPolicy",
    "POLICY_NAMES",
    "Policy",
    "RandomPolicy",
    "make_policy",
    "select_action",
]
