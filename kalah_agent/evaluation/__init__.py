from .match import ComparisonResult, EvaluationResult, compare_policies, evaluate_policies, play_game

__all__ = [
    "ComparisonResult",
    "EvaluationResult",
    "compare_policies",
    "evaluate_policies",
    "play_game",
]
