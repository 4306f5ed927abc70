from __future__ import annotations

from copy import deepcopy
from typing import Optional

import numpy as np

from kalah_agent.core import KalahState, apply_move
from kalah_agent.mcts import MCTS, MCTSConfig
from kalah_agent.search import AlphaBetaSearch, SearchConfig, ValuationWeights, evaluate


class Policy:
    """Policy interface producing probabilities over the mover's local houses."""

    def act(self, state: KalahState, legal_mask: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def spawn(self, seed: Optional[int] = None) -> "Policy":
        """Return a copy of this policy with its own random stream."""
        return self


def _one_hot(size: int, index: int) -> np.ndarray:
    probs = np.zeros(size, dtype=np.float32)
    probs[index] = 1.0
    return probs


class RandomPolicy(Policy):
    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng or np.random.default_rng()

    def act(self, state: KalahState, legal_mask: np.ndarray) -> np.ndarray:
        logits = legal_mask.astype(np.float64)
        if logits.sum() == 0:
            return logits.astype(np.float32)
        probs = logits / logits.sum()
        return probs.astype(np.float32, copy=True)

    def spawn(self, seed: Optional[int] = None) -> "RandomPolicy":
        return RandomPolicy(np.random.default_rng(seed))


class FirstMovePolicy(Policy):
    """Always sow the lowest non-empty house."""

    def act(self, state: KalahState, legal_mask: np.ndarray) -> np.ndarray:
        indices = np.flatnonzero(legal_mask)
        if len(indices) == 0:
            return legal_mask.astype(np.float32)
        return _one_hot(len(legal_mask), int(indices[0]))


class GreedyPolicy(Policy):
    """Pick the house whose resulting position values best after one ply."""

    def __init__(self, weights: Optional[ValuationWeights] = None) -> None:
        self.weights = weights

    def act(self, state: KalahState, legal_mask: np.ndarray) -> np.ndarray:
        indices = np.flatnonzero(legal_mask)
        if len(indices) == 0:
            return legal_mask.astype(np.float32)
        offset = state.side_slice(state.turn).start
        scores = [
            evaluate(apply_move(state, offset + int(idx)), state.turn, self.weights)
            for idx in indices
        ]
        return _one_hot(len(legal_mask), int(indices[int(np.argmax(scores))]))


class AlphaBetaPolicy(Policy):
    """Deterministic iterative-deepening search, bounded by time and/or depth."""

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        *,
        time_budget: Optional[float] = None,
        depth: Optional[int] = 6,
    ) -> None:
        if time_budget is None and depth is None:
            raise ValueError("AlphaBetaPolicy needs a time budget or a depth.")
        self._config = deepcopy(config) if config else SearchConfig()
        self.search = AlphaBetaSearch(self._config)
        self.time_budget = time_budget
        self.depth = depth

    def act(self, state: KalahState, legal_mask: np.ndarray) -> np.ndarray:
        if not legal_mask.any():
            return legal_mask.astype(np.float32)
        result = self.search.search(state, time_budget=self.time_budget, depth=self.depth)
        return _one_hot(len(legal_mask), result.move - state.side_slice(state.turn).start)

    def spawn(self, seed: Optional[int] = None) -> "AlphaBetaPolicy":
        return AlphaBetaPolicy(self._config, time_budget=self.time_budget, depth=self.depth)


class MCTSPolicy(Policy):
    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._config = deepcopy(config) if config else MCTSConfig()
        self.mcts = MCTS(config=self._config, rng=rng or np.random.default_rng())

    def act(self, state: KalahState, legal_mask: np.ndarray) -> np.ndarray:
        result = self.mcts.run(state)
        policy = result.policy.astype(np.float32, copy=True)
        policy *= legal_mask
        total = policy.sum()
        if total > 0:
            policy /= total
        return policy

    def spawn(self, seed: Optional[int] = None) -> "MCTSPolicy":
        return MCTSPolicy(self._config, rng=np.random.default_rng(seed))


POLICY_NAMES = ("random", "first", "greedy", "alphabeta", "mcts")


def make_policy(
    name: str,
    *,
    seed: Optional[int] = None,
    depth: Optional[int] = 6,
    time_budget: Optional[float] = None,
    mcts_simulations: Optional[int] = None,
) -> Policy:
    """Build a policy from its short name (see ``POLICY_NAMES``)."""
    if name == "random":
        return RandomPolicy(np.random.default_rng(seed))
    if name == "first":
        return FirstMovePolicy()
    if name == "greedy":
        return GreedyPolicy()
    if name == "alphabeta":
        return AlphaBetaPolicy(time_budget=time_budget, depth=depth)
    if name == "mcts":
        config = MCTSConfig() if mcts_simulations is None else MCTSConfig(num_simulations=mcts_simulations)
        return MCTSPolicy(config, rng=np.random.default_rng(seed))
    raise ValueError(f"Unknown policy {name!r}; expected one of {', '.join(POLICY_NAMES)}")


def select_action(
    probabilities: np.ndarray,
    temperature: float,
    rng: np.random.Generator,
) -> int:
    if probabilities.sum() == 0:
        raise ValueError("Policy produced zero probability over legal actions.")
    probs = probabilities.astype(np.float64, copy=True)
    if temperature <= 1e-6:
        return int(np.argmax(probs))
    adjusted = probs ** (1.0 / temperature)
    adjusted /= adjusted.sum()
    return int(rng.choice(len(adjusted), p=adjusted))
