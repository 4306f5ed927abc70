from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from kalah_agent.core import (
    GameResult,
    KalahState,
    Player,
    apply_move,
    is_terminal,
    legal_moves,
    outcome,
)
from kalah_agent.search import evaluate


@dataclass
class MCTSConfig:
    num_simulations: int = 400
    c_uct: float = 1.4
    # random plies per rollout before falling back to the static valuation
    rollout_limit: int = 200
    temperature: float = 0.0

    def __post_init__(self) -> None:
        if self.num_simulations < 1:
            raise ValueError("num_simulations must be at least 1.")
        if self.rollout_limit < 0:
            raise ValueError("rollout_limit must be non-negative.")


class Node:
    __slots__ = ("mover", "visit_count", "value_sum", "children", "untried")

    def __init__(self, state: KalahState, mover: Optional[Player] = None) -> None:
        # value_sum is kept from the perspective of the player who moved into this node
        self.mover: Optional[Player] = mover
        self.visit_count: int = 0
        self.value_sum: float = 0.0
        self.children: Dict[int, "Node"] = {}
        self.untried: List[int] = [] if is_terminal(state) else legal_moves(state)

    def q_value(self) -> float:
        if self.visit_count == 0:
            return 0.0
        return self.value_sum / self.visit_count

    def is_fully_expanded(self) -> bool:
        return not self.untried


@dataclass
class MCTSResult:
    # indexed by local house (0-based) of the player to move
    visit_counts: np.ndarray
    policy: np.ndarray
    value: float


class MCTS:
    """Plain UCT with uniformly random rollouts.

    Extra turns need no special casing: each node remembers who moved into it,
    so backpropagation credits the right player even on repeated moves.
    """

    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config or MCTSConfig()
        self.rng = rng or np.random.default_rng()

    # ------------------------------------------------------------------
    def run(self, state: KalahState) -> MCTSResult:
        h = state.geometry.pits_per_side
        root_state = state.copy()
        visit_counts = np.zeros(h, dtype=np.float32)
        if is_terminal(root_state):
            value = self._value_for(self._result_value(root_state), root_state.turn)
            return MCTSResult(visit_counts=visit_counts, policy=visit_counts.copy(), value=value)

        root = Node(root_state)
        for _ in range(self.config.num_simulations):
            self._simulate(root, root_state.copy())

        offset = state.side_slice(state.turn).start
        visited = 0
        value_sum = 0.0
        for pit, child in root.children.items():
            visit_counts[pit - offset] = child.visit_count
            visited += child.visit_count
            value_sum += child.value_sum
        value = value_sum / visited if visited else 0.0

        temperature = self.config.temperature
        if temperature <= 1e-6:
            policy = np.zeros_like(visit_counts)
            policy[int(np.argmax(visit_counts))] = 1.0
        else:
            adjusted = visit_counts ** (1.0 / temperature)
            policy = adjusted / adjusted.sum()

        return MCTSResult(visit_counts=visit_counts, policy=policy, value=value)

    # ------------------------------------------------------------------
    def _simulate(self, root: Node, state: KalahState) -> None:
        node = root
        path: List[Node] = [root]

        while node.is_fully_expanded() and node.children:
            pit, node = self._select_child(node)
            apply_move(state, pit, in_place=True)
            path.append(node)

        if node.untried:
            pit = node.untried.pop(int(self.rng.integers(len(node.untried))))
            mover = state.turn
            apply_move(state, pit, in_place=True)
            child = Node(state, mover)
            node.children[pit] = child
            node = child
            path.append(node)

        self._backpropagate(path, self._rollout(state))

    def _select_child(self, node: Node) -> Tuple[int, Node]:
        log_total = np.log(node.visit_count)
        best_score = -np.inf
        best: Optional[Tuple[int, Node]] = None
        for pit, child in node.children.items():
            score = child.q_value() + self.config.c_uct * np.sqrt(log_total / child.visit_count)
            if score > best_score:
                best_score = score
                best = (pit, child)
        if best is None:
            raise RuntimeError("Failed to select child node.")
        return best

    def _rollout(self, state: KalahState) -> float:
        """Play random moves; return the outcome from SOUTH's point of view."""
        for _ in range(self.config.rollout_limit):
            if is_terminal(state):
                break
            moves = legal_moves(state)
            apply_move(state, moves[int(self.rng.integers(len(moves)))], in_place=True)
        return self._result_value(state)

    def _backpropagate(self, path: List[Node], south_value: float) -> None:
        for node in path:
            node.visit_count += 1
            if node.mover is not None:
                node.value_sum += self._value_for(south_value, node.mover)

    @staticmethod
    def _value_for(south_value: float, player: Player) -> float:
        return south_value if player == Player.SOUTH else -south_value

    @staticmethod
    def _result_value(state: KalahState) -> float:
        if not is_terminal(state):
            return float(np.sign(evaluate(state, Player.SOUTH)))
        result = outcome(state)
        if result == GameResult.SOUTH_WIN:
            return 1.0
        if result == GameResult.NORTH_WIN:
            return -1.0
        return 0.0
