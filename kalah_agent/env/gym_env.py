from __future__ import annotations

from typing import Dict, Optional

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from kalah_agent.core import (
    GameResult,
    Geometry,
    KalahState,
    Player,
    apply_move,
    finalize,
    initial_state,
    is_terminal,
    outcome,
)


class KalahEnv(gym.Env):
    """Two-player Kalah with actions numbered by the mover's local house.

    Rewards are +1/-1/0 from SOUTH's point of view, paid when the game ends.
    Finished positions are finalized, so ``stores`` then holds the score.
    """

    metadata = {"render_modes": ["ansi"], "render_fps": 4}

    def __init__(
        self,
        *,
        geometry: Optional[Geometry] = None,
        enforce_legal_actions: bool = True,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.geometry = geometry or Geometry()
        self._enforce_legal = enforce_legal_actions
        self.render_mode = render_mode

        h = self.geometry.pits_per_side
        total = self.geometry.total_seeds
        self.observation_space = spaces.Dict(
            {
                "pits": spaces.Box(low=0, high=total, shape=(2 * h,), dtype=np.int64),
                "stores": spaces.Box(low=0, high=total, shape=(2,), dtype=np.int64),
                "turn": spaces.Discrete(2),
            }
        )
        self.action_space = spaces.Discrete(h)

        self._state = initial_state(self.geometry)

    @property
    def state(self) -> KalahState:
        return self._state.copy()

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict] = None):
        super().reset(seed=seed)
        turn = Player(options.get("turn", Player.SOUTH)) if options else Player.SOUTH
        self._state = initial_state(self.geometry, turn=turn)
        return self._build_observation(), self._build_info()

    def step(self, action_index: int):
        if not self.action_space.contains(action_index):
            raise ValueError(f"Action index {action_index} out of bounds.")
        if is_terminal(self._state):
            raise ValueError("The game is over; call reset() first.")

        legal_mask = self.legal_action_mask()
        if not legal_mask[action_index]:
            if self._enforce_legal:
                raise ValueError("Illegal action provided and enforce_legal_actions=True.")
            # Unenforced: an empty house is replaced by the first legal one.
            action_index = int(np.flatnonzero(legal_mask)[0])

        pit = self._state.side_slice(self._state.turn).start + int(action_index)
        self._state = apply_move(self._state, pit)
        terminated = is_terminal(self._state)
        if terminated:
            finalize(self._state, in_place=True)

        reward = self._compute_reward(outcome(self._state)) if terminated else 0.0
        return self._build_observation(), reward, terminated, False, self._build_info()

    def legal_action_mask(self) -> np.ndarray:
        if is_terminal(self._state):
            return np.zeros(self.action_space.n, dtype=np.int8)
        return (self._state.side(self._state.turn) > 0).astype(np.int8)

    def render(self):
        if self.render_mode != "ansi":
            raise NotImplementedError("Only 'ansi' render mode is supported.")
        return repr(self._state)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _build_observation(self) -> Dict[str, object]:
        return {
            "pits": self._state.pits.copy(),
            "stores": self._state.stores.copy(),
            "turn": int(self._state.turn),
        }

    def _build_info(self) -> Dict[str, object]:
        return {
            "legal_action_mask": self.legal_action_mask(),
            "ply_count": self._state.ply_count,
        }

    def _compute_reward(self, result: GameResult) -> float:
        if result == GameResult.SOUTH_WIN:
            return 1.0
        if result == GameResult.NORTH_WIN:
            return -1.0
        return 0.0
