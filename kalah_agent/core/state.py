from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

import numpy as np
from numpy.typing import NDArray

SeedArray = NDArray[np.int64]


class Player(IntEnum):
    SOUTH = 0
    NORTH = 1

    @property
    def other(self) -> "Player":
        return Player(1 - int(self))


class GameResult(Enum):
    ONGOING = "ongoing"
    SOUTH_WIN = "south_win"
    NORTH_WIN = "north_win"
    DRAW = "draw"


@dataclass(frozen=True)
class Geometry:
    pits_per_side: int = 6
    seeds_per_pit: int = 4

    def __post_init__(self) -> None:
        if self.pits_per_side < 1:
            raise ValueError("A board needs at least one pit per side.")
        if self.seeds_per_pit < 0:
            raise ValueError("Seeds per pit must be non-negative.")

    @property
    def total_seeds(self) -> int:
        return 2 * self.pits_per_side * self.seeds_per_pit

    @property
    def cycle_length(self) -> int:
        # own pits, own store, opponent pits
        return 2 * self.pits_per_side + 1


@dataclass(frozen=True)
class MoveRecord:
    pit: int
    player: Player
    seeds: int
    extra_turn: bool = False
    captured: int = 0


@dataclass
class KalahState:
    pits: SeedArray  # shape (2 * pits_per_side,), SOUTH's pits first
    stores: SeedArray  # shape (2,), indexed by Player
    turn: Player
    geometry: Geometry
    ply_count: int = 0
    last_move: Optional[MoveRecord] = None

    def copy(self) -> "KalahState":
        return KalahState(
            pits=self.pits.copy(),
            stores=self.stores.copy(),
            turn=self.turn,
            geometry=self.geometry,
            ply_count=self.ply_count,
            last_move=self.last_move,
        )

    def side_slice(self, player: Player) -> slice:
        h = self.geometry.pits_per_side
        start = int(player) * h
        return slice(start, start + h)

    def side(self, player: Player) -> SeedArray:
        return self.pits[self.side_slice(player)]

    def store(self, player: Player) -> int:
        return int(self.stores[int(player)])

    def total_seeds(self) -> int:
        return int(self.pits.sum()) + int(self.stores.sum())

    def to_kgp(self) -> str:
        """Render the board in KGP notation from SOUTH's point of view."""
        values = [self.geometry.pits_per_side, self.store(Player.SOUTH), self.store(Player.NORTH)]
        values.extend(int(seeds) for seeds in self.pits)
        return "<" + ", ".join(str(v) for v in values) + ">"

    def __repr__(self) -> str:
        north = " ".join(f"{int(s):>3}" for s in self.side(Player.NORTH)[::-1])
        south = " ".join(f"{int(s):>3}" for s in self.side(Player.SOUTH))
        return (
            f"KalahState(turn={self.turn.name}, ply={self.ply_count})\n"
            f"{self.store(Player.NORTH):>3} | {north}\n"
            f"      {south} | {self.store(Player.SOUTH):>3}"
        )


def make_state(
    south_pits,
    north_pits,
    south_store: int = 0,
    north_store: int = 0,
    *,
    turn: Player = Player.SOUTH,
    geometry: Optional[Geometry] = None,
) -> KalahState:
    """Build a state from explicit seed counts.

    When no geometry is given one is derived from the side length and the
    total seed count, so arbitrary mid-game positions can be described.
    """
    south = np.asarray(south_pits, dtype=np.int64)
    north = np.asarray(north_pits, dtype=np.int64)
    if south.shape != north.shape or south.ndim != 1:
        raise ValueError("Both sides must have the same number of pits.")
    if (south < 0).any() or (north < 0).any() or south_store < 0 or north_store < 0:
        raise ValueError("Seed counts must be non-negative.")
    h = int(south.shape[0])
    total = int(south.sum()) + int(north.sum()) + south_store + north_store
    if geometry is None:
        if total % (2 * h) != 0:
            raise ValueError(f"Seed total {total} does not fill {h} pits per side evenly.")
        geometry = Geometry(pits_per_side=h, seeds_per_pit=total // (2 * h))
    elif geometry.pits_per_side != h:
        raise ValueError("Pit count does not match the geometry.")
    elif geometry.total_seeds != total:
        raise ValueError(f"Expected {geometry.total_seeds} seeds on the board, found {total}.")
    return KalahState(
        pits=np.concatenate([south, north]),
        stores=np.array([south_store, north_store], dtype=np.int64),
        turn=Player(turn),
        geometry=geometry,
    )
