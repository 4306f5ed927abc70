from __future__ import annotations

from typing import List, Optional

import numpy as np

from .state import GameResult, Geometry, KalahState, MoveRecord, Player


class IllegalMove(ValueError):
    pass


class NoLegalMoves(ValueError):
    pass


def initial_state(geometry: Optional[Geometry] = None, turn: Player = Player.SOUTH) -> KalahState:
    geometry = geometry or Geometry()
    pits = np.full(2 * geometry.pits_per_side, geometry.seeds_per_pit, dtype=np.int64)
    stores = np.zeros(2, dtype=np.int64)
    return KalahState(pits=pits, stores=stores, turn=turn, geometry=geometry)


def is_terminal(state: KalahState) -> bool:
    return not state.side(Player.SOUTH).any() or not state.side(Player.NORTH).any()


def legal_moves(state: KalahState) -> List[int]:
    if is_terminal(state):
        raise NoLegalMoves("The game is over; no player can move.")
    offset = state.side_slice(state.turn).start
    return [offset + int(i) for i in np.flatnonzero(state.side(state.turn))]


def grants_extra_turn(state: KalahState, pit: int) -> bool:
    """True when sowing ``pit`` for the player to move ends in their store."""
    h = state.geometry.pits_per_side
    local = pit - state.side_slice(state.turn).start
    return (local + int(state.pits[pit])) % state.geometry.cycle_length == h


def apply_move(state: KalahState, pit: int, *, in_place: bool = False) -> KalahState:
    h = state.geometry.pits_per_side
    if not 0 <= pit < 2 * h:
        raise IllegalMove(f"Pit {pit} is out of range.")

    mover = state.turn
    own = state.side_slice(mover)
    if not own.start <= pit < own.stop:
        raise IllegalMove(f"Pit {pit} belongs to {mover.other.name}.")

    seeds = int(state.pits[pit])
    if seeds == 0:
        raise IllegalMove(f"Pit {pit} is empty.")

    target = state if in_place else state.copy()
    opponent = target.side_slice(mover.other)
    local = pit - own.start
    cycle = state.geometry.cycle_length

    # Positions on the mover's ring: own pits, own store, opponent pits.
    # The opponent's store is not on the ring, so it never receives seeds.
    target.pits[pit] = 0
    laps, remainder = divmod(seeds, cycle)
    ring = np.full(cycle, laps, dtype=np.int64)
    if remainder:
        ring[(local + 1 + np.arange(remainder)) % cycle] += 1
    target.pits[own] += ring[:h]
    target.stores[int(mover)] += ring[h]
    target.pits[opponent] += ring[h + 1 :]

    last = (local + seeds) % cycle
    extra_turn = last == h
    captured = 0
    if last < h:
        landing = own.start + last
        facing = opponent.start + (h - 1 - last)
        # A count of one means the pit was empty before the last seed.
        if target.pits[landing] == 1 and target.pits[facing] > 0:
            captured = int(target.pits[facing]) + 1
            target.stores[int(mover)] += captured
            target.pits[landing] = 0
            target.pits[facing] = 0

    if not extra_turn:
        target.turn = mover.other
    target.ply_count += 1
    target.last_move = MoveRecord(
        pit=pit,
        player=mover,
        seeds=seeds,
        extra_turn=extra_turn,
        captured=captured,
    )
    return target


def finalize(state: KalahState, *, in_place: bool = False) -> KalahState:
    if not is_terminal(state):
        raise ValueError("Only a finished game can be finalized.")
    target = state if in_place else state.copy()
    for player in Player:
        target.stores[int(player)] += target.side(player).sum()
    target.pits[:] = 0
    return target


def winner(state: KalahState) -> Optional[Player]:
    """Return the player with more banked seeds, or None on a draw."""
    final = finalize(state) if state.pits.any() else state
    south, north = final.store(Player.SOUTH), final.store(Player.NORTH)
    if south == north:
        return None
    return Player.SOUTH if south > north else Player.NORTH


def outcome(state: KalahState) -> GameResult:
    if not is_terminal(state):
        return GameResult.ONGOING
    best = winner(state)
    if best is None:
        return GameResult.DRAW
    return GameResult.SOUTH_WIN if best == Player.SOUTH else GameResult.NORTH_WIN


def opposite_pit(pit: int, geometry: Geometry) -> int:
    return 2 * geometry.pits_per_side - 1 - pit


def pit_from_house(house: int, player: Player, geometry: Geometry) -> int:
    """Translate a 1-based KGP house number on ``player``'s side to a pit index."""
    if not 1 <= house <= geometry.pits_per_side:
        raise IllegalMove(f"House {house} is out of range.")
    return int(player) * geometry.pits_per_side + house - 1


def house_from_pit(pit: int, geometry: Geometry) -> int:
    if not 0 <= pit < 2 * geometry.pits_per_side:
        raise IllegalMove(f"Pit {pit} is out of range.")
    return pit % geometry.pits_per_side + 1
