from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Type

from kalah_agent.core import (
    Geometry,
    IllegalMove,
    KalahState,
    Player,
    apply_move,
    house_from_pit,
    initial_state,
    is_terminal,
    pit_from_house,
)
from kalah_agent.search import AlphaBetaSearch, SearchResult

from .messages import (
    MESSAGE_TYPES,
    Error,
    Goodbye,
    Kgp,
    Message,
    Mode,
    Move,
    Ok,
    ParseError,
    Ping,
    Pong,
    Set,
    State,
    Stop,
    format_message,
    parse_line,
)
from .transport import Transport, TransportError

logger = logging.getLogger(__name__)

SUPPORTED_MAJOR = 1
TIME_BUDGET_OPTION = "time:move"


class ProtocolError(RuntimeError):
    pass


class SessionState(Enum):
    CONNECTING = "connecting"
    AWAITING_INSTRUCTION = "awaiting_instruction"
    THINKING = "thinking"
    APPLYING_OPPONENT_MOVE = "applying_opponent_move"
    FINISHED = "finished"


@dataclass
class SessionConfig:
    name: str = "kalah-agent"
    authors: Optional[str] = None
    token: Optional[str] = None
    mode: str = "freeplay"
    # seconds per move request, replaced by the server's "set time:move"
    time_budget: float = 1.0
    time_margin: float = 0.05
    send_intermediate_moves: bool = False
    geometry: Geometry = field(default_factory=Geometry)


class KGPSession:
    """Drive one KGP game: parse server lines, keep the board, answer move requests.

    The canonical board is owned here and only changes in response to server
    lines; the search receives copies.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[SessionConfig] = None,
        *,
        search: Optional[AlphaBetaSearch] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.transport = transport
        self.config = config or SessionConfig()
        self.search = search or AlphaBetaSearch()
        self.clock = clock

        self.state = SessionState.CONNECTING
        self.time_budget = self.config.time_budget
        self.pending_move_id: Optional[int] = None
        self.synchronised = True
        self.last_result: Optional[SearchResult] = None

        self._board = initial_state(self.config.geometry)
        self._next_id = 1
        self._request_started = 0.0
        # our last answer, applied once the server relays the reply to it
        self._unconfirmed_move: Optional[int] = None
        self._handlers: Dict[Type[Message], Callable] = {
            Kgp: self._on_kgp,
            State: self._on_state,
            Move: self._on_move,
            Stop: self._on_stop,
            Ok: self._on_ok,
            Ping: self._on_ping,
            Pong: self._on_pong,
            Set: self._on_set,
            Mode: self._on_mode,
            Goodbye: self._on_goodbye,
            Error: self._on_error,
        }
        missing = sorted(cls.__name__ for cls in MESSAGE_TYPES.values() if cls not in self._handlers)
        if missing:
            raise ProtocolError(f"No session handler for message kinds: {', '.join(missing)}")

    @property
    def board(self) -> KalahState:
        return self._board.copy()

    # ------------------------------------------------------------------
    def run(self) -> SessionState:
        try:
            while self.state != SessionState.FINISHED:
                line = self.transport.read_line()
                if line is None:
                    logger.info("server closed the stream")
                    self._transition(SessionState.FINISHED)
                    break
                if line.strip():
                    self.handle_line(line)
        except TransportError:
            logger.error("connection lost; ending the game")
            self._transition(SessionState.FINISHED)
            raise
        return self.state

    def handle_line(self, line: str) -> None:
        if self.state == SessionState.FINISHED:
            logger.warning("ignoring %r after the game finished", line)
            return
        logger.debug("< %s", line)
        try:
            message = parse_line(line)
        except ParseError as exc:
            logger.warning("could not parse %r: %s", line, exc)
            if exc.line_id is not None:
                self.send(Error(str(exc), ref=exc.line_id))
            return
        self.dispatch(message)

    def dispatch(self, message: Message) -> None:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise ProtocolError(f"No handler for {type(message).__name__}")
        handler(message)

    def send(self, message: Message) -> None:
        message = replace(message, id=self._next_id)
        # Client-side ids are odd.
        self._next_id += 2
        line = format_message(message)
        logger.debug("> %s", line)
        self.transport.write_line(line)

    # ------------------------------------------------------------------
    def _on_kgp(self, message: Kgp) -> None:
        if self.state != SessionState.CONNECTING:
            logger.warning("ignoring repeated kgp greeting")
            return
        if message.major != SUPPORTED_MAJOR:
            logger.error(
                "server speaks KGP %d.%d.%d; only major version %d is supported",
                message.major,
                message.minor,
                message.patch,
                SUPPORTED_MAJOR,
            )
            self.send(Error("protocol not supported", ref=message.id))
            self._transition(SessionState.FINISHED)
            return

        self.send(Set("info:name", self.config.name))
        if self.config.authors:
            self.send(Set("info:authors", self.config.authors))
        if self.config.token:
            self.send(Set("auth:token", self.config.token))
        self.send(Mode(self.config.mode))
        logger.info("connected as %s, mode %s", self.config.name, self.config.mode)
        self._transition(SessionState.AWAITING_INSTRUCTION)

    def _on_state(self, message: State) -> None:
        if message.id is None:
            logger.warning("state without an id cannot be answered; ignoring")
            return
        self._request_started = self.clock()
        self._transition(SessionState.APPLYING_OPPONENT_MOVE)
        self._board = message.board.copy()
        self._unconfirmed_move = None
        self.synchronised = True
        self.pending_move_id = message.id
        logger.info("board %s", self._board.to_kgp())

        if is_terminal(self._board):
            logger.info("position is finished; no move to play")
            self.pending_move_id = None
            self._transition(SessionState.AWAITING_INSTRUCTION)
            return
        self._think()

    def _think(self) -> None:
        self._transition(SessionState.THINKING)
        request_id = self.pending_move_id
        spent = self.clock() - self._request_started
        budget = max(0.0, self.time_budget - self.config.time_margin - spent)
        sent: List[int] = []

        def report(result: SearchResult) -> None:
            if self.config.send_intermediate_moves and (not sent or sent[-1] != result.move):
                self._send_move(result.move, request_id)
                sent.append(result.move)

        result = self.search.search(self._board.copy(), time_budget=budget, on_iteration=report)
        if not sent or sent[-1] != result.move:
            self._send_move(result.move, request_id)
        self._unconfirmed_move = result.move
        self.last_result = result
        logger.info(
            "played house %d (depth %d, score %.2f, %d nodes, %.3fs)",
            house_from_pit(result.move, self._board.geometry),
            result.depth,
            result.score,
            result.nodes,
            result.elapsed,
        )
        self._transition(SessionState.AWAITING_INSTRUCTION)

    def _send_move(self, pit: int, request_id: Optional[int]) -> None:
        self.send(Move(house_from_pit(pit, self._board.geometry), ref=request_id))

    def _on_move(self, message: Move) -> None:
        self._transition(SessionState.APPLYING_OPPONENT_MOVE)
        if not self.synchronised:
            logger.info("board out of sync; skipping move %d until the next state", message.house)
        else:
            try:
                if self._unconfirmed_move is not None:
                    apply_move(self._board, self._unconfirmed_move, in_place=True)
                    self._unconfirmed_move = None
                if self._board.turn != Player.NORTH:
                    raise IllegalMove("opponent is not to move")
                pit = pit_from_house(message.house, Player.NORTH, self._board.geometry)
                apply_move(self._board, pit, in_place=True)
            except IllegalMove as exc:
                logger.warning("rejected move %d (%s); waiting for the next state", message.house, exc)
                self.synchronised = False
        self._transition(SessionState.AWAITING_INSTRUCTION)

    def _on_stop(self, message: Stop) -> None:
        if message.ref is not None and message.ref != self.pending_move_id:
            logger.warning("stop for %s, but the pending request is %s", message.ref, self.pending_move_id)
        self.pending_move_id = None

    def _on_ping(self, message: Ping) -> None:
        self.send(Pong(message.text, ref=message.id))

    def _on_set(self, message: Set) -> None:
        if message.option != TIME_BUDGET_OPTION:
            logger.info("server set %s to %s", message.option, message.value)
            return
        try:
            budget = float(message.value)
        except ValueError:
            logger.warning("ignoring non-numeric time budget %r", message.value)
            return
        if not math.isfinite(budget) or budget <= 0:
            logger.warning("ignoring invalid time budget %r", message.value)
            return
        self.time_budget = budget
        logger.info("time budget per move is now %.3fs", budget)

    def _on_ok(self, message: Ok) -> None:
        logger.debug("ok for %s", message.ref)

    def _on_pong(self, message: Pong) -> None:
        logger.debug("pong %s", message.text)

    def _on_mode(self, message: Mode) -> None:
        logger.info("server mode %s", message.text)

    def _on_goodbye(self, message: Goodbye) -> None:
        logger.info("server said goodbye")
        self._transition(SessionState.FINISHED)

    def _on_error(self, message: Error) -> None:
        logger.error("server error: %s", message.text)
        self._transition(SessionState.FINISHED)

    def _transition(self, new_state: SessionState) -> None:
        if new_state != self.state:
            logger.debug("session %s -> %s", self.state.value, new_state.value)
        self.state = new_state
