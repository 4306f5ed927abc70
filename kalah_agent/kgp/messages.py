"""KGP wire format: one dataclass per command, parsed from and rendered to text lines.

A line has the shape ``[id[@ref] ]command[ args]``. Every command kind is a
subclass of :class:`Message` registered in :data:`MESSAGE_TYPES`; parsing an
unregistered command is a :class:`ParseError`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Type

from kalah_agent.core import KalahState, make_state

LINE_PATTERN = re.compile(
    r"""
    ^\s*
    (?:(?P<id>\d+)(?:@(?P<ref>\d+))?\s+)?
    (?P<cmd>\w+)
    (?:\s+(?P<args>.*?))?
    \s*$
    """,
    re.VERBOSE | re.ASCII,
)
NUMBER_PATTERN = re.compile(r"[0-9]+")


class ParseError(ValueError):
    def __init__(self, message: str, *, line_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.line_id = line_id


@dataclass(frozen=True, kw_only=True)
class Message:
    id: Optional[int] = None
    ref: Optional[int] = None

    command: ClassVar[str] = ""

    @classmethod
    def from_args(cls, args: str, *, id: Optional[int], ref: Optional[int]) -> "Message":
        return cls(id=id, ref=ref)

    def args(self) -> str:
        return ""


MESSAGE_TYPES: Dict[str, Type[Message]] = {}


def register(cls: Type[Message]) -> Type[Message]:
    MESSAGE_TYPES[cls.command] = cls
    return cls


@register
@dataclass(frozen=True)
class Kgp(Message):
    major: int
    minor: int
    patch: int

    command: ClassVar[str] = "kgp"

    @classmethod
    def from_args(cls, args: str, *, id: Optional[int], ref: Optional[int]) -> "Kgp":
        parts = args.split()
        if len(parts) != 3 or not all(NUMBER_PATTERN.fullmatch(part) for part in parts):
            raise ParseError(f"kgp expects three version numbers, got {args!r}", line_id=id)
        major, minor, patch = (int(part) for part in parts)
        return cls(major, minor, patch, id=id, ref=ref)

    def args(self) -> str:
        return f"{self.major} {self.minor} {self.patch}"


@register
@dataclass(frozen=True, eq=False)
class State(Message):
    board: KalahState

    command: ClassVar[str] = "state"

    @classmethod
    def from_args(cls, args: str, *, id: Optional[int], ref: Optional[int]) -> "State":
        return cls(parse_board(args, line_id=id), id=id, ref=ref)

    def args(self) -> str:
        return self.board.to_kgp()


@register
@dataclass(frozen=True)
class Move(Message):
    house: int

    command: ClassVar[str] = "move"

    @classmethod
    def from_args(cls, args: str, *, id: Optional[int], ref: Optional[int]) -> "Move":
        token = args.strip()
        if not NUMBER_PATTERN.fullmatch(token) or int(token) < 1:
            raise ParseError(f"move expects a positive house number, got {args!r}", line_id=id)
        return cls(int(token), id=id, ref=ref)

    def args(self) -> str:
        return str(self.house)


@register
@dataclass(frozen=True)
class Stop(Message):
    command: ClassVar[str] = "stop"


@register
@dataclass(frozen=True)
class Ok(Message):
    command: ClassVar[str] = "ok"


@register
@dataclass(frozen=True)
class Goodbye(Message):
    command: ClassVar[str] = "goodbye"


@dataclass(frozen=True)
class _TextMessage(Message):
    text: str = ""

    @classmethod
    def from_args(cls, args: str, *, id: Optional[int], ref: Optional[int]) -> "_TextMessage":
        return cls(args, id=id, ref=ref)

    def args(self) -> str:
        return self.text


@register
@dataclass(frozen=True)
class Ping(_TextMessage):
    command: ClassVar[str] = "ping"


@register
@dataclass(frozen=True)
class Pong(_TextMessage):
    command: ClassVar[str] = "pong"


@register
@dataclass(frozen=True)
class Error(_TextMessage):
    command: ClassVar[str] = "error"


@register
@dataclass(frozen=True)
class Mode(_TextMessage):
    command: ClassVar[str] = "mode"


@register
@dataclass(frozen=True)
class Set(Message):
    option: str
    value: str

    command: ClassVar[str] = "set"

    @classmethod
    def from_args(cls, args: str, *, id: Optional[int], ref: Optional[int]) -> "Set":
        parts = args.split(None, 1)
        if len(parts) != 2:
            raise ParseError(f"set expects an option and a value, got {args!r}", line_id=id)
        option, value = parts
        if value.startswith('"') and value.endswith('"') and len(value) >= 2:
            try:
                value = json.loads(value)
            except json.JSONDecodeError as exc:
                raise ParseError(f"bad quoted value {value!r}", line_id=id) from exc
        return cls(option, value, id=id, ref=ref)

    def args(self) -> str:
        value = self.value
        if not value or any(ch.isspace() for ch in value) or value.startswith('"'):
            value = json.dumps(value)
        return f"{self.option} {value}"


def parse_board(text: str, *, line_id: Optional[int] = None) -> KalahState:
    """Parse ``<h, south_store, north_store, south houses..., north houses...>``."""
    body = "".join(text.split())
    if not (body.startswith("<") and body.endswith(">")):
        raise ParseError(f"board must be enclosed in angle brackets: {text!r}", line_id=line_id)
    fields = body[1:-1].split(",")
    if not all(NUMBER_PATTERN.fullmatch(field) for field in fields):
        raise ParseError(f"board fields must be non-negative integers: {text!r}", line_id=line_id)
    values = [int(field) for field in fields]
    h = values[0]
    if h < 1 or len(values) != 3 + 2 * h:
        raise ParseError(f"board with {h} houses per side needs {3 + 2 * h} fields", line_id=line_id)
    try:
        return make_state(values[3 : 3 + h], values[3 + h :], values[1], values[2])
    except (ValueError, OverflowError) as exc:
        raise ParseError(str(exc), line_id=line_id) from exc


def parse_line(line: str) -> Message:
    match = LINE_PATTERN.match(line)
    if match is None:
        raise ParseError(f"malformed line {line!r}")
    line_id = int(match.group("id")) if match.group("id") else None
    ref = int(match.group("ref")) if match.group("ref") else None
    command = match.group("cmd")
    cls = MESSAGE_TYPES.get(command)
    if cls is None:
        raise ParseError(f"unknown command {command!r}", line_id=line_id)
    return cls.from_args(match.group("args") or "", id=line_id, ref=ref)


def format_message(message: Message) -> str:
    prefix = ""
    if message.id is not None:
        prefix = str(message.id)
        if message.ref is not None:
            prefix += f"@{message.ref}"
        prefix += " "
    args = message.args()
    if args:
        return f"{prefix}{message.command} {args}"
    return f"{prefix}{message.command}"
