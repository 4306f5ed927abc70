import pytest

from kalah_agent.core import Player, initial_state
from kalah_agent.kgp.messages import (
    MESSAGE_TYPES,
    Error,
    Kgp,
    Move,
    ParseError,
    Ping,
    Set,
    State,
    Stop,
    format_message,
    parse_board,
    parse_line,
)

OPENING = "<6, 0, 0, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4, 4>"


def test_registered_commands() -> None:
    assert set(MESSAGE_TYPES) == {
        "kgp",
        "state",
        "move",
        "stop",
        "ok",
        "ping",
        "pong",
        "set",
        "mode",
        "goodbye",
        "error",
    }


def test_parse_greeting_without_id() -> None:
    message = parse_line("kgp 1 0 0")
    assert message == Kgp(1, 0, 0)
    assert message.id is None and message.ref is None


def test_parse_state_with_id() -> None:
    message = parse_line(f"4 state {OPENING}")
    assert isinstance(message, State)
    assert message.id == 4
    assert message.board.pits.tolist() == initial_state().pits.tolist()
    assert message.board.turn == Player.SOUTH


def test_parse_reference() -> None:
    message = parse_line("6@3 stop")
    assert isinstance(message, Stop)
    assert (message.id, message.ref) == (6, 3)


def test_parse_board_tolerates_spacing() -> None:
    board = parse_board("<2,1,0, 2,1 , 0,4>")
    assert board.stores.tolist() == [1, 0]
    assert board.side(Player.NORTH).tolist() == [0, 4]


@pytest.mark.parametrize(
    "line",
    [
        "7 state <2, 0, 0, 1, 1, 1>",
        "7 state <2, 0, 0, 1, 0, 0, 0>",
        "7 state 2, 0, 0, 1, 1, 1, 1",
        "7 state <2, 0, 0, 1, -1, 1, 1>",
        "7 move 0",
        "7 move two",
        "7 move ²",
        "7 kgp 1 0",
        "7 kgp 1 ² 0",
        "7 state <1, 0, 0, ², 0>",
        "7 state <1, 0, 0, 100000000000000000000, 100000000000000000000>",
        "7 teleport 3",
    ],
)
def test_parse_errors_carry_line_id(line: str) -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_line(line)
    assert excinfo.value.line_id == 7


def test_parse_board_accepts_large_seed_counts() -> None:
    board = parse_board("<1, 0, 0, 40000, 40000>")
    assert board.pits.tolist() == [40000, 40000]
    assert board.geometry.seeds_per_pit == 40000


def test_superscript_digits_are_not_ids() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_line("² ping")
    assert excinfo.value.line_id is None


def test_unreadable_line_has_no_id() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_line("%%%")
    assert excinfo.value.line_id is None


def test_set_values_with_spaces_are_quoted() -> None:
    message = Set("info:name", "my agent", id=1)
    line = format_message(message)
    assert line == '1 set info:name "my agent"'
    assert parse_line(line) == message
    assert parse_line("3 set time:move 2.5").value == "2.5"


def test_format_messages() -> None:
    assert format_message(Move(3, id=5, ref=4)) == "5@4 move 3"
    assert format_message(Ping("hello", id=1)) == "1 ping hello"
    assert format_message(Error("protocol not supported", id=1, ref=2)) == "1@2 error protocol not supported"
    assert format_message(Stop()) == "stop"


def test_state_message_renders_board() -> None:
    assert format_message(State(initial_state(), id=2)) == f"2 state {OPENING}"
