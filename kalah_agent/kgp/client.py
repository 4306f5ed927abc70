"""Process entry point: connect to a KGP server and play until it says goodbye."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from kalah_agent.config import AgentConfig, load_config, load_token
from kalah_agent.search import AlphaBetaSearch
from kalah_agent.utils import setup_logging

from .session import KGPSession, SessionState
from .transport import SocketTransport, StreamTransport, Transport, TransportError

logger = logging.getLogger(__name__)


def play(config: AgentConfig, *, transport: Optional[Transport] = None) -> SessionState:
    """Run one session; opens (and closes) a TCP connection unless ``transport`` is given."""
    owned = transport is None
    if transport is None:
        transport = SocketTransport.connect(config.host, config.port, timeout=config.connect_timeout)
    session = KGPSession(transport, config.session, search=AlphaBetaSearch(config.search))
    try:
        return session.run()
    finally:
        if owned:
            transport.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play Kalah over KGP.")
    parser.add_argument("--config", type=str, default="configs/agent.yaml")
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--token-file")
    parser.add_argument("--name")
    parser.add_argument("--time-budget", type=float, help="Seconds per move until the server sets one.")
    parser.add_argument("--log-level")
    parser.add_argument("--log-file")
    parser.add_argument("--stdio", action="store_true", help="Speak KGP over stdin/stdout.")
    return parser


def resolve_config(args: argparse.Namespace) -> AgentConfig:
    config = load_config(args.config)
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_file is not None:
        config.log_file = args.log_file
    if args.token_file is not None:
        config.token_file = args.token_file

    session = config.session
    if args.name is not None:
        session = replace(session, name=args.name)
    if args.time_budget is not None:
        session = replace(session, time_budget=args.time_budget)
    if session.token is None:
        session = replace(session, token=load_token(config.token_file) or None)
    config.session = session
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = resolve_config(args)
    setup_logging(config.log_level, config.log_file)

    transport: Optional[Transport] = None
    if args.stdio:
        transport = StreamTransport(sys.stdin, sys.stdout, newline="\n")
    try:
        final_state = play(config, transport=transport)
    except TransportError as exc:
        logger.error("%s", exc)
        return 1
    logger.info("session ended in state %s", final_state.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
