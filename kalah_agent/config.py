"""Agent configuration: dataclasses filled from an optional YAML file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from kalah_agent.core import Geometry
from kalah_agent.kgp.session import SessionConfig
from kalah_agent.search import SearchConfig, ValuationWeights

logger = logging.getLogger(__name__)

DEFAULT_PORT = 2671
DEFAULT_TOKEN_PATH = "./TOKEN"
TOKEN_PATH_ENV = "KALAH_TOKEN_PATH"


@dataclass
class AgentConfig:
    host: str = "localhost"
    port: int = DEFAULT_PORT
    connect_timeout: Optional[float] = 10.0
    log_level: str = "INFO"
    log_file: Optional[str] = None
    token_file: Optional[str] = None
    session: SessionConfig = field(default_factory=SessionConfig)
    search: SearchConfig = field(default_factory=SearchConfig)


def _build(cls, values: Dict[str, Any], section: str):
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown keys in {section}: {', '.join(unknown)}")
    return cls(**values)


def _session_from_dict(values: Dict[str, Any]) -> SessionConfig:
    values = dict(values)
    geometry = Geometry(
        pits_per_side=values.pop("pits_per_side", Geometry.pits_per_side),
        seeds_per_pit=values.pop("seeds_per_pit", Geometry.seeds_per_pit),
    )
    if "geometry" in values:
        raise ValueError("Use pits_per_side/seeds_per_pit instead of session.geometry")
    return _build(SessionConfig, {**values, "geometry": geometry}, "session")


def _search_from_dict(values: Dict[str, Any]) -> SearchConfig:
    values = dict(values)
    if "weights" in values:
        values["weights"] = _build(ValuationWeights, values["weights"] or {}, "search.weights")
    return _build(SearchConfig, values, "search")


def config_from_dict(raw: Dict[str, Any]) -> AgentConfig:
    raw = dict(raw)
    session = _session_from_dict(raw.pop("session", None) or {})
    search = _search_from_dict(raw.pop("search", None) or {})
    return _build(AgentConfig, {**raw, "session": session, "search": search}, "agent config")


def load_config(path: Optional[Union[str, Path]] = None) -> AgentConfig:
    """Read an :class:`AgentConfig` from YAML; a missing file yields the defaults."""
    if path is None:
        return AgentConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        logger.info("config %s not found; using defaults", cfg_path)
        return AgentConfig()
    raw = yaml.safe_load(cfg_path.read_text()) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{cfg_path} must contain a mapping at the top level")
    return config_from_dict(raw)


def load_token(path: Optional[Union[str, Path]] = None) -> str:
    """Read the server authentication token.

    Without an explicit path, ``$KALAH_TOKEN_PATH`` or ``./TOKEN`` is used.
    A missing file is not fatal: the agent then plays unauthenticated.
    """
    if path is None:
        path = os.environ.get(TOKEN_PATH_ENV, DEFAULT_TOKEN_PATH)
    token_path = Path(path)
    try:
        return token_path.read_text().strip()
    except FileNotFoundError:
        logger.warning("no token file at %s; connecting without authentication", token_path)
        return ""
