"""Logging setup for the agent and the local tooling.

Console output goes through Rich; an optional plain-text file handler keeps a
full transcript of a game, which is useful when replaying a server session.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    *,
    console: Optional[Console] = None,
) -> Optional[Path]:
    """
    Configure the root logger with a Rich console handler and an optional file.

    Args:
        level: Logging level, either numeric or a name such as ``"DEBUG"``
        log_file: Where to write the transcript; parent directories are created
        console: Rich console to render to (stderr by default, so that
            ``--stdio`` play keeps stdout for the protocol)

    Returns:
        Path of the log file, or None when only console logging is set up
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(console_handler)

    if log_file is None:
        return None

    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(file_handler)
    return path
