"""
Logging for the preview simulator.

Engine modules log through ``logging.getLogger(__name__)``, which puts them
under the ``qbsim`` namespace; only entry points (the CLI, a host
application) call :func:`setup_logging`.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "qbsim"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# -v / -vv on the command line
_VERBOSITY = {0: logging.WARNING, 1: logging.INFO}


def level_for_verbosity(verbose: int) -> int:
    """Map a ``-v`` count to a level: none WARNING, one INFO, more DEBUG."""
    return _VERBOSITY.get(max(verbose, 0), logging.DEBUG)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Attach handlers to the ``qbsim`` logger, replacing any from an earlier call.

    Args:
        level: Level number or name ("DEBUG", "info", ...).
        log_file: Optional file that receives the same records.
        format_string: Optional record format; defaults to ``DEFAULT_FORMAT``.

    Returns:
        The ``qbsim`` logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"unknown log level {level!r}")

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    # stderr, so stdout stays clean for JSON / QASM output
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        logger.addHandler(h)
    return logger


def get_logger(name: str) -> logging.Logger:
    """``get_logger("cli")`` -> the ``qbsim.cli`` logger."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
