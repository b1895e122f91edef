"""Logging for the minion pipeline and CLI.

Module loggers write to stderr so stdout stays clean for the CLI's JSON
results and fetched text. The level starts at MINION_LOG_LEVEL (WARNING
when unset) and the CLI's --verbose / --debug flags lower it for every
minion logger at once through `set_log_level`.

At DEBUG the worker thread name is added to each line, since large-group
coherence checks and URL fetches log from several threads at once.
"""

from __future__ import annotations

import logging
import os
import sys

_loggers: dict[str, logging.Logger] = {}
_level_override: int | None = None


def _env_level() -> int:
    level_name = os.environ.get("MINION_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.WARNING


def _formatter(name: str, level: int) -> logging.Formatter:
    if level <= logging.DEBUG:
        return logging.Formatter(f"[minion:{name}] %(levelname)s (%(threadName)s): %(message)s")
    return logging.Formatter(f"[minion:{name}] %(levelname)s: %(message)s")


def _apply_level(name: str, logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setFormatter(_formatter(name, level))


def get_logger(name: str) -> logging.Logger:
    """Get the stderr logger for a minion module, e.g. "skills.coherence".

    Lines look like `[minion:skills.coherence] WARNING: message`.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(f"minion.{name}")
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler(sys.stderr))
        _apply_level(name, logger, _level_override if _level_override is not None else _env_level())

    _loggers[name] = logger
    return logger


def set_log_level(level: int | None) -> None:
    """Set the level of every minion logger, including ones created later.

    None goes back to MINION_LOG_LEVEL.
    """
    global _level_override
    _level_override = level
    effective = level if level is not None else _env_level()
    for name, logger in _loggers.items():
        _apply_level(name, logger, effective)
