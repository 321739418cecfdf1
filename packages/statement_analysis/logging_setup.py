"""Logging configuration for the ``statement_analysis`` package.

Two helpers are public:

- ``configure_logging(...)`` attaches one ``StreamHandler`` to the package root
  logger (``"statement_analysis"``). Only entrypoints (the CLI, a worker
  process) call it, once, at startup.
- ``get_logger(name)`` returns a named logger and makes sure the package root
  carries a ``NullHandler`` until an application configures output.

Library modules never attach handlers themselves; they call
``get_logger("statement_analysis.<module>")`` and emit short ``event:key=value``
messages that are easy to grep.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_analysis"
_LEVEL_ENV = "STATEMENT_ANALYSIS_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = getattr(logging, name, None)
        if isinstance(numeric, int):
            return numeric
    env_val = os.getenv(_LEVEL_ENV)
    if env_val and env_val != level:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Level as ``int`` or level name. ``None`` reads
        ``STATEMENT_ANALYSIS_LOG_LEVEL`` and defaults to ``INFO``.
    fmt:
        Optional format string for the handler.
    stream:
        Destination stream (``sys.stderr`` by default).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Keep records from reaching the root logger twice.
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)`` with a silent default for library use."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
