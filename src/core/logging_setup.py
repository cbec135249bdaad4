"""Centralized logging configuration for payout exports.

Public helpers:

- ``configure_logging(...)``: attach a Rich console handler (and optionally a
  file handler) to the package logger ``"payout_reports"`` and return it.
  Called once by the CLI at command start.
- ``shutdown_logging()``: flush, close and detach the handlers installed by
  ``configure_logging``. Called by the CLI on exit.
- ``get_logger(name)``: acquire a child logger, attaching a ``NullHandler`` to
  the package logger when nothing has been configured yet.

Library modules never attach handlers. They accept a ``logging.Logger`` from
their caller and fall back to ``get_logger(__name__)``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

PKG_LOGGER_NAME = "payout_reports"
FILE_FORMAT = "%(asctime)s [%(levelname)s]: %(message)s"

_handlers: list[logging.Handler] = []


def _parse_level(level: int | str | None, *, verbose: bool) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    if verbose:
        return logging.DEBUG
    env_val = os.getenv("PAYOUT_REPORTS_LOG_LEVEL")
    if env_val:
        return _parse_level(env_val, verbose=False)
    return logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    level: int | str | None = None,
    log_file: Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the package logger once and return it.

    Parameters
    ----------
    verbose:
        Lower the console threshold to ``DEBUG``.
    level:
        Explicit level (int or name). Overrides ``verbose`` and the
        ``PAYOUT_REPORTS_LOG_LEVEL`` environment variable.
    log_file:
        Optional persistent log; always records ``INFO`` and above. Parent
        directories are created.
    console:
        Rich console for the console channel (defaults to stderr).
    """

    logger = logging.getLogger(PKG_LOGGER_NAME)
    if _handlers:
        return logger

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    console_level = _parse_level(level, verbose=verbose)
    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(console_level)
    logger.addHandler(console_handler)
    _handlers.append(console_handler)

    effective = console_level
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(min(console_level, logging.INFO))
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)
        _handlers.append(file_handler)
        effective = min(effective, logging.INFO)

    logger.setLevel(effective)
    logger.propagate = False
    return logger


def shutdown_logging() -> None:
    """Close and detach every handler added by ``configure_logging``."""

    logger = logging.getLogger(PKG_LOGGER_NAME)
    while _handlers:
        handler = _handlers.pop()
        handler.flush()
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""

    pkg_logger = logging.getLogger(PKG_LOGGER_NAME)
    if not _handlers and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    if name == PKG_LOGGER_NAME or name.startswith(PKG_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PKG_LOGGER_NAME}.{name}")
