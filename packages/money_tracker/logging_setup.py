"""Centralized logging configuration for the ``money_tracker`` package.

- ``configure_logging(...)``: attach a single ``StreamHandler`` to the package
  root logger (``"money_tracker"``). Called once by the CLI at startup.
- ``get_logger(name)``: acquire a logger by name, making sure the package root
  logger has at least a ``NullHandler`` when nothing was configured.

Library modules never attach their own handlers; they call
``get_logger("money_tracker.<module>")`` and rely on the host application.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

_PKG_LOGGER_NAME = "money_tracker"


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def _is_configured(logger: logging.Logger) -> bool:
    return any(getattr(h, "_money_tracker_handler", False) for h in logger.handlers)


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Logging level as ``int`` or level name (e.g., ``"INFO"``). Defaults to
        ``logging.INFO`` when ``None`` or unrecognized. The CLI passes
        ``Settings.log_level``.
    fmt:
        Optional format string. Defaults to
        ``"%(asctime)s %(name)s %(levelname)s %(message)s"``.
    stream:
        Output stream for the handler (defaults to ``sys.stderr``).
    """

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _is_configured(logger):
        return

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler._money_tracker_handler = True  # type: ignore[attr-defined]
    handler.setLevel(resolved)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    logger.setLevel(resolved)
    logger.addHandler(handler)
    # Avoid double emission via the root logger.
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, with a silent default until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
