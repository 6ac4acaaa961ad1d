"""Pytest configuration for test isolation.

Settings are read from the environment and logging is configured once per
process by the CLI. Both would leak between tests, so every test starts with
the ``money_tracker`` environment variables cleared and the package logger
reset to its unconfigured state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tests.helpers.db import bootstrap_sqlite_db

_ENV_VARS = (
    "DATABASE_URL",
    "MONEY_TRACKER_LOG_LEVEL",
    "MONEY_TRACKER_OCR_TIMEOUT_SEC",
    "MONEY_TRACKER_PDF_TIMEOUT_SEC",
    "MONEY_TRACKER_OCR_LANG",
    "MONEY_TRACKER_OPENAI_MODEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("money_tracker")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture()
def sqlite_db(tmp_path: Path) -> Iterator[tuple[str, Engine, sessionmaker[Session]]]:
    """A fresh file-backed SQLite ledger per test: ``(url, engine, session_factory)``."""

    url, engine, factory = bootstrap_sqlite_db(tmp_path / "ledger.db")
    yield url, engine, factory
    engine.dispose()


@pytest.fixture()
def session_factory(sqlite_db) -> sessionmaker[Session]:
    return sqlite_db[2]
