"""Process configuration for ``money_tracker``.

A single :class:`Settings` instance is built at process start (the CLI calls
:func:`load_settings` after loading ``.env``) and passed by reference to the
components that need it. Library code never reads the environment on its own.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///money.db"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved runtime settings.

    Attributes
    ----------
    database_url:
        SQLAlchemy URL of the ledger database.
    ocr_timeout_sec:
        Upper bound for a single receipt OCR call. Real receipts have needed
        multi-minute budgets, hence the generous default.
    pdf_timeout_sec:
        Upper bound for extracting text from a statement document.
    ocr_lang:
        Tesseract language code(s), e.g. ``"eng"`` or ``"eng+deu"``.
    openai_model:
        Model name for the one-shot assistant call.
    log_level:
        Optional level name for :func:`money_tracker.logging_setup.configure_logging`.
    """

    database_url: str = DEFAULT_DATABASE_URL
    ocr_timeout_sec: float = 300.0
    pdf_timeout_sec: float = 120.0
    ocr_lang: str = "eng"
    openai_model: str = "gpt-5"
    log_level: str | None = None


def _positive_float(raw: str | None, default: float, *, name: str) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``env`` (defaults to ``os.environ``)."""

    env = os.environ if env is None else env
    return Settings(
        database_url=(env.get("DATABASE_URL") or "").strip() or DEFAULT_DATABASE_URL,
        ocr_timeout_sec=_positive_float(
            env.get("MONEY_TRACKER_OCR_TIMEOUT_SEC"), 300.0, name="MONEY_TRACKER_OCR_TIMEOUT_SEC"
        ),
        pdf_timeout_sec=_positive_float(
            env.get("MONEY_TRACKER_PDF_TIMEOUT_SEC"), 120.0, name="MONEY_TRACKER_PDF_TIMEOUT_SEC"
        ),
        ocr_lang=(env.get("MONEY_TRACKER_OCR_LANG") or "").strip() or "eng",
        openai_model=(env.get("MONEY_TRACKER_OPENAI_MODEL") or "").strip() or "gpt-5",
        log_level=(env.get("MONEY_TRACKER_LOG_LEVEL") or "").strip() or None,
    )


__all__ = ["DEFAULT_DATABASE_URL", "Settings", "load_settings"]
