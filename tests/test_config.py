from __future__ import annotations

import pytest

from money_tracker.config import DEFAULT_DATABASE_URL, Settings, load_settings


def test_defaults_from_empty_env() -> None:
    assert load_settings({}) == Settings()
    assert Settings().database_url == DEFAULT_DATABASE_URL
    assert Settings().ocr_timeout_sec == 300.0


def test_overrides() -> None:
    s = load_settings(
        {
            "DATABASE_URL": "sqlite+pysqlite:///other.db",
            "MONEY_TRACKER_OCR_TIMEOUT_SEC": "45",
            "MONEY_TRACKER_PDF_TIMEOUT_SEC": "2.5",
            "MONEY_TRACKER_OCR_LANG": "deu",
            "MONEY_TRACKER_OPENAI_MODEL": "gpt-4.1-mini",
            "MONEY_TRACKER_LOG_LEVEL": "debug",
        }
    )

    assert s.database_url == "sqlite+pysqlite:///other.db"
    assert (s.ocr_timeout_sec, s.pdf_timeout_sec) == (45.0, 2.5)
    assert (s.ocr_lang, s.openai_model, s.log_level) == ("deu", "gpt-4.1-mini", "debug")


def test_blank_values_fall_back_to_defaults() -> None:
    s = load_settings({"DATABASE_URL": "  ", "MONEY_TRACKER_OCR_TIMEOUT_SEC": ""})
    assert s.database_url == DEFAULT_DATABASE_URL
    assert s.ocr_timeout_sec == 300.0


@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_invalid_timeouts_are_rejected(raw: str) -> None:
    with pytest.raises(ValueError, match="MONEY_TRACKER_PDF_TIMEOUT_SEC"):
        load_settings({"MONEY_TRACKER_PDF_TIMEOUT_SEC": raw})


def test_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("MONEY_TRACKER_OCR_LANG", "fra")
    assert load_settings().ocr_lang == "fra"
