from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import pytest

from money_tracker import assistant as assistant_mod
from money_tracker.aggregation import summarize_rows
from money_tracker.api import ask_ledger, import_statement_text
from money_tracker.assistant import answer_question, build_context
from money_tracker.models import CategoryRef, LedgerRow
from tests.helpers.openai_stub import OpenAIStub

FOOD = CategoryRef(1, "Food", "expense")


def _rows(n: int) -> list[LedgerRow]:
    return [
        LedgerRow(i, 1, f"tx {i}", Decimal("1.00"), date(2024, 1, 1 + (i % 28)), FOOD)
        for i in range(n)
    ]


def test_context_carries_summary_and_recent_rows() -> None:
    rows = _rows(60)

    payload = json.loads(build_context(rows, summarize_rows(rows)))

    assert payload["summary"]["typeTotals"] == [{"type": "expense", "total": "60.00"}]
    assert len(payload["recent_transactions"]) == 50
    assert payload["recent_transactions"][0]["date"] == "2024-01-28"


def test_answer_question_sends_one_request() -> None:
    rows = _rows(2)
    calls: list[dict] = []
    client = OpenAIStub(lambda _input: "  You spent 2.00 on Food.  ", calls)

    out = answer_question(
        "How much on food?", rows=rows, report=summarize_rows(rows), model="m1", client=client
    )

    assert out == "You spent 2.00 on Food."
    assert len(calls) == 1
    assert calls[0]["model"] == "m1"
    assert calls[0]["input"].startswith("Question: How much on food?")
    assert "BEGIN_LEDGER_JSON" in calls[0]["input"]


def test_blank_question_is_rejected_before_any_call() -> None:
    client = OpenAIStub(lambda _input: "unused")

    with pytest.raises(ValueError):
        answer_question("   ", rows=[], report=summarize_rows([]), model="m", client=client)
    assert client.calls == []


def test_empty_model_output_is_an_error() -> None:
    client = OpenAIStub(lambda _input: "")

    with pytest.raises(ValueError, match="Responses API"):
        answer_question("hi?", rows=[], report=summarize_rows([]), model="m", client=client)


def test_default_client_is_openai(monkeypatch) -> None:
    stub = OpenAIStub(lambda _input: "ok")
    monkeypatch.setattr(assistant_mod, "OpenAI", lambda: stub)

    assert answer_question("q", rows=[], report=summarize_rows([]), model="m") == "ok"
    assert len(stub.calls) == 1


def test_ask_ledger_reads_the_users_rows(session_factory) -> None:
    import_statement_text("03/01/2024 Coffee 4.75", 1, session_factory=session_factory)
    import_statement_text("03/01/2024 Secret 99.00", 2, session_factory=session_factory)
    client = OpenAIStub(lambda _input: "answer")

    assert ask_ledger("q", 1, session_factory=session_factory, model="m", client=client) == "answer"

    sent = client.calls[0]["input"]
    assert "Coffee" in sent
    assert "Secret" not in sent
