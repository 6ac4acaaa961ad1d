"""One-shot ledger assistant backed by the OpenAI Responses API.

The assistant is a single request: the user's question plus a compact JSON
view of the ledger summary and recent transactions go in, one answer string
comes out. No conversation state is kept between calls.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from openai import OpenAI

from .logging_setup import get_logger
from .models import LedgerRow, SummaryReport

_logger = get_logger("money_tracker.assistant")

_MAX_CONTEXT_ROWS = 50

_INSTRUCTIONS = (
    "You are a personal finance assistant. Answer the user's question using only "
    "the ledger data provided between BEGIN_LEDGER_JSON and END_LEDGER_JSON. "
    "Amounts are in the user's currency with two decimals. If the data does not "
    "contain the answer, say so briefly."
)


def build_context(rows: Sequence[LedgerRow], report: SummaryReport) -> str:
    """Serialize the summary and the most recent rows for the prompt."""

    recent = sorted(rows, key=lambda r: (r.date, r.id), reverse=True)[:_MAX_CONTEXT_ROWS]
    payload: dict[str, Any] = {
        "summary": report.to_dict(),
        "recent_transactions": [r.to_dict() for r in recent],
    }
    return json.dumps(payload, default=str, ensure_ascii=False, sort_keys=True)


def _response_text(resp: Any) -> str:
    text = getattr(resp, "output_text", None)
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")
    return text.strip()


def answer_question(
    question: str,
    *,
    rows: Sequence[LedgerRow],
    report: SummaryReport,
    model: str,
    client: Any | None = None,
) -> str:
    """Ask the model ``question`` about the given ledger view.

    ``client`` defaults to a fresh ``OpenAI()`` (reads ``OPENAI_API_KEY``).
    API failures propagate to the caller unchanged; there is no retry.
    """

    q = (question or "").strip()
    if not q:
        raise ValueError("question must not be empty")

    user_input = (
        f"Question: {q}\n\nBEGIN_LEDGER_JSON\n{build_context(rows, report)}\nEND_LEDGER_JSON"
    )
    client = client if client is not None else OpenAI()
    _logger.info("assistant request: %d row(s) of context, model=%s", len(rows), model)
    resp = client.responses.create(model=model, instructions=_INSTRUCTIONS, input=user_input)
    return _response_text(resp)


__all__ = ["build_context", "answer_question"]
