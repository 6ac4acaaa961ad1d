"""CLI for the ``money_tracker`` package.

A Typer console interface over :mod:`money_tracker.api` and the ledger store.
Environment variables are loaded from a local ``.env`` (``python-dotenv``)
before :func:`money_tracker.config.load_settings` builds the one
:class:`~money_tracker.config.Settings` object for the process. The engine,
session factory and text source are built from it once and handed to each
command through the Typer context.

Output is JSON on stdout; failures print ``Error: ...`` to stderr and exit 1.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from db.client import create_db_engine, init_schema, make_session_factory, session_scope
from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import Settings, load_settings
from .errors import CategoryConflictError, MoneyTrackerError, NotFoundError
from .logging_setup import configure_logging, get_logger
from .models import DateRange
from .normalizers import to_date
from .text_source import OcrTextSource, TextSource

_logger = get_logger("money_tracker.cli")


@dataclass(slots=True)
class AppContext:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    text_source: TextSource


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _emit(payload: Any) -> None:
    typer.echo(json.dumps(payload, default=str, indent=2, ensure_ascii=False))


def _app(ctx: typer.Context) -> AppContext:
    obj = ctx.obj
    if not isinstance(obj, AppContext):  # pragma: no cover - callback always sets it
        _fail("application context is not initialized")
    return obj


def _date_range(start: str | None, end: str | None) -> DateRange | None:
    if start is None and end is None:
        return None
    s = to_date(start) if start is not None else None
    e = to_date(end) if end is not None else None
    if start is not None and s is None:
        _fail(f"invalid --start date {start!r}; expected YYYY-MM-DD")
    if end is not None and e is None:
        _fail(f"invalid --end date {end!r}; expected YYYY-MM-DD")
    return DateRange(start=s, end=e)


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        _fail(f"File not found: {path}")
    except PermissionError:
        _fail(f"Permission denied: {path}")


# Module-level option objects keep call expressions out of parameter defaults.
USER_ID_OPTION = typer.Option(..., "--user-id", help="Ledger owner (user identifier).")


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Track income and expenses; import receipts (OCR) and bank statements (PDF) "
        "into a per-user ledger and report on it."
    ),
)


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var, then ./money.db)."
    ),
    log_level: str | None = typer.Option(
        None, help="Override MONEY_TRACKER_LOG_LEVEL (e.g., DEBUG, INFO)."
    ),
) -> None:
    """Load ``.env``, configure logging, and build the shared application context."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        settings = load_settings()
    except ValueError as e:
        _fail(f"invalid configuration: {e}")
    configure_logging(log_level or settings.log_level)

    url = database_url or settings.database_url
    engine = create_db_engine(url)
    ctx.obj = AppContext(
        settings=settings,
        engine=engine,
        session_factory=make_session_factory(engine),
        text_source=OcrTextSource(settings),
    )
    ctx.call_on_close(engine.dispose)


@app.command("init-db")
def init_db_cmd(ctx: typer.Context) -> None:
    """Create the ledger tables if they do not exist."""

    app_ctx = _app(ctx)
    try:
        init_schema(app_ctx.engine)
    except SQLAlchemyError as e:
        _fail(f"schema creation failed: {e}")
    _emit({"ok": True})


# ---- Categories --------------------------------------------------------------


@app.command("add-category")
def add_category_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    name: str = typer.Option(..., help="Category name (unique per user)."),
    type: str = typer.Option(..., "--type", help="Either 'income' or 'expense'."),
) -> None:
    from .categories import create_category

    app_ctx = _app(ctx)
    try:
        with session_scope(app_ctx.session_factory) as session:
            ref = create_category(session, user_id=user_id, name=name, type=type)
    except ValueError as e:  # includes CategoryConflictError
        _fail(str(e))
    except SQLAlchemyError as e:
        _fail(f"creating category failed: {e}")
    _emit({"id": ref.id, "name": ref.name, "type": ref.type})


@app.command("list-categories")
def list_categories_cmd(ctx: typer.Context, user_id: Annotated[int, USER_ID_OPTION]) -> None:
    from .categories import list_categories

    app_ctx = _app(ctx)
    try:
        with session_scope(app_ctx.session_factory) as session:
            refs = list_categories(session, user_id=user_id)
    except SQLAlchemyError as e:
        _fail(f"listing categories failed: {e}")
    _emit([{"id": r.id, "name": r.name, "type": r.type} for r in refs])


@app.command("update-category")
def update_category_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    category_id: int = typer.Option(..., "--category-id"),
    name: str | None = typer.Option(None, help="New name."),
    type: str | None = typer.Option(None, "--type", help="New type: income or expense."),
) -> None:
    from .categories import update_category

    app_ctx = _app(ctx)
    try:
        with session_scope(app_ctx.session_factory) as session:
            ref = update_category(
                session, user_id=user_id, category_id=category_id, name=name, type=type
            )
    except (NotFoundError, ValueError) as e:
        _fail(str(e))
    except SQLAlchemyError as e:
        _fail(f"updating category failed: {e}")
    _emit({"id": ref.id, "name": ref.name, "type": ref.type})


@app.command("delete-category")
def delete_category_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    category_id: int = typer.Option(..., "--category-id"),
) -> None:
    from .categories import delete_category

    app_ctx = _app(ctx)
    try:
        with session_scope(app_ctx.session_factory) as session:
            delete_category(session, user_id=user_id, category_id=category_id)
    except (NotFoundError, ValueError) as e:
        _fail(str(e))
    except SQLAlchemyError as e:
        _fail(f"deleting category failed: {e}")
    _emit({"deleted": category_id})


# ---- Transactions ------------------------------------------------------------


@app.command("add-transaction")
def add_transaction_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    category_id: int = typer.Option(..., "--category-id"),
    description: str = typer.Option(...),
    amount: str = typer.Option(..., help="Decimal amount, e.g. 12.50"),
    date: str = typer.Option(..., "--date", help="Transaction date (YYYY-MM-DD)."),
) -> None:
    from .ledger import LedgerStore

    app_ctx = _app(ctx)
    try:
        with session_scope(app_ctx.session_factory) as session:
            row = LedgerStore(session).create_transaction(
                user_id,
                category_id=category_id,
                description=description,
                amount=amount,
                date_=date,
            )
    except (NotFoundError, ValueError) as e:
        _fail(str(e))
    except SQLAlchemyError as e:
        _fail(f"creating transaction failed: {e}")
    _emit(row.to_dict())


@app.command("update-transaction")
def update_transaction_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    transaction_id: int = typer.Option(..., "--transaction-id"),
    category_id: int | None = typer.Option(None, "--category-id"),
    description: str | None = typer.Option(None),
    amount: str | None = typer.Option(None),
    date: str | None = typer.Option(None, "--date"),
) -> None:
    from .ledger import LedgerStore

    app_ctx = _app(ctx)
    try:
        with session_scope(app_ctx.session_factory) as session:
            row = LedgerStore(session).update_transaction(
                user_id,
                transaction_id,
                category_id=category_id,
                description=description,
                amount=amount,
                date_=date,
            )
    except (NotFoundError, ValueError) as e:
        _fail(str(e))
    except SQLAlchemyError as e:
        _fail(f"updating transaction failed: {e}")
    _emit(row.to_dict())


@app.command("delete-transaction")
def delete_transaction_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    transaction_id: int = typer.Option(..., "--transaction-id"),
) -> None:
    from .ledger import LedgerStore

    app_ctx = _app(ctx)
    try:
        with session_scope(app_ctx.session_factory) as session:
            LedgerStore(session).delete_transaction(user_id, transaction_id)
    except NotFoundError as e:
        _fail(str(e))
    except SQLAlchemyError as e:
        _fail(f"deleting transaction failed: {e}")
    _emit({"deleted": transaction_id})


@app.command("list-transactions")
def list_transactions_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    start: str | None = typer.Option(None, help="Inclusive start date (YYYY-MM-DD)."),
    end: str | None = typer.Option(None, help="Inclusive end date (YYYY-MM-DD)."),
    page: int = typer.Option(1, help="1-based page number."),
    limit: int = typer.Option(10, help="Page size."),
) -> None:
    from .ledger import LedgerStore

    app_ctx = _app(ctx)
    date_range = _date_range(start, end)
    try:
        with session_scope(app_ctx.session_factory) as session:
            result = LedgerStore(session).page_transactions(
                user_id, date_range=date_range, page=page, limit=limit
            )
    except SQLAlchemyError as e:
        _fail(f"listing transactions failed: {e}")
    _emit(result.to_dict())


# ---- Ingestion and reporting -------------------------------------------------


@app.command("scan-receipt")
def scan_receipt_cmd(
    ctx: typer.Context,
    image_path: Path = typer.Argument(..., dir_okay=False, help="Receipt image file."),
) -> None:
    """OCR a receipt image and print the extracted merchant, total and date."""

    from .api import ingest_receipt

    app_ctx = _app(ctx)
    data = _read_bytes(image_path)
    try:
        extraction = ingest_receipt(data, text_source=app_ctx.text_source)
    except MoneyTrackerError as e:
        _fail(f"failed to process receipt: {e}")
    _emit(extraction.to_dict())


@app.command("import-statement")
def import_statement_cmd(
    ctx: typer.Context,
    pdf_path: Path = typer.Argument(..., dir_okay=False, help="Statement PDF file."),
    user_id: Annotated[int, USER_ID_OPTION] = ...,
) -> None:
    """Import transaction lines from a statement PDF, skipping known duplicates."""

    from .api import ingest_statement

    app_ctx = _app(ctx)
    data = _read_bytes(pdf_path)
    try:
        result = ingest_statement(
            data,
            user_id,
            text_source=app_ctx.text_source,
            session_factory=app_ctx.session_factory,
        )
    except (MoneyTrackerError, CategoryConflictError) as e:
        _fail(f"failed to import statement: {e}")
    _emit(result.to_dict())


@app.command("summary")
def summary_cmd(
    ctx: typer.Context,
    user_id: Annotated[int, USER_ID_OPTION],
    start: str | None = typer.Option(None, help="Inclusive start date (YYYY-MM-DD)."),
    end: str | None = typer.Option(None, help="Inclusive end date (YYYY-MM-DD)."),
) -> None:
    """Print category totals, income/expense totals and the daily expense series."""

    from .api import get_summary

    app_ctx = _app(ctx)
    date_range = _date_range(start, end)
    try:
        report = get_summary(user_id, date_range, session_factory=app_ctx.session_factory)
    except SQLAlchemyError as e:
        _fail(f"summary failed: {e}")
    _emit(report.to_dict())


@app.command("ask")
def ask_cmd(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question about your ledger."),
    user_id: Annotated[int, USER_ID_OPTION] = ...,
    start: str | None = typer.Option(None, help="Inclusive start date (YYYY-MM-DD)."),
    end: str | None = typer.Option(None, help="Inclusive end date (YYYY-MM-DD)."),
) -> None:
    """Answer a question about the ledger with a one-shot OpenAI call."""

    import os

    from .api import ask_ledger

    app_ctx = _app(ctx)
    if not os.getenv("OPENAI_API_KEY"):
        _fail("OPENAI_API_KEY is not set in the environment.")
    date_range = _date_range(start, end)
    try:
        answer = ask_ledger(
            question,
            user_id,
            session_factory=app_ctx.session_factory,
            model=app_ctx.settings.openai_model,
            date_range=date_range,
        )
    except ValueError as e:
        _fail(str(e))
    except Exception as e:  # noqa: BLE001 - surface API/DB failures as one CLI error
        _logger.debug("assistant failure", exc_info=True)
        _fail(f"assistant request failed: {e}")
    typer.echo(answer)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m money_tracker.cli`
    app()
