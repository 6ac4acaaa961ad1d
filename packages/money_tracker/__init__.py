"""Public interface for the ``money_tracker`` package.

Re-exports the API functions, parsers, and public models as the stable import
surface. No runtime logic lives here.
"""

from .aggregation import summarize, summarize_rows
from .api import ask_ledger, get_summary, import_statement_text, ingest_receipt, ingest_statement
from .config import Settings, load_settings
from .dedup import DedupResult, partition_candidates
from .errors import (
    CategoryConflictError,
    MalformedInputError,
    MoneyTrackerError,
    NotFoundError,
    PersistenceError,
    TextExtractionTimeout,
)
from .ledger import LedgerStore
from .models import (
    CandidateTransaction,
    CategoryRef,
    CategoryTotal,
    DailyExpense,
    DateRange,
    ImportResult,
    LedgerRow,
    ReceiptExtraction,
    SummaryReport,
    TransactionPage,
    TypeTotal,
)
from .receipts import parse_receipt_text
from .statements import parse_statement_text

__version__ = "0.1.0"

__all__ = [
    # API
    "ingest_receipt",
    "ingest_statement",
    "import_statement_text",
    "get_summary",
    "ask_ledger",
    "parse_receipt_text",
    "parse_statement_text",
    "partition_candidates",
    "summarize",
    "summarize_rows",
    "LedgerStore",
    "Settings",
    "load_settings",
    # Models / types
    "ReceiptExtraction",
    "CandidateTransaction",
    "DedupResult",
    "ImportResult",
    "DateRange",
    "CategoryRef",
    "LedgerRow",
    "TransactionPage",
    "CategoryTotal",
    "TypeTotal",
    "DailyExpense",
    "SummaryReport",
    # Errors
    "MoneyTrackerError",
    "MalformedInputError",
    "TextExtractionTimeout",
    "PersistenceError",
    "NotFoundError",
    "CategoryConflictError",
]
