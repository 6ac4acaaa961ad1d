"""Category service operations for the ``ledger_categories`` table.

Exports
-------
- ``create_category(...)``: validated creation; a case-insensitive name clash
  for the same user raises :class:`~money_tracker.errors.CategoryConflictError`.
- ``list_categories``, ``update_category``, ``delete_category``.
- ``find_or_create_default_expense_category(...)``: lazy fallback category used
  by statement imports.
- ``normalize_name(...)`` and ``validate_name(...)``: shared name helpers.

All functions take a caller-owned session; nothing here commits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from db.models.ledger import CATEGORY_TYPES, LedgerCategory, LedgerTransaction
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .errors import CategoryConflictError, NotFoundError
from .logging_setup import get_logger
from .models import DEFAULT_CATEGORY_NAME, DEFAULT_CATEGORY_TYPE, CategoryRef

_logger = get_logger("money_tracker.categories")

# ---------------------------
# Name normalization/validation
# ---------------------------

_ALLOWED_RE = re.compile(r"^[\w &\-/'.,()]+$")


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``."""

    return " ".join(name.strip().split())


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None


def validate_name(name: str, *, min_len: int = 1, max_len: int = 64) -> NameValidation:
    """Validate a category name.

    Rules
    -----
    - Trim whitespace; enforce length bounds 1..64.
    - Allowed characters: letters, digits, spaces, and ``& - / ' . , ( )``.
    """

    n = normalize_name(name)
    if len(n) < min_len:
        return NameValidation(False, "Name cannot be empty")
    if len(n) > max_len:
        return NameValidation(False, f"Name must be at most {max_len} characters")
    if not _ALLOWED_RE.match(n):
        return NameValidation(False, "Only letters, numbers, spaces, and & - / ' . , ( ) are allowed")
    return NameValidation(True, None)


def _validate_type(kind: str) -> str:
    k = (kind or "").strip().lower()
    if k not in CATEGORY_TYPES:
        raise ValueError(f"Invalid category type: {kind!r}. Allowed: {list(CATEGORY_TYPES)}")
    return k


def _to_ref(row: LedgerCategory) -> CategoryRef:
    return CategoryRef(id=row.id, name=row.name, type=row.type)  # type: ignore[arg-type]


def _find_by_name(session: Session, user_id: int, name: str) -> LedgerCategory | None:
    return (
        session.execute(
            select(LedgerCategory).where(
                LedgerCategory.user_id == user_id,
                func.lower(LedgerCategory.name) == name.lower(),
            )
        )
        .scalars()
        .first()
    )


def _get_owned(session: Session, user_id: int, category_id: int) -> LedgerCategory:
    row = (
        session.execute(
            select(LedgerCategory).where(
                LedgerCategory.id == category_id, LedgerCategory.user_id == user_id
            )
        )
        .scalars()
        .first()
    )
    if row is None:
        raise NotFoundError(f"Category {category_id} not found")
    return row


# ---------------------------
# Service operations
# ---------------------------


def create_category(session: Session, *, user_id: int, name: str, type: str) -> CategoryRef:
    """Create a category for ``user_id``.

    Raises ``ValueError`` for an invalid name/type and
    :class:`CategoryConflictError` when the name is already taken (compared
    case-insensitively).
    """

    n = normalize_name(name)
    v = validate_name(n)
    if not v.ok:
        raise ValueError(f"Invalid category name: {v.reason}")
    kind = _validate_type(type)

    if _find_by_name(session, user_id, n) is not None:
        raise CategoryConflictError("A category with this name already exists.")

    row = LedgerCategory(user_id=user_id, name=n, type=kind)
    session.add(row)
    session.flush()
    _logger.info("created category id=%s user=%s name=%r type=%s", row.id, user_id, n, kind)
    return _to_ref(row)


def list_categories(session: Session, *, user_id: int) -> list[CategoryRef]:
    rows = (
        session.execute(
            select(LedgerCategory)
            .where(LedgerCategory.user_id == user_id)
            .order_by(LedgerCategory.type, LedgerCategory.name)
        )
        .scalars()
        .all()
    )
    return [_to_ref(r) for r in rows]


def get_category(session: Session, *, user_id: int, category_id: int) -> CategoryRef:
    return _to_ref(_get_owned(session, user_id, category_id))


def update_category(
    session: Session,
    *,
    user_id: int,
    category_id: int,
    name: str | None = None,
    type: str | None = None,
) -> CategoryRef:
    """Rename and/or retype a category owned by ``user_id``."""

    row = _get_owned(session, user_id, category_id)
    if name is not None:
        n = normalize_name(name)
        v = validate_name(n)
        if not v.ok:
            raise ValueError(f"Invalid category name: {v.reason}")
        clash = _find_by_name(session, user_id, n)
        if clash is not None and clash.id != row.id:
            raise CategoryConflictError("A category with this name already exists.")
        row.name = n
    if type is not None:
        row.type = _validate_type(type)
    session.flush()
    return _to_ref(row)


def delete_category(session: Session, *, user_id: int, category_id: int) -> None:
    """Delete an unused category; categories referenced by transactions are kept."""

    row = _get_owned(session, user_id, category_id)
    in_use = session.execute(
        select(func.count(LedgerTransaction.id)).where(
            LedgerTransaction.user_id == user_id, LedgerTransaction.category_id == category_id
        )
    ).scalar_one()
    if in_use:
        raise ValueError(f"Category {category_id} is used by {in_use} transaction(s)")
    session.delete(row)
    session.flush()


def find_or_create_default_expense_category(session: Session, *, user_id: int) -> int:
    """Return the id of the user's fallback expense category.

    Uses the user's oldest ``expense`` category when one exists; otherwise
    creates ``Uncategorized``/``expense``. Concurrent first imports for the
    same user are arbitrated by the ``(user_id, name)`` unique constraint: the
    losing transaction fails with an integrity error.

    Raises :class:`CategoryConflictError` when the user has no expense
    category and ``Uncategorized`` is already taken by an income category.
    """

    existing = session.execute(
        select(LedgerCategory.id)
        .where(LedgerCategory.user_id == user_id, LedgerCategory.type == DEFAULT_CATEGORY_TYPE)
        .order_by(LedgerCategory.id)
        .limit(1)
    ).scalar_one_or_none()
    if existing is not None:
        return existing

    if _find_by_name(session, user_id, DEFAULT_CATEGORY_NAME) is not None:
        raise CategoryConflictError(
            f"The fallback category name \"{DEFAULT_CATEGORY_NAME}\" is used by an income "
            "category. Rename it or create an expense category before importing."
        )

    row = LedgerCategory(user_id=user_id, name=DEFAULT_CATEGORY_NAME, type=DEFAULT_CATEGORY_TYPE)
    session.add(row)
    session.flush()
    _logger.info("created default category id=%s for user=%s", row.id, user_id)
    return row.id


__all__ = [
    "normalize_name",
    "validate_name",
    "NameValidation",
    "create_category",
    "list_categories",
    "get_category",
    "update_category",
    "delete_category",
    "find_or_create_default_expense_category",
]
