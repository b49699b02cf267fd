import logging
import re
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .base import CatalogError, DatabaseConnectionError, DatabaseError
from .classifier import classify_database_error, get_sqlstate

logger = logging.getLogger(__name__)

_MAX_CONTEXT_VALUE_LENGTH = 200

# -----------------------
# Column extraction helpers
# -----------------------

_COLUMN_PATTERNS = (
    # PostgreSQL: 'null value in column "name" of relation "products" violates not-null constraint'
    re.compile(r'null value in column "(?P<cols>[^"]+)"', re.IGNORECASE),
    # PostgreSQL: 'DETAIL:  Key (sku)=(SKU-1) already exists.'
    re.compile(r"key \((?P<cols>[^)]+)\)=", re.IGNORECASE),
    # SQLite: 'UNIQUE constraint failed: products.sku' / 'NOT NULL constraint failed: products.name'
    re.compile(r"(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>[\w.,\s]+)", re.IGNORECASE),
)


def extract_columns(exc: BaseException) -> list[str] | None:
    """
    Best-effort extraction of the column names involved in a constraint failure.
    """
    orig = getattr(exc, "orig", None)
    msg = str(orig) if orig is not None else str(exc)

    for pattern in _COLUMN_PATTERNS:
        m = pattern.search(msg)
        if m:
            return [c.split(".")[-1].strip().strip('"') for c in m.group("cols").split(",") if c.strip()]
    return None


def sanitize_context(context: dict[str, Any] | None) -> dict[str, Any]:
    """
    Reduce operation context to short scalar values safe to attach to errors
    and log lines. Collections are summarized by size.
    """
    clean: dict[str, Any] = {}
    for key, value in (context or {}).items():
        if isinstance(value, uuid.UUID):
            clean[key] = str(value)
        elif isinstance(value, str):
            clean[key] = value[:_MAX_CONTEXT_VALUE_LENGTH]
        elif value is None or isinstance(value, (bool, int, float)):
            clean[key] = value
        elif isinstance(value, dict):
            clean[key] = sorted(str(k) for k in value.keys())
        elif isinstance(value, (list, tuple, set)):
            clean[key] = f"<{len(value)} items>"
        else:
            clean[key] = type(value).__name__
    return clean


async def _safe_rollback(db: AsyncSession, operation: str) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.exception("db.rollback.failed", extra={"operation": operation})


def build_database_error(exc: BaseException, operation: str, context: dict[str, Any] | None = None) -> DatabaseError:
    """
    Classify `exc` and build the matching DatabaseError with diagnostics metadata.
    The raw store message is only logged at DEBUG.
    """
    error_cls, constraint_name = classify_database_error(exc)
    columns = extract_columns(exc)

    metadata: dict[str, Any] = {
        "operation": operation,
        "kind": error_cls.kind,
        "context": sanitize_context(context),
    }
    if constraint_name:
        metadata["constraint"] = constraint_name
    if columns:
        metadata["fields"] = columns
    sqlstate = get_sqlstate(getattr(exc, "orig", None))
    if sqlstate:
        metadata["sqlstate"] = sqlstate

    log_extra = {"operation": operation, "kind": error_cls.kind, "constraint": constraint_name, "fields": columns}
    if error_cls is DatabaseError or error_cls is DatabaseConnectionError:
        logger.error("db.error.%s", error_cls.kind, extra=log_extra, exc_info=exc)
    else:
        # constraint violations are client-triggerable; no stack trace
        logger.info("db.error.%s", error_cls.kind, extra=log_extra)
    logger.debug("db.error.raw", extra={"operation": operation, "raw": str(exc)[:1000]})

    return error_cls(metadata=metadata)


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def database_errors(
    db: AsyncSession,
    operation: str,
    context: dict[str, Any] | None = None,
) -> AsyncIterator[None]:
    """
    Usage:
        async with database_errors(self.db, "update", {"id": product_id}):
            ... DB ops ...

    Rolls the session back on failure and raises a classified DatabaseError.
    CatalogError subclasses raised inside the block propagate unchanged.
    """
    try:
        yield
    except CatalogError:
        raise
    except (SQLAlchemyError, OSError) as exc:
        await _safe_rollback(db, operation)
        raise build_database_error(exc, operation, context) from exc
    except Exception as exc:
        await _safe_rollback(db, operation)
        logger.exception("db.error.unexpected", extra={"operation": operation})
        raise DatabaseError(
            metadata={"operation": operation, "kind": DatabaseError.kind, "context": sanitize_context(context)}
        ) from exc
