"""
Store error classification.

This is the only module that interprets driver error codes and messages. It
answers "what kind of failure was this?" and returns the DatabaseError subclass
to raise; mapper.py decides how to log and raise it.

Classification order:
  1. SQLSTATE (PostgreSQL drivers expose it as `sqlstate` or `pgcode`)
  2. SQLAlchemy exception type (InterfaceError, pool TimeoutError, invalidated
     connections, DisconnectionError, OS level socket errors)
  3. message heuristics for backends without SQLSTATE (SQLite, MySQL)
"""
import logging
from enum import Enum
from typing import Type

from sqlalchemy import exc as sa_exc

from .base import (
    CheckViolationError,
    DatabaseConnectionError,
    DatabaseError,
    ForeignKeyViolationError,
    NotNullViolationError,
    UniqueViolationError,
)

logger = logging.getLogger(__name__)


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"
    ADMIN_SHUTDOWN = "57P01"
    CRASH_SHUTDOWN = "57P02"
    CANNOT_CONNECT_NOW = "57P03"


SQLSTATE_EXCEPTION_MAP: dict[str, Type[DatabaseError]] = {
    PostgresErrorCodes.UNIQUE_VIOLATION: UniqueViolationError,
    PostgresErrorCodes.NOT_NULL_VIOLATION: NotNullViolationError,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION: ForeignKeyViolationError,
    PostgresErrorCodes.CHECK_VIOLATION: CheckViolationError,
    PostgresErrorCodes.ADMIN_SHUTDOWN: DatabaseConnectionError,
    PostgresErrorCodes.CRASH_SHUTDOWN: DatabaseConnectionError,
    PostgresErrorCodes.CANNOT_CONNECT_NOW: DatabaseConnectionError,
}

# SQLSTATE class 08 = connection exception
CONNECTION_SQLSTATE_CLASS = "08"

CONNECTION_KEYWORDS = [
    "could not connect",
    "connection refused",
    "connection reset",
    "connection is closed",
    "server closed the connection",
    "terminating connection",
    "unable to open database",
    "timeout expired",
    "timed out",
    "name or service not known",
]


def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def get_sqlstate(orig) -> str | None:
    if orig is None:
        return None
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return str(code) if code else None


def get_constraint_name(orig) -> str | None:
    if orig is None:
        return None
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None) if diag is not None else None
    if name:
        return name
    # asyncpg exposes the constraint on the driver exception chained below the adapter
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if isinstance(name, str) and name:
            return name
    return None


def _classify_from_sqlstate(sqlstate: str | None) -> Type[DatabaseError] | None:
    if not sqlstate:
        return None

    exception_class = SQLSTATE_EXCEPTION_MAP.get(sqlstate)
    if exception_class is not None:
        logger.debug("db.classify.sqlstate", extra={"sqlstate": sqlstate, "kind": exception_class.kind})
        return exception_class

    if sqlstate.startswith(CONNECTION_SQLSTATE_CLASS):
        return DatabaseConnectionError

    # Unknown SQLSTATE: visible at WARNING, classification continues
    logger.warning("db.classify.unknown_sqlstate", extra={"sqlstate": sqlstate})
    return None


def _classify_integrity_message(msg: str) -> Type[DatabaseError]:
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return UniqueViolationError

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return NotNullViolationError

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return ForeignKeyViolationError

    if _match_any(normalized, ["check constraint", "check failed"]):
        return CheckViolationError

    logger.warning("db.classify.unknown_integrity_message", extra={"message_snippet": (msg or "")[:200]})
    return DatabaseError


def _is_connection_failure(exc: BaseException) -> bool:
    if isinstance(exc, (sa_exc.InterfaceError, sa_exc.DisconnectionError, sa_exc.TimeoutError)):
        return True
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True
    if isinstance(exc, sa_exc.OperationalError):
        return _match_any(str(exc.orig or exc).lower(), CONNECTION_KEYWORDS)
    return False


def classify_database_error(exc: BaseException) -> tuple[Type[DatabaseError], str | None]:
    """
    Classify a raw store exception.

    Returns:
        (DatabaseError subclass, constraint name if the driver reported one)
    """
    orig = getattr(exc, "orig", None)
    constraint_name = get_constraint_name(orig)

    exception_class = _classify_from_sqlstate(get_sqlstate(orig))
    if exception_class is not None:
        return exception_class, constraint_name

    if _is_connection_failure(exc):
        return DatabaseConnectionError, constraint_name

    if isinstance(exc, sa_exc.IntegrityError):
        return _classify_integrity_message(str(orig if orig is not None else exc)), constraint_name

    return DatabaseError, constraint_name
