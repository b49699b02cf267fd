from types import SimpleNamespace

import pytest
from sqlalchemy import exc as sa_exc

from catalog.exceptions.base import (
    CheckViolationError,
    DatabaseConnectionError,
    DatabaseError,
    ForeignKeyViolationError,
    NotNullViolationError,
    UniqueViolationError,
)
from catalog.exceptions.classifier import classify_database_error, get_constraint_name, get_sqlstate


class FakePgError(Exception):
    """Stand-in for a psycopg error: carries `sqlstate` and `diag.constraint_name`."""

    def __init__(self, message: str, sqlstate: str | None = None, constraint: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.diag = SimpleNamespace(constraint_name=constraint)


def integrity(message: str, **kwargs) -> sa_exc.IntegrityError:
    return sa_exc.IntegrityError("INSERT INTO products ...", {}, FakePgError(message, **kwargs))


class TestSqlstateClassification:
    @pytest.mark.parametrize(
        "sqlstate,expected",
        [
            ("23505", UniqueViolationError),
            ("23502", NotNullViolationError),
            ("23503", ForeignKeyViolationError),
            ("23514", CheckViolationError),
            ("57P01", DatabaseConnectionError),
            ("08006", DatabaseConnectionError),
        ],
    )
    def test_known_codes(self, sqlstate, expected):
        cls, _ = classify_database_error(integrity("boom", sqlstate=sqlstate))
        assert cls is expected

    def test_sqlstate_wins_over_message(self):
        """
        Behavior:
          - The message says "not null" but the SQLSTATE says unique violation.

        Importance:
          - Driver codes are authoritative; message matching is only a fallback.
        """
        cls, _ = classify_database_error(integrity("not null something", sqlstate="23505"))
        assert cls is UniqueViolationError

    def test_constraint_name_is_reported(self):
        cls, constraint = classify_database_error(
            integrity("duplicate key value", sqlstate="23505", constraint="uq_products_sku")
        )
        assert cls is UniqueViolationError
        assert constraint == "uq_products_sku"

    def test_pgcode_attribute(self):
        orig = SimpleNamespace(pgcode="23514")
        assert get_sqlstate(orig) == "23514"
        assert get_sqlstate(None) is None
        assert get_constraint_name(None) is None


class TestMessageClassification:
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("UNIQUE constraint failed: products.sku", UniqueViolationError),
            ("NOT NULL constraint failed: products.name", NotNullViolationError),
            ("FOREIGN KEY constraint failed", ForeignKeyViolationError),
            ("CHECK constraint failed: ck_products_price_non_negative", CheckViolationError),
            ("something nobody anticipated", DatabaseError),
        ],
    )
    def test_sqlite_style_messages(self, message, expected):
        cls, _ = classify_database_error(integrity(message))
        assert cls is expected


class TestConnectionClassification:
    def test_operational_error_with_connection_keyword(self):
        exc = sa_exc.OperationalError("SELECT 1", {}, Exception("could not connect to server: Connection refused"))
        assert classify_database_error(exc)[0] is DatabaseConnectionError

    def test_operational_error_without_keyword_is_generic(self):
        exc = sa_exc.OperationalError("SELECT 1", {}, Exception("no such table: products"))
        assert classify_database_error(exc)[0] is DatabaseError

    def test_interface_error(self):
        exc = sa_exc.InterfaceError("SELECT 1", {}, Exception("connection already closed"))
        assert classify_database_error(exc)[0] is DatabaseConnectionError

    def test_pool_timeout(self):
        assert classify_database_error(sa_exc.TimeoutError("QueuePool limit reached"))[0] is DatabaseConnectionError

    def test_os_level_connection_error(self):
        assert classify_database_error(ConnectionRefusedError("refused"))[0] is DatabaseConnectionError

    def test_unrelated_exception_is_generic(self):
        assert classify_database_error(RuntimeError("boom")) == (DatabaseError, None)
