import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import exc as sa_exc

from catalog.exceptions.base import (
    CatalogError,
    DatabaseConnectionError,
    DatabaseError,
    NotFoundError,
    UniqueViolationError,
)
from catalog.exceptions.mapper import build_database_error, database_errors, extract_columns, sanitize_context


def unique_violation() -> sa_exc.IntegrityError:
    return sa_exc.IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: products.sku"))


class TestExtractColumns:
    def test_sqlite_message(self):
        assert extract_columns(unique_violation()) == ["sku"]

    def test_postgres_detail(self):
        exc = sa_exc.IntegrityError("INSERT", {}, Exception("duplicate key\nDETAIL:  Key (sku)=(W-001) already exists."))
        assert extract_columns(exc) == ["sku"]

    def test_postgres_not_null(self):
        exc = sa_exc.IntegrityError(
            "INSERT", {}, Exception('null value in column "name" of relation "products" violates not-null constraint')
        )
        assert extract_columns(exc) == ["name"]

    def test_no_match(self):
        assert extract_columns(RuntimeError("nothing here")) is None


def test_sanitize_context_reduces_values():
    pid = uuid.uuid4()
    clean = sanitize_context(
        {"id": pid, "name": "x" * 500, "fields": {"b": 1, "a": 2}, "items": [1, 2, 3], "flag": True, "obj": object()}
    )

    assert clean["id"] == str(pid)
    assert len(clean["name"]) == 200
    assert clean["fields"] == ["a", "b"]
    assert clean["items"] == "<3 items>"
    assert clean["flag"] is True
    assert clean["obj"] == "object"


def test_build_database_error_metadata():
    """
    Behavior:
      - Build a DatabaseError from a SQLite unique violation.
      - Expect the classified subclass, a generic client message and diagnostics
        in metadata only.
    """
    err = build_database_error(unique_violation(), "create", {"sku": "W-001"})

    assert isinstance(err, UniqueViolationError)
    assert err.metadata["operation"] == "create"
    assert err.metadata["kind"] == "unique_violation"
    assert err.metadata["fields"] == ["sku"]
    assert err.metadata["context"] == {"sku": "W-001"}
    assert "products.sku" not in err.message
    assert err.to_payload() == {
        "success": False,
        "message": err.message,
        "code": "DATABASE_ERROR",
    }


@pytest.mark.asyncio
class TestDatabaseErrorsContext:
    """
    `database_errors` wraps repository blocks: it rolls back on store failures
    and re-raises them as classified DatabaseErrors.

    Fixtures used:
      - none; the session is an AsyncMock exposing `rollback()`.
    """

    async def test_store_error_rolls_back_and_classifies(self):
        db = AsyncMock()

        with pytest.raises(UniqueViolationError) as exc_info:
            async with database_errors(db, "create", {"sku": "W-001"}):
                raise unique_violation()

        db.rollback.assert_awaited_once()
        assert exc_info.value.metadata["operation"] == "create"
        assert isinstance(exc_info.value.__cause__, sa_exc.IntegrityError)

    async def test_catalog_errors_pass_through(self):
        """
        Behavior:
          - A CatalogError raised inside the block leaves unchanged.

        Importance:
          - Domain errors (not found, validation) must not be re-labelled as
            database failures.
        """
        db = AsyncMock()

        with pytest.raises(NotFoundError):
            async with database_errors(db, "find"):
                raise NotFoundError("Product not found")

        db.rollback.assert_not_awaited()

    async def test_unexpected_exception_becomes_generic_database_error(self):
        db = AsyncMock()

        with pytest.raises(DatabaseError) as exc_info:
            async with database_errors(db, "bulk_create", {"items": [1, 2]}):
                raise KeyError("id")

        assert type(exc_info.value) is DatabaseError
        assert exc_info.value.metadata["context"] == {"items": "<2 items>"}
        db.rollback.assert_awaited_once()

    async def test_connection_error(self):
        db = AsyncMock()

        with pytest.raises(DatabaseConnectionError):
            async with database_errors(db, "count"):
                raise ConnectionResetError("reset by peer")

    async def test_failed_rollback_does_not_mask_original_error(self):
        db = AsyncMock()
        db.rollback.side_effect = RuntimeError("connection gone")

        with pytest.raises(UniqueViolationError):
            async with database_errors(db, "create"):
                raise unique_violation()

    async def test_clean_block_does_nothing(self):
        db = AsyncMock()
        async with database_errors(db, "noop"):
            pass
        db.rollback.assert_not_awaited()


def test_error_payload_and_status():
    err = CatalogError("boom", metadata={"operation": "x"}, errors=[{"field": "a", "message": "b"}])

    assert err.http_status() == 500
    assert err.to_payload()["errors"] == [{"field": "a", "message": "b"}]
    assert "operation: x" in str(err)
    assert NotFoundError().http_status() == 404
