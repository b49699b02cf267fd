"""
Application-level exceptions.

Every error that can cross a layer boundary derives from `CatalogError`. Each
carries a client-safe message, a canonical `error_code` and optional
`metadata` for diagnostics (operation name, context). Metadata is for logs
only and never rendered into responses.
"""
from typing import Any, Iterable


class CatalogError(Exception):
    """
    Base exception for catalog errors.

    - message: human-friendly message (safe to show to clients)
    - metadata: structured diagnostics for logs (operation, ids, constraint names)
    - errors: optional field-level details rendered to clients
    - error_code: canonical short code; maps to the HTTP status
    """

    # canonical error_code -> HTTP status; the one mapping used by the API layer
    ERROR_CODE_TO_STATUS = {
        "UNPROCESSABLE_ENTITY": 422,
        "BAD_REQUEST": 400,
        "NOT_FOUND": 404,
        "DATABASE_ERROR": 500,
        "INTERNAL_SERVER_ERROR": 500,
    }

    error_code = "INTERNAL_SERVER_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        metadata: dict[str, Any] | None = None,
        errors: Iterable[dict[str, Any]] | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.metadata = dict(metadata or {})
        self.errors = list(errors) if errors else None

    def __str__(self) -> str:
        if self.metadata.get("operation"):
            return f"{self.message} (operation: {self.metadata['operation']}; code: {self.error_code})"
        return f"{self.message} (code: {self.error_code})"

    def to_payload(self) -> dict:
        """
        JSON body for HTTP responses:
            {"success": false, "message": "...", "code": "NOT_FOUND", "errors": [...]}
        `errors` is only present when field-level details exist.
        """
        payload: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.error_code,
        }
        if self.errors:
            payload["errors"] = self.errors
        return payload

    def http_status(self) -> int:
        return self.ERROR_CODE_TO_STATUS.get(self.error_code, 500)


class ValidationError(CatalogError):
    """Input failed schema validation; `errors` lists every violated rule."""

    error_code = "UNPROCESSABLE_ENTITY"
    default_message = "Validation failed"


class BadRequestError(CatalogError):
    error_code = "BAD_REQUEST"
    default_message = "Bad request"


class NotFoundError(CatalogError):
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class DatabaseError(CatalogError):
    """
    A store failure, already classified.

    Subclasses narrow the cause; `kind` is a stable label for logs and tests.
    The message is always generic so raw store text never reaches clients.
    """

    error_code = "DATABASE_ERROR"
    default_message = "A database error occurred"
    kind = "generic"


class DatabaseConnectionError(DatabaseError):
    default_message = "Database connection failed"
    kind = "connection"


class UniqueViolationError(DatabaseError):
    default_message = "A record with the same unique value already exists"
    kind = "unique_violation"


class ForeignKeyViolationError(DatabaseError):
    default_message = "Referenced record does not exist"
    kind = "foreign_key_violation"


class NotNullViolationError(DatabaseError):
    default_message = "A required field is missing"
    kind = "not_null_violation"


class CheckViolationError(DatabaseError):
    default_message = "A field value violates a business rule"
    kind = "check_violation"


class InternalServerError(CatalogError):
    error_code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"


__all__ = [
    "CatalogError",
    "ValidationError",
    "BadRequestError",
    "NotFoundError",
    "DatabaseError",
    "DatabaseConnectionError",
    "UniqueViolationError",
    "ForeignKeyViolationError",
    "NotNullViolationError",
    "CheckViolationError",
    "InternalServerError",
]
