# catalog/exceptions/
# ├── base.py          app-level errors (CatalogError and subclasses)
# ├── classifier.py    SQLSTATE / driver message classification
# └── mapper.py        database_errors() context manager used by repositories

from .base import (
    CatalogError,
    ValidationError,
    BadRequestError,
    NotFoundError,
    DatabaseError,
    DatabaseConnectionError,
    UniqueViolationError,
    ForeignKeyViolationError,
    NotNullViolationError,
    CheckViolationError,
    InternalServerError,
)
from .mapper import database_errors

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
    "database_errors",
]
