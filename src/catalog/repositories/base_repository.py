"""
Base repository class providing common database operations.

Model-specific repositories inherit the generic reads and the guarded
`create` from here and add their own queries. Repositories never commit:
they flush so generated values are available and leave transaction
boundaries to the service layer.
"""
import logging
import time
from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database.base import Base
from catalog.exceptions.base import ValidationError
from catalog.exceptions.mapper import database_errors
from catalog.validators.model_validators import find_missing_required, find_unknown_model_kwargs

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    def _check_create_kwargs(self, kwargs: dict[str, Any]) -> None:
        unknown = find_unknown_model_kwargs(self.model, kwargs)
        missing = find_missing_required(self.model, kwargs)
        if not unknown and not missing:
            return

        errors = [
            {"field": name, "message": f"Unknown field: {name} is not allowed", "value": None}
            for name in sorted(unknown)
        ] + [
            {"field": name, "message": f"{name} is required", "value": None}
            for name in sorted(missing)
        ]
        logger.info(
            "repo.create.invalid_input",
            extra={
                "model": self.model_name,
                "operation": "create",
                "invalid_fields": sorted(unknown),
                "missing_fields": sorted(missing),
            },
        )
        raise ValidationError(
            f"Invalid data for {self.model_name}",
            errors=errors,
            metadata={"operation": "create", "model": self.model_name},
        )

    async def create(self, **kwargs) -> ModelType:
        """
        Insert one entity and return it with server-generated values loaded.

        Raises:
            ValidationError: unknown or missing required fields.
            DatabaseError: classified store failure (e.g. UniqueViolationError).
        """
        logger.debug(
            "repo.create.start",
            extra={
                "model": self.model_name,
                "operation": "create",
                "provided_keys": sorted(kwargs.keys()),
            },
        )
        self._check_create_kwargs(kwargs)

        start = time.perf_counter()
        async with database_errors(self.db, f"{self.model_name}.create", kwargs):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model_name,
                "operation": "create",
                "id": str(getattr(entity, "id", None)),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    async def get_by_id(self, entity_id: UUID) -> ModelType | None:
        async with database_errors(self.db, f"{self.model_name}.get_by_id", {"id": entity_id}):
            result = await self.db.execute(select(self.model).where(self.model.id == entity_id))
            entity = result.scalar_one_or_none()

        logger.debug(
            "repo.get_by_id",
            extra={"model": self.model_name, "id": str(entity_id), "found": entity is not None},
        )
        return entity

    async def exists(self, entity_id: UUID) -> bool:
        async with database_errors(self.db, f"{self.model_name}.exists", {"id": entity_id}):
            result = await self.db.execute(select(self.model.id).where(self.model.id == entity_id))
            return result.scalar() is not None

    async def count(self, **filters: Any) -> int:
        """
        Count rows matching simple equality filters, e.g. `count(is_active=True)`.
        Unknown attribute names and None values are ignored.
        """
        query = select(func.count()).select_from(self.model)
        for field, value in filters.items():
            if hasattr(self.model, field) and value is not None:
                query = query.where(getattr(self.model, field) == value)

        async with database_errors(self.db, f"{self.model_name}.count", filters):
            result = await self.db.execute(query)
            return result.scalar() or 0
