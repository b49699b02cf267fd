import logging
import time
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence, overload
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.constants import EMPTY_PRICE_RANGE
from catalog.exceptions.base import DatabaseError
from catalog.exceptions.mapper import database_errors
from catalog.models.product import Product
from catalog.schemas.product import (
    FilterOptions,
    PagedProducts,
    Pagination,
    PriceRange,
    ProductFilters,
    ProductRecord,
)

from .base_repository import BaseRepository
from .query_builder import build_count_query, build_list_query

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50


class ProductRepository(BaseRepository[Product]):
    """
    Persistence for products.

    Reads that take a product id only see active rows. Every method returns
    `ProductRecord`s rather than ORM instances, and every store failure leaves
    as a classified `DatabaseError` (see `catalog.exceptions.mapper`).
    """

    def __init__(self, db: AsyncSession, *, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(Product, db)
        self.chunk_size = max(1, chunk_size)

    # =================================================================================================================
    # Row conversion
    # =================================================================================================================

    @overload
    def _to_record(self, rows: Product) -> ProductRecord: ...

    @overload
    def _to_record(self, rows: Sequence[Product]) -> list[ProductRecord]: ...

    def _to_record(self, rows):
        """Convert one row or a sequence of rows; None passes through."""
        if rows is None:
            return None
        try:
            if isinstance(rows, Product):
                return ProductRecord.model_validate(rows)
            return [ProductRecord.model_validate(row) for row in rows]
        except PydanticValidationError as exc:
            logger.error("repo.product.conversion_failed", extra={"error_count": exc.error_count()})
            raise DatabaseError(
                "Model conversion failed",
                metadata={"operation": "to_record", "kind": DatabaseError.kind},
            ) from exc

    # =================================================================================================================
    # Reads
    # =================================================================================================================

    async def find_with_filters(self, filters: ProductFilters) -> PagedProducts:
        """
        One page of products matching `filters`, plus pagination metadata
        computed from an exact count over the same predicates.
        """
        start = time.perf_counter()
        async with database_errors(self.db, "find_with_filters", filters.model_dump(mode="json")):
            total = (await self.db.execute(build_count_query(filters))).scalar_one()
            rows = (await self.db.execute(build_list_query(filters))).scalars().all()

        logger.debug(
            "repo.product.find_with_filters",
            extra={
                "page": filters.page,
                "limit": filters.limit,
                "returned": len(rows),
                "total": total,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return PagedProducts(
            items=self._to_record(rows),
            pagination=Pagination.build(filters.page, filters.limit, total),
        )

    async def _get_active_entity(self, product_id: UUID) -> Product | None:
        result = await self.db.execute(
            select(Product).where(Product.id == product_id, Product.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, product_id: UUID) -> ProductRecord | None:
        async with database_errors(self.db, "find_by_id", {"id": product_id}):
            entity = await self._get_active_entity(product_id)
        return self._to_record(entity)

    async def is_sku_exists(self, sku: str, exclude_id: UUID | None = None) -> bool:
        """
        True when any product, active or not, already uses `sku`.
        `exclude_id` leaves one product out (the one being updated).
        """
        query = select(Product.id).where(Product.sku == sku)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)

        async with database_errors(self.db, "is_sku_exists", {"sku": sku, "exclude_id": exclude_id}):
            result = await self.db.execute(query.limit(1))
            return result.first() is not None

    async def get_filter_options(self) -> FilterOptions:
        active = Product.is_active.is_(True)
        async with database_errors(self.db, "get_filter_options"):
            categories = (
                await self.db.execute(
                    select(Product.category).where(active).distinct().order_by(Product.category.asc())
                )
            ).scalars().all()
            brands = (
                await self.db.execute(
                    select(Product.brand).where(active).distinct().order_by(Product.brand.asc())
                )
            ).scalars().all()
            min_price, max_price = (
                await self.db.execute(select(func.min(Product.price), func.max(Product.price)).where(active))
            ).one()

        if min_price is None or max_price is None:
            price_range = PriceRange(**EMPTY_PRICE_RANGE)
        else:
            price_range = PriceRange(min_price=float(min_price), max_price=float(max_price))

        return FilterOptions(categories=list(categories), brands=list(brands), price_range=price_range)

    # =================================================================================================================
    # Writes
    # =================================================================================================================

    async def create(self, data: dict[str, Any]) -> ProductRecord:
        entity = await super().create(**data)
        return self._to_record(entity)

    async def update(self, product_id: UUID, patch: dict[str, Any]) -> ProductRecord | None:
        """
        Apply `patch` to an active product. Returns None when there is no
        active product with this id.
        """
        async with database_errors(self.db, "update", {"id": product_id, "fields": patch}):
            entity = await self._get_active_entity(product_id)
            if entity is None:
                logger.info("repo.product.update.not_found", extra={"id": str(product_id)})
                return None

            for key, value in patch.items():
                setattr(entity, key, value)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.product.update.success",
            extra={"id": str(product_id), "updated_fields": sorted(patch.keys())},
        )
        return self._to_record(entity)

    async def soft_delete(self, product_id: UUID) -> bool:
        """Mark an active product inactive. True iff a row changed."""
        async with database_errors(self.db, "soft_delete", {"id": product_id}):
            entity = await self._get_active_entity(product_id)
            deleted = entity is not None
            if deleted:
                entity.is_active = False
                entity.updated_at = datetime.now(timezone.utc)
                await self.db.flush()

        logger.info("repo.product.soft_delete", extra={"id": str(product_id), "deleted": deleted})
        return deleted

    async def bulk_create(self, items: Iterable[dict[str, Any]]) -> list[ProductRecord]:
        """
        Insert many products, flushing `chunk_size` rows at a time.

        All chunks share the caller's transaction: a failure in any chunk rolls
        back the whole batch.
        """
        items = list(items)
        for item in items:
            self._check_create_kwargs(item)

        created: list[Product] = []
        start = time.perf_counter()
        for offset in range(0, len(items), self.chunk_size):
            chunk = [Product(**item) for item in items[offset:offset + self.chunk_size]]
            async with database_errors(self.db, "bulk_create", {"offset": offset, "chunk_size": len(chunk)}):
                self.db.add_all(chunk)
                await self.db.flush()
                # reload server-side values for the chunk in one round trip
                ids = [entity.id for entity in chunk]
                result = await self.db.execute(
                    select(Product)
                    .where(Product.id.in_(ids))
                    .execution_options(populate_existing=True)
                )
                by_id = {row.id: row for row in result.scalars().all()}
            created.extend(by_id[entity_id] for entity_id in ids)

        logger.info(
            "repo.product.bulk_create.success",
            extra={
                "created_count": len(created),
                "chunks": -(-len(items) // self.chunk_size),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return self._to_record(created)
