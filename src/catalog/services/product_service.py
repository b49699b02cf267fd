"""
Product business logic.

The service validates raw input, enforces the catalog rules that the store
alone cannot express with a friendly error (SKU uniqueness, existence before
update/delete), owns the transaction boundary (commit) and returns
transport-ready dicts.

Error policy: `CatalogError`s raised below (validation, not found, classified
database errors) propagate unchanged; anything else is logged with its stack
trace and wrapped in `InternalServerError`.
"""
import logging
import random
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config.settings import Settings, get_settings
from catalog.constants import SEARCH_MIN_LENGTH
from catalog.exceptions.base import (
    BadRequestError,
    CatalogError,
    InternalServerError,
    NotFoundError,
)
from catalog.exceptions.mapper import database_errors
from catalog.repositories.product_repository import ProductRepository
from catalog.schemas.product import (
    ProductCreate,
    ProductFilters,
    ProductRecord,
    ProductUpdate,
    SampleDataRequest,
    SearchQuery,
)
from catalog.validators.product_validators import validate_or_raise, validate_product_id

from .sample_data import build_sample_products

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        *,
        repository: ProductRepository | None = None,
        rng: random.Random | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.repository = repository or ProductRepository(
            db, chunk_size=self.settings.BULK_INSERT_CHUNK_SIZE
        )
        self.rng = rng or random.Random()

    @asynccontextmanager
    async def _operation(self, name: str, failure_message: str) -> AsyncIterator[None]:
        try:
            yield
        except CatalogError:
            raise
        except Exception as exc:
            logger.exception("service.product.unexpected_error", extra={"operation": name})
            raise InternalServerError(failure_message, metadata={"operation": name}) from exc

    async def _commit(self, operation: str) -> None:
        async with database_errors(self.db, f"{operation}.commit"):
            await self.db.commit()

    async def _require_product(self, product_id: UUID) -> ProductRecord:
        product = await self.repository.find_by_id(product_id)
        if product is None:
            logger.info("service.product.not_found", extra={"id": str(product_id)})
            raise NotFoundError("Product not found", metadata={"id": str(product_id)})
        return product

    # =================================================================================================================
    # Queries
    # =================================================================================================================

    async def get_products(
        self,
        query: Mapping[str, Any] | None = None,
        *,
        allow_inactive: bool = False,
    ) -> dict[str, Any]:
        """
        List products for a raw query mapping (page, limit, filters, sort).

        Listing inactive products (`is_active=false`) is reserved for admin
        callers; everyone else gets BadRequestError.
        """
        async with self._operation("get_products", "Error retrieving products"):
            filters = validate_or_raise(ProductFilters, query)
            if not filters.is_active and not allow_inactive:
                raise BadRequestError(
                    "Listing inactive products requires admin access",
                    metadata={"operation": "get_products"},
                )
            page = await self.repository.find_with_filters(filters)
            return page.to_json()

    async def search_products(self, query: Mapping[str, Any] | None = None) -> dict[str, Any]:
        async with self._operation("search_products", "Error searching products"):
            term = (query or {}).get("q")
            if not isinstance(term, str) or len(term.strip()) < SEARCH_MIN_LENGTH:
                raise BadRequestError(
                    f"Search query must be at least {SEARCH_MIN_LENGTH} characters long"
                )
            params = validate_or_raise(SearchQuery, query)
            page = await self.repository.find_with_filters(params.to_filters())
            logger.info(
                "service.product.search",
                extra={"term_length": len(params.q), "total": page.pagination.total_items},
            )
            return page.to_json()

    async def get_product_by_id(self, product_id: Any) -> dict[str, Any]:
        async with self._operation("get_product_by_id", "Error retrieving product"):
            product = await self._require_product(validate_product_id(product_id))
            return product.to_json()

    async def get_filter_options(self) -> dict[str, Any]:
        async with self._operation("get_filter_options", "Error retrieving filter options"):
            options = await self.repository.get_filter_options()
            return options.model_dump()

    # =================================================================================================================
    # Commands
    # =================================================================================================================

    async def create_product(self, data: Mapping[str, Any] | None) -> dict[str, Any]:
        async with self._operation("create_product", "Error creating product"):
            payload = validate_or_raise(ProductCreate, data)

            # the unique constraint stays the backstop for concurrent creates
            if await self.repository.is_sku_exists(payload.sku):
                logger.info("service.product.sku_conflict", extra={"operation": "create_product"})
                raise BadRequestError("SKU already exists", metadata={"sku": payload.sku})

            product = await self.repository.create(payload.model_dump())
            await self._commit("create_product")

            logger.info("service.product.created", extra={"id": str(product.id)})
            return product.to_json()

    async def update_product(self, product_id: Any, data: Mapping[str, Any] | None) -> dict[str, Any]:
        async with self._operation("update_product", "Error updating product"):
            pid = validate_product_id(product_id)
            patch = validate_or_raise(ProductUpdate, data).to_patch()

            await self._require_product(pid)

            if "sku" in patch and await self.repository.is_sku_exists(patch["sku"], exclude_id=pid):
                logger.info("service.product.sku_conflict", extra={"operation": "update_product", "id": str(pid)})
                raise BadRequestError("SKU already exists for another product", metadata={"sku": patch["sku"]})

            product = await self.repository.update(pid, patch)
            if product is None:
                raise NotFoundError("Product not found", metadata={"id": str(pid)})
            await self._commit("update_product")

            logger.info("service.product.updated", extra={"id": str(pid), "updated_fields": sorted(patch)})
            return product.to_json()

    async def delete_product(self, product_id: Any) -> bool:
        async with self._operation("delete_product", "Error deleting product"):
            pid = validate_product_id(product_id)
            await self._require_product(pid)

            if not await self.repository.soft_delete(pid):
                raise NotFoundError("Product not found", metadata={"id": str(pid)})
            await self._commit("delete_product")

            logger.info("service.product.deleted", extra={"id": str(pid)})
            return True

    async def generate_sample_data(self, data: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Insert `count` generated products (default SAMPLE_DATA_DEFAULT_COUNT,
        at most SAMPLE_DATA_MAX_COUNT).

        Returns:
            {"requested": n, "created": m, "products": [...]}
        """
        async with self._operation("generate_sample_data", "Error generating sample data"):
            raw = dict(data or {})
            raw.setdefault("count", self.settings.SAMPLE_DATA_DEFAULT_COUNT)
            params = validate_or_raise(
                SampleDataRequest, raw, context={"max_count": self.settings.SAMPLE_DATA_MAX_COUNT}
            )

            products = await self.repository.bulk_create(
                build_sample_products(params.count, rng=self.rng)
            )
            await self._commit("generate_sample_data")

            logger.info(
                "service.product.sample_data_generated",
                extra={"requested": params.count, "created_count": len(products)},
            )
            return {
                "requested": params.count,
                "created": len(products),
                "products": [product.to_json() for product in products],
            }
