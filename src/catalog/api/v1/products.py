"""
Product endpoints.

FastAPI parses and documents the inputs: listing and search parameters are
declared with `Query`, write payloads with `Body`. Values are handed to
`ProductService` as plain mappings and the service's validators turn them
into typed DTOs with client-facing messages. Results are wrapped in the
`{"success": true, ...}` envelope; failures are rendered by the exception
handlers in `error_handlers.py`.
"""
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from catalog.constants import DEFAULT_LIMIT, MAX_LIMIT, MAX_PAGE, SEARCH_MIN_LENGTH, SearchSortField, SortField
from catalog.core.dependencies import get_product_service, is_admin
from catalog.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

# Parameters stay strings here so every rule is reported by the service's
# validators in one 422 with the catalog's wording.
PageParam = Annotated[str | None, Query(description=f"Page number, 1-{MAX_PAGE} (default 1)", examples=["1"])]
LimitParam = Annotated[
    str | None,
    Query(description=f"Items per page, 1-{MAX_LIMIT} (default {DEFAULT_LIMIT})", examples=[str(DEFAULT_LIMIT)]),
]
SortOrderParam = Annotated[str | None, Query(description="ASC or DESC, case-insensitive (default DESC)")]

PRODUCT_EXAMPLE = {
    "name": "Smart Speaker",
    "description": "Voice controlled speaker",
    "category": "Electronics",
    "brand": "Acme",
    "price": 49.99,
    "stock_quantity": 25,
    "sku": "ACME-SPK-001",
    "image_url": "https://example.com/speaker.png",
}


def _present(**params: str | None) -> dict[str, str]:
    return {name: value for name, value in params.items() if value is not None}


def listing_params(
    page: PageParam = None,
    limit: LimitParam = None,
    sort_by: Annotated[
        str | None,
        Query(description="Sort field: " + ", ".join(f.value for f in SortField) + " (default created_at)"),
    ] = None,
    sort_order: SortOrderParam = None,
    category: Annotated[str | None, Query(description="Exact category")] = None,
    brand: Annotated[str | None, Query(description="Exact brand")] = None,
    min_price: Annotated[str | None, Query(description="Lowest price, inclusive")] = None,
    max_price: Annotated[str | None, Query(description="Highest price, inclusive; must exceed min_price")] = None,
    search: Annotated[str | None, Query(description="Substring of name, description or brand")] = None,
    is_active: Annotated[
        str | None,
        Query(description="false lists inactive products and needs the X-Admin-Token header (default true)"),
    ] = None,
) -> dict[str, str]:
    return _present(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        search=search,
        is_active=is_active,
    )


def search_params(
    q: Annotated[str | None, Query(description=f"Search term, at least {SEARCH_MIN_LENGTH} characters")] = None,
    page: PageParam = None,
    limit: LimitParam = None,
    sort_by: Annotated[
        str | None,
        Query(description="Sort field: " + ", ".join(f.value for f in SearchSortField) + " (default created_at)"),
    ] = None,
    sort_order: SortOrderParam = None,
) -> dict[str, str]:
    return _present(q=q, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


@router.get(
    "",
    summary="List products",
    description="Paginated product list with category/brand/price/search filters and sorting.",
)
async def list_products(
    query: dict[str, str] = Depends(listing_params),
    service: ProductService = Depends(get_product_service),
    admin: bool = Depends(is_admin),
):
    data = await service.get_products(query, allow_inactive=admin)
    return {"success": True, "data": data}


@router.get(
    "/search",
    summary="Search products",
    description="Case-insensitive search over name, description and brand. `q` needs at least 2 characters.",
)
async def search_products(
    query: dict[str, str] = Depends(search_params),
    service: ProductService = Depends(get_product_service),
):
    data = await service.search_products(query)
    return {"success": True, "data": data}


@router.get(
    "/filters/options",
    summary="Filter options",
    description="Distinct categories and brands plus the price range of active products.",
)
async def filter_options(service: ProductService = Depends(get_product_service)):
    data = await service.get_filter_options()
    return {"success": True, "data": data}


@router.post(
    "/generate",
    summary="Generate sample products",
    description="Insert `count` generated products. The body is optional; `count` defaults to "
    "SAMPLE_DATA_DEFAULT_COUNT and is capped by SAMPLE_DATA_MAX_COUNT.",
)
async def generate_sample_data(
    payload: Annotated[dict[str, Any] | None, Body(examples=[{"count": 10}])] = None,
    service: ProductService = Depends(get_product_service),
):
    data = await service.generate_sample_data(payload)
    return {
        "success": True,
        "message": f"Generated {data['created']} sample products",
        "data": data,
    }


@router.get("/{product_id}", summary="Get product by ID")
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    data = await service.get_product_by_id(product_id)
    return {"success": True, "data": data}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a product")
async def create_product(
    payload: Annotated[dict[str, Any], Body(examples=[PRODUCT_EXAMPLE])],
    service: ProductService = Depends(get_product_service),
):
    data = await service.create_product(payload)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"success": True, "data": data, "message": "Product created successfully"},
    )


@router.put("/{product_id}", summary="Update a product", description="Partial update; only sent fields change.")
async def update_product(
    product_id: str,
    payload: Annotated[dict[str, Any], Body(examples=[{"price": 39.99, "stock_quantity": 10}])],
    service: ProductService = Depends(get_product_service),
):
    data = await service.update_product(product_id, payload)
    return {"success": True, "data": data, "message": "Product updated successfully"}


@router.delete("/{product_id}", summary="Delete a product", description="Soft delete: the product becomes inactive.")
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    await service.delete_product(product_id)
    return {"success": True, "message": "Product deleted successfully"}
