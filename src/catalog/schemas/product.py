"""
Typed request DTOs and the domain record for products.

Request schemas only declare shape and constraints; turning pydantic errors
into client messages is done by `catalog.validators.product_validators`.
"""
import math
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from catalog.constants import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    MAX_PAGE,
    MAX_PRICE,
    MAX_QUANTITY,
    SAMPLE_DATA_MAX_COUNT,
    SEARCH_MIN_LENGTH,
    SearchSortField,
    SortField,
    SortOrder,
    field_label,
)
from catalog.validators.normalizers import blank_to_none, to_uppercase

# Character classes are written without superfluous escapes; "-" sits last.
NAME_PATTERN = r"^[a-zA-Z0-9\s_.,&()-]+$"
CATEGORY_PATTERN = r"^[a-zA-Z0-9\s_&-]+$"
BRAND_PATTERN = r"^[a-zA-Z0-9\s_.&-]+$"
SKU_PATTERN = r"^[A-Z0-9_-]+$"

Name = Annotated[str, Field(min_length=2, max_length=255, pattern=NAME_PATTERN)]
Description = Annotated[str, Field(max_length=2000)]
Category = Annotated[str, Field(min_length=2, max_length=100, pattern=CATEGORY_PATTERN)]
Brand = Annotated[str, Field(min_length=1, max_length=100, pattern=BRAND_PATTERN)]
Price = Annotated[Decimal, Field(gt=0, le=Decimal(MAX_PRICE), decimal_places=2)]
Quantity = Annotated[int, Field(ge=0, le=MAX_QUANTITY)]
Sku = Annotated[str, Field(min_length=3, max_length=100, pattern=SKU_PATTERN)]
ImageUrl = Annotated[str, Field(max_length=500)]
Rating = Annotated[Decimal, Field(ge=0, le=5, decimal_places=2)]
PriceFilter = Annotated[Decimal, Field(ge=0, le=Decimal(MAX_PRICE), decimal_places=2)]
Page = Annotated[int, Field(ge=1, le=MAX_PAGE)]
Limit = Annotated[int, Field(ge=1, le=MAX_LIMIT)]

_http_url = TypeAdapter(AnyHttpUrl)


def _check_image_url(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Image URL must be a valid HTTP or HTTPS URL") from None
    return value


class _ProductWrite(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    @field_validator("description", mode="after", check_fields=False)
    @classmethod
    def empty_description_is_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("image_url", mode="after", check_fields=False)
    @classmethod
    def validate_image_url(cls, v: str | None) -> str | None:
        return _check_image_url(v)


class ProductCreate(_ProductWrite):
    name: Name
    description: Description | None = None
    category: Category
    brand: Brand
    price: Price
    stock_quantity: Quantity = 0
    sku: Sku
    image_url: ImageUrl | None = None
    rating: Rating = Decimal("0")
    review_count: Quantity = 0
    is_active: bool = True


class ProductUpdate(_ProductWrite):
    name: Name | None = None
    description: Description | None = None
    category: Category | None = None
    brand: Brand | None = None
    price: Price | None = None
    stock_quantity: Quantity | None = None
    sku: Sku | None = None
    image_url: ImageUrl | None = None
    rating: Rating | None = None
    review_count: Quantity | None = None
    is_active: bool | None = None

    @field_validator(
        "name", "category", "brand", "price", "stock_quantity",
        "sku", "rating", "review_count", "is_active",
        mode="after",
    )
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        # fields are optional in a patch, but an explicit null cannot be stored
        if v is None:
            raise ValueError(f"{field_label(info.field_name)} cannot be null")
        return v

    @model_validator(mode="after")
    def require_any_field(self) -> "ProductUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self

    def to_patch(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class _ListingQuery(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    page: Page = DEFAULT_PAGE
    limit: Limit = DEFAULT_LIMIT
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v):
        return to_uppercase(v)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class ProductFilters(_ListingQuery):
    category: Annotated[str, Field(max_length=100, pattern=CATEGORY_PATTERN)] | None = None
    brand: Annotated[str, Field(max_length=100, pattern=BRAND_PATTERN)] | None = None
    min_price: PriceFilter | None = None
    max_price: PriceFilter | None = None
    search: Annotated[str, Field(min_length=1, max_length=255, pattern=NAME_PATTERN)] | None = None
    sort_by: SortField = SortField.CREATED_AT
    is_active: bool = True

    @field_validator("category", "brand", "min_price", "max_price", "search", mode="before")
    @classmethod
    def blank_is_absent(cls, v):
        return blank_to_none(v)

    @field_validator("max_price", mode="after")
    @classmethod
    def max_above_min(cls, v: Decimal | None, info: ValidationInfo) -> Decimal | None:
        min_price = info.data.get("min_price")
        if v is not None and min_price is not None and v <= min_price:
            raise ValueError("Maximum price must be greater than minimum price")
        return v


class SearchQuery(_ListingQuery):
    q: Annotated[str, Field(min_length=SEARCH_MIN_LENGTH, max_length=255, pattern=NAME_PATTERN)]
    sort_by: SearchSortField = SearchSortField.CREATED_AT

    def to_filters(self) -> ProductFilters:
        return ProductFilters(
            page=self.page,
            limit=self.limit,
            search=self.q,
            sort_by=SortField(self.sort_by.value),
            sort_order=self.sort_order,
        )


class SampleDataRequest(BaseModel):
    """`count` is capped by `max_count` in the validation context, else SAMPLE_DATA_MAX_COUNT."""

    model_config = ConfigDict(extra="ignore")

    count: Annotated[int, Field(ge=1)] = 50

    @field_validator("count", mode="after")
    @classmethod
    def within_max_count(cls, v: int, info: ValidationInfo) -> int:
        limit = (info.context or {}).get("max_count", SAMPLE_DATA_MAX_COUNT)
        if v > limit:
            raise ValueError(f"Count cannot exceed {limit}")
        return v



class ProductId(BaseModel):
    id: uuid.UUID


# ---------------------------------------------------------------------------
# Domain / transport models
# ---------------------------------------------------------------------------


class ProductRecord(BaseModel):
    """
    A product as the rest of the application sees it.

    Built from ORM rows (`from_attributes`); numeric columns are exposed as
    floats so the JSON form carries numbers rather than decimal strings.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None = None
    category: str
    brand: str
    price: float
    stock_quantity: int
    sku: str
    image_url: str | None = None
    is_active: bool
    rating: float
    review_count: int
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def in_stock(self) -> bool:
        return self.is_in_stock()

    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    def discounted_price(self, percent: float) -> float:
        if not 0 <= percent <= 100:
            raise ValueError("Discount percent must be between 0 and 100")
        return round(self.price * (1 - percent / 100), 2)

    def average_rating(self) -> float:
        return self.rating if self.review_count > 0 else 0.0

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


class PagedProducts(BaseModel):
    items: list[ProductRecord]
    pagination: Pagination

    def to_json(self) -> dict[str, Any]:
        return {
            "products": [item.to_json() for item in self.items],
            "pagination": self.pagination.model_dump(),
        }


class PriceRange(BaseModel):
    min_price: float
    max_price: float


class FilterOptions(BaseModel):
    categories: list[str]
    brands: list[str]
    price_range: PriceRange
