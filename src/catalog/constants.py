"""Catalog-wide constants: sortable fields, paging bounds and sample data vocabulary."""
from enum import Enum

API_VERSION = "v1"

DEFAULT_PAGE = 1
MAX_PAGE = 10_000
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

MAX_PRICE = "999999.99"
MAX_QUANTITY = 999_999

SEARCH_MIN_LENGTH = 2

SAMPLE_DATA_MAX_COUNT = 1000

# client-facing names used in validation messages
FIELD_LABELS = {
    "name": "Product name",
    "description": "Description",
    "category": "Category",
    "brand": "Brand",
    "price": "Price",
    "stock_quantity": "Stock quantity",
    "sku": "SKU",
    "image_url": "Image URL",
    "rating": "Rating",
    "review_count": "Review count",
    "is_active": "Active status",
    "page": "Page",
    "limit": "Limit",
    "min_price": "Minimum price",
    "max_price": "Maximum price",
    "search": "Search term",
    "q": "Search query",
    "count": "Count",
    "id": "Product ID",
}


def field_label(name: str) -> str:
    return FIELD_LABELS.get(name, name.replace("_", " ").capitalize())


# price range reported by filter options when there are no active products
EMPTY_PRICE_RANGE = {"min_price": 0.0, "max_price": 1000.0}


class SortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    RATING = "rating"
    CREATED_AT = "created_at"
    CATEGORY = "category"
    BRAND = "brand"
    STOCK_QUANTITY = "stock_quantity"


class SearchSortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    RATING = "rating"
    CREATED_AT = "created_at"
    CATEGORY = "category"
    BRAND = "brand"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


CATEGORIES = (
    "Electronics",
    "Clothing",
    "Books",
    "Home & Garden",
    "Sports",
    "Toys",
    "Beauty",
    "Automotive",
    "Health",
    "Food",
)

BRANDS = (
    "Apple",
    "Samsung",
    "Nike",
    "Adidas",
    "Sony",
    "Microsoft",
    "Amazon",
    "Google",
    "Dell",
    "HP",
    "Canon",
    "LG",
)

ADJECTIVES = (
    "Premium",
    "Ultra",
    "Pro",
    "Max",
    "Elite",
    "Smart",
    "Advanced",
    "Classic",
    "Modern",
    "Luxury",
)

SAMPLE_PRICE_RANGE = (10, 1000)
SAMPLE_STOCK_RANGE = (1, 100)
SAMPLE_RATING_RANGE = (3, 5)
SAMPLE_REVIEW_RANGE = (1, 500)
SAMPLE_IMAGE_URL = "https://picsum.photos/400/400?random={seed}"
