"""
Translate validated product filters into SQLAlchemy query parts.

The builder is pure: it produces a predicate list, an ordering and a page
window, and never touches a session. Listing and counting share the same
predicates so `total_items` always describes the rows being paged through.
"""
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, and_, func, or_, select
from sqlalchemy.sql.elements import UnaryExpression

from catalog.constants import SortField, SortOrder
from catalog.models.product import Product
from catalog.schemas.product import ProductFilters

# Columns a client may sort by; anything else never reaches SQL.
SORTABLE_COLUMNS = {
    SortField.NAME: Product.name,
    SortField.PRICE: Product.price,
    SortField.RATING: Product.rating,
    SortField.CREATED_AT: Product.created_at,
    SortField.CATEGORY: Product.category,
    SortField.BRAND: Product.brand,
    SortField.STOCK_QUANTITY: Product.stock_quantity,
}

SEARCH_COLUMNS = (Product.name, Product.description, Product.brand)

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class PageWindow:
    offset: int
    limit: int


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input only ever matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def build_predicates(filters: ProductFilters) -> list[ColumnElement[bool]]:
    predicates: list[ColumnElement[bool]] = [Product.is_active == filters.is_active]

    if filters.category is not None:
        predicates.append(Product.category == filters.category)
    if filters.brand is not None:
        predicates.append(Product.brand == filters.brand)
    if filters.min_price is not None:
        predicates.append(Product.price >= filters.min_price)
    if filters.max_price is not None:
        predicates.append(Product.price <= filters.max_price)

    if filters.search is not None:
        pattern = f"%{escape_like(filters.search)}%"
        predicates.append(
            or_(*(column.ilike(pattern, escape=LIKE_ESCAPE) for column in SEARCH_COLUMNS))
        )

    return predicates


def build_ordering(sort_by: SortField, sort_order: SortOrder) -> list[UnaryExpression]:
    """
    Primary sort plus `id ASC` as tiebreak, so pages stay stable when many rows
    share the sort value.
    """
    column = SORTABLE_COLUMNS[SortField(sort_by)]
    primary = column.asc() if SortOrder(sort_order) is SortOrder.ASC else column.desc()

    ordering = [primary]
    if column is not Product.id:
        ordering.append(Product.id.asc())
    return ordering


def build_window(filters: ProductFilters) -> PageWindow:
    return PageWindow(offset=(filters.page - 1) * filters.limit, limit=filters.limit)


def build_list_query(filters: ProductFilters) -> Select:
    window = build_window(filters)
    return (
        select(Product)
        .where(and_(*build_predicates(filters)))
        .order_by(*build_ordering(filters.sort_by, filters.sort_order))
        .offset(window.offset)
        .limit(window.limit)
    )


def build_count_query(filters: ProductFilters) -> Select:
    return select(func.count()).select_from(Product).where(and_(*build_predicates(filters)))
