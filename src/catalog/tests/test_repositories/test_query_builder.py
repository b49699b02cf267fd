from decimal import Decimal

from sqlalchemy.dialects import postgresql

from catalog.constants import SortField, SortOrder
from catalog.repositories.query_builder import (
    build_count_query,
    build_list_query,
    build_ordering,
    build_predicates,
    build_window,
    escape_like,
)
from catalog.schemas.product import ProductFilters


def compile_pg(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


def test_default_filters_only_select_active_rows():
    predicates = build_predicates(ProductFilters())

    assert len(predicates) == 1
    assert "is_active" in str(predicates[0])


def test_every_filter_adds_a_predicate():
    filters = ProductFilters(
        category="Tools",
        brand="Acme",
        min_price=Decimal("1"),
        max_price=Decimal("10"),
        search="drill",
    )
    assert len(build_predicates(filters)) == 6


def test_search_matches_name_description_and_brand_case_insensitively():
    sql = compile_pg(build_list_query(ProductFilters(search="drill")))

    assert sql.count("ILIKE") == 3
    assert "products.name" in sql
    assert "products.description" in sql
    assert "products.brand" in sql


def test_like_wildcards_are_escaped():
    assert escape_like("50%_off") == "50\\%\\_off"
    assert escape_like("a\\b") == "a\\\\b"


def test_ordering_adds_id_tiebreak():
    """
    Behavior:
      - Sorting by price DESC yields two ORDER BY terms: price DESC, id ASC.

    Importance:
      - Rows sharing a price must come back in the same order on every page,
        otherwise pagination can skip or repeat products.
    """
    ordering = build_ordering(SortField.PRICE, SortOrder.DESC)
    rendered = [str(term) for term in ordering]

    assert rendered == ["products.price DESC", "products.id ASC"]


def test_window_from_page_and_limit():
    window = build_window(ProductFilters(page=3, limit=7))
    assert (window.offset, window.limit) == (14, 7)


def test_count_query_shares_predicates_with_list_query():
    filters = ProductFilters(category="Tools", min_price=Decimal("5"))
    count_sql = compile_pg(build_count_query(filters))
    list_sql = compile_pg(build_list_query(filters))

    for fragment in ("products.is_active", "products.category", "products.price >="):
        assert fragment in count_sql
        assert fragment in list_sql
    assert "ORDER BY" not in count_sql
    assert "LIMIT" in list_sql


def test_sortable_columns_cover_every_sort_field():
    for field in SortField:
        ordering = build_ordering(field, SortOrder.ASC)
        assert [str(term) for term in ordering] == [f"products.{field.value} ASC", "products.id ASC"]
