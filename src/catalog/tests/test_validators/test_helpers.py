import pytest

from catalog.config.settings import Settings
from catalog.models.product import Product
from catalog.utils.project import get_project_name, get_pyproject_value
from catalog.validators.model_validators import (
    find_missing_required,
    find_unknown_model_kwargs,
    get_required_columns,
)
from catalog.validators.normalizers import blank_to_none, split_csv, to_lowercase, to_uppercase


def test_required_columns_exclude_defaulted_and_nullable():
    assert sorted(get_required_columns(Product)) == ["brand", "category", "name", "price", "sku"]


def test_unknown_and_missing_kwargs():
    kwargs = {"name": "Widget", "sku": None, "colour": "red"}

    assert find_unknown_model_kwargs(Product, kwargs) == ["colour"]
    assert sorted(find_missing_required(Product, kwargs)) == ["brand", "category", "price", "sku"]


@pytest.mark.parametrize(
    "func,value,expected",
    [
        (to_uppercase, "asc", "ASC"),
        (to_uppercase, None, None),
        (to_lowercase, "JSON", "json"),
        (to_lowercase, 5, 5),
        (blank_to_none, "  ", None),
        (blank_to_none, "Tools", "Tools"),
        (split_csv, "http://a, http://b ,", ["http://a", "http://b"]),
        (split_csv, ["x"], ["x"]),
    ],
)
def test_normalizers(func, value, expected):
    assert func(value) == expected


def test_settings_normalize_and_build_url():
    settings = Settings(
        _env_file=None,
        LOG_LEVEL="debug",
        LOG_FORMAT="TEXT",
        CORS_ORIGINS="http://a.example,http://b.example",
        POSTGRES_DB="catalog",
        TEST_POSTGRES_DB="catalog_test",
        TESTING=True,
    )

    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "text"
    assert settings.CORS_ORIGINS == ["http://a.example", "http://b.example"]
    assert settings.DATABASE_URL.endswith("/catalog_test")
    assert settings.DATABASE_URL.startswith("postgresql+psycopg://")


def test_database_url_override_wins():
    settings = Settings(_env_file=None, DATABASE_URL_OVERRIDE="sqlite+aiosqlite:///./catalog.db")
    assert settings.DATABASE_URL == "sqlite+aiosqlite:///./catalog.db"


def test_project_metadata():
    assert get_project_name() == "product-catalog-api"
    assert get_pyproject_value("project.no_such_key", default="fallback") == "fallback"
