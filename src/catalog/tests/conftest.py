"""
Core pytest configuration for the test suite.

Provides logging setup, the test Settings, a fresh database per test and the
session bound to it. Domain fixtures live in:
- tests/test_fixtures/repository_fixtures.py
- tests/test_fixtures/service_fixtures.py
- tests/test_fixtures/api_fixtures.py
and are imported at the bottom of this module so every test can use them.
"""

from __future__ import annotations

import logging
import os
from typing import AsyncGenerator
from urllib.parse import urlparse

# Silence chatty third-party loggers before anything imports them
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
    "httpcore",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)


import pytest
from pytest import FixtureRequest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from catalog.config.settings import Settings
from catalog.core.logging.builder import setup_logging
from catalog.database.session import Database

logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE = "sqlite+aiosqlite:///:memory:"
ADMIN_TOKEN = "test-admin-token"


def safe_log_db_url(db_url: str) -> str:
    """Database URL without credentials, for log lines."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url() -> str:
    """
    `TEST_DATABASE_URL` (CI against PostgreSQL) when set, otherwise an
    in-memory SQLite database that lives for a single test.
    """
    return os.getenv("TEST_DATABASE_URL") or IN_MEMORY_SQLITE


TEST_DATABASE_URL = get_test_database_url()


def make_test_settings(**overrides) -> Settings:
    values = {
        "ENV": "testing",
        "TESTING": True,
        "DATABASE_URL_OVERRIDE": TEST_DATABASE_URL,
        "DB_CREATE_SCHEMA": False,
        "ADMIN_TOKEN": ADMIN_TOKEN,
        "SAMPLE_DATA_DEFAULT_COUNT": 3,
        "BULK_INSERT_CHUNK_SIZE": 50,
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "text",
        "LOG_TO_STDOUT": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest):
    """
    Install the application logging configuration for the whole session and
    re-attach pytest's capture handler, which dictConfig removes.
    """
    setup_logging(make_test_settings())

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "log_cli_handler", None) if caplog_plugin else None
    if handler is not None:
        logging.getLogger().addHandler(handler)

    logger.info("tests.database", extra={"url": safe_log_db_url(TEST_DATABASE_URL)})
    yield


@pytest.fixture
def test_settings() -> Settings:
    return make_test_settings()


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """
    A Database with the schema created, torn down after the test.

    In-memory SQLite needs a StaticPool so every session shares the one
    connection that holds the schema.
    """
    engine_kwargs = {}
    if TEST_DATABASE_URL == IN_MEMORY_SQLITE:
        engine_kwargs["poolclass"] = StaticPool

    db = Database(TEST_DATABASE_URL, **engine_kwargs)
    await db.create_schema()
    try:
        yield db
    finally:
        await db.drop_schema()
        await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for repository and service tests. Uncommitted work is rolled back
    on exit; committed work disappears with the per-test schema.
    """
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.rollback()


# Fixture imports (registered globally)
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    product_repository,
    sample_product_data,
    create_product,
    created_product,
    multiple_products,
)
from .test_fixtures.service_fixtures import product_service  # noqa: E402,F401
from .test_fixtures.api_fixtures import app, client, admin_headers  # noqa: E402,F401
