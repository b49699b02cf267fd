"""Fixtures for HTTP-level tests."""

from typing import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI

from catalog.config.settings import Settings
from catalog.database.session import Database
from catalog.main import create_app


@pytest.fixture
def app(test_settings: Settings, database: Database) -> FastAPI:
    """
    Application wired to the per-test database. The database is injected, so
    the lifespan never opens a second engine.
    """
    return create_app(test_settings, database=database)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    httpx client talking to the app in-process.

    Usage:
        resp = await client.get("/api/v1/products")
    """
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def admin_headers(test_settings: Settings) -> dict[str, str]:
    return {"X-Admin-Token": test_settings.ADMIN_TOKEN}
