"""Fixtures for service tests."""

import random

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config.settings import Settings
from catalog.services.product_service import ProductService


@pytest.fixture
async def product_service(db_session: AsyncSession, test_settings: Settings) -> ProductService:
    """
    ProductService bound to the test session. Commits made by the service are
    discarded with the per-test schema; the seeded RNG keeps generated sample
    data reproducible.
    """
    return ProductService(db_session, test_settings, rng=random.Random(42))
