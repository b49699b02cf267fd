"""Sample product generation for demos and load testing."""
import random
import re
import time
from decimal import Decimal
from typing import Any

from catalog.constants import (
    ADJECTIVES,
    BRANDS,
    CATEGORIES,
    SAMPLE_IMAGE_URL,
    SAMPLE_PRICE_RANGE,
    SAMPLE_RATING_RANGE,
    SAMPLE_REVIEW_RANGE,
    SAMPLE_STOCK_RANGE,
)

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def sku_part(value: str) -> str:
    """Upper-case `value` and keep only characters allowed in a SKU segment."""
    return _NON_ALNUM.sub("", value.upper())


def build_sample_products(
    count: int,
    *,
    rng: random.Random | None = None,
    timestamp_ms: int | None = None,
) -> list[dict[str, Any]]:
    """
    Build `count` product payloads from the catalog vocabulary.

    SKUs follow `SKU-<BRAND>-<CATEGORY>-<timestamp ms>-<NNN>`; the timestamp
    keeps SKUs distinct across batches and the index within one.
    """
    rng = rng or random.Random()
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)

    products = []
    for i in range(count):
        category = rng.choice(CATEGORIES)
        brand = rng.choice(BRANDS)
        adjective = rng.choice(ADJECTIVES)
        price = Decimal(str(round(rng.uniform(*SAMPLE_PRICE_RANGE), 2))).quantize(Decimal("0.01"))
        rating = Decimal(str(round(rng.uniform(*SAMPLE_RATING_RANGE), 2))).quantize(Decimal("0.01"))

        products.append(
            {
                "name": f"{adjective} {brand} {category} {i + 1}",
                "description": (
                    f"High-quality {category.lower()} product from {brand}. "
                    f"Perfect for everyday use with {adjective.lower()} features."
                ),
                "category": category,
                "brand": brand,
                "price": price,
                "stock_quantity": rng.randint(*SAMPLE_STOCK_RANGE),
                "sku": f"SKU-{sku_part(brand)}-{sku_part(category)}-{ts}-{i + 1:03d}",
                "image_url": SAMPLE_IMAGE_URL.format(seed=ts + i),
                "rating": rating,
                "review_count": rng.randint(*SAMPLE_REVIEW_RANGE),
                "is_active": True,
            }
        )
    return products
