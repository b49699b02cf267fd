from .base_repository import BaseRepository
from .product_repository import ProductRepository

__all__ = ["BaseRepository", "ProductRepository"]
