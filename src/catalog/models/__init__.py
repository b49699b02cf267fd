"""
Single import point for the ORM models; importing this package registers every
table on `Base.metadata`.
"""

from .product import Product

__all__ = ["Product"]
