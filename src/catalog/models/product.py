from sqlalchemy import (
    String,
    Text,
    DateTime,
    Boolean,
    Integer,
    Numeric,
    UUID,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func, expression
from datetime import datetime, timezone
from decimal import Decimal
import uuid


from catalog.database.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    SQLAlchemy model for a catalog product.

    Rows are never physically deleted; `is_active=False` marks a soft-deleted
    product and default read paths only return active rows. `sku` is unique
    across active and inactive rows alike.
    """
    __tablename__ = "products"

    __table_args__ = (
        CheckConstraint("price >= 0", name="price_non_negative"),
        CheckConstraint("stock_quantity >= 0", name="stock_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="rating_range"),
        CheckConstraint("review_count >= 0", name="review_count_non_negative"),
        # listing queries always filter on is_active first
        Index("ix_products_category_is_active", "category", "is_active"),
        Index("ix_products_brand_is_active", "brand", "is_active"),
        Index("ix_products_price_is_active", "price", "is_active"),
        Index("ix_products_name_is_active", "name", "is_active"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    brand: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, index=True)

    stock_quantity: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
        index=True,
    )

    # Stock keeping unit; the naming convention names the constraint uq_products_sku
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=expression.true(),
        nullable=False,
        index=True,
    )

    rating: Mapped[Decimal] = mapped_column(
        Numeric(3, 2),
        default=Decimal("0"),
        server_default="0",
        nullable=False,
        index=True,
    )

    review_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id!r}, sku={self.sku!r}, name={self.name!r})>"
