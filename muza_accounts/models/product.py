"""
Product and purchase models.

WHY: Products are the learning materials users buy. This service only reads
products; it records which ones a user bought.
"""

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey

from muza_accounts.models.base import Base, TimestampMixin, PrimaryKeyMixin, utcnow


class Product(Base, PrimaryKeyMixin, TimestampMixin):
    """Purchasable learning material."""

    __tablename__ = "products"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    material_url = Column(String(512), nullable=True)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name})>"


class BoughtProduct(Base, PrimaryKeyMixin):
    """
    One purchase of a product by a user.

    WHY: No unique constraint on (user_id, product_id); buying the same
    product twice is recorded twice.
    """

    __tablename__ = "bought_products"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    bought_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<BoughtProduct(id={self.id}, user_id={self.user_id}, "
            f"product_id={self.product_id})>"
        )
