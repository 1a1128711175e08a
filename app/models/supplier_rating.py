from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)

from app.db import Base


class SupplierRating(Base):
    __tablename__ = "supplier_ratings"

    id = Column(String(64), primary_key=True)

    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    vendor_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    supplier_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)  # 1..5 (el único que entra al trust score)
    delivery_rating = Column(Integer, nullable=True)
    quality_rating = Column(Integer, nullable=True)
    service_rating = Column(Integer, nullable=True)

    review = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_supplier_ratings_rating_range"),
        # un vendor califica una sola vez cada orden
        UniqueConstraint("order_id", "vendor_id", name="uq_supplier_rating_order_vendor"),
    )
