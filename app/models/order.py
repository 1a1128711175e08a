from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, func

from app.db import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)

    vendor_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    supplier_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)

    # pending/accepted/in_progress/out_for_delivery/delivered/cancelled
    status = Column(String(32), nullable=False, server_default="pending", index=True)

    total_amount = Column(Numeric(12, 2), nullable=False, server_default="0")

    estimated_delivery_time = Column(DateTime(timezone=True), nullable=True)
    actual_delivery_time = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
