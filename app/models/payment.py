from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, func

from app.db import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(64), primary_key=True)

    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    vendor_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    supplier_id = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(32), nullable=True)  # upi/invoice/pay_later

    # pending/processing/completed/failed/refunded
    payment_status = Column(String(16), nullable=False, server_default="pending", index=True)

    due_date = Column(DateTime(timezone=True), nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
