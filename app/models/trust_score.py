from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db import Base


class TrustScore(Base):
    """Proyección del estado actual (una fila por usuario, upsert)."""

    __tablename__ = "trust_scores"

    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    current_score = Column(Float, nullable=False, default=50.0)  # 0..100

    # factores (semántica depende del rol)
    on_time_delivery = Column(Float, nullable=True)
    customer_rating = Column(Float, nullable=True)
    pricing_competitiveness = Column(Float, nullable=True)  # reservado
    order_fulfillment = Column(Float, nullable=True)
    payment_timeliness = Column(Float, nullable=True)
    order_consistency = Column(Float, nullable=True)  # reservado
    platform_engagement = Column(Float, nullable=True)  # reservado

    total_orders = Column(Integer, nullable=False, default=0)
    successful_orders = Column(Integer, nullable=False, default=0)

    last_updated = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="trust_score")

    __table_args__ = (
        CheckConstraint("current_score BETWEEN 0 AND 100", name="ck_trust_scores_range"),
    )
