from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from app.db import Base


class TrustScoreHistory(Base):
    """Event log append-only: una fila por recálculo. Nunca se actualiza."""

    __tablename__ = "trust_score_history"

    # BigInteger no autoincrementa en SQLite -> variant
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    score = Column(Float, nullable=False)
    factors = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    reason = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
