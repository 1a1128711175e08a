from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.enums import UserRole

T = TypeVar("T")


class CamelModel(BaseModel):
    # JSON en camelCase (userId, currentScore...) pero se aceptan ambos nombres
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TrustScoreFactors(CamelModel):
    on_time_delivery: Optional[float] = Field(default=None, ge=0)
    customer_rating: Optional[float] = Field(default=None, ge=0)
    pricing_competitiveness: Optional[float] = Field(default=None, ge=0)
    order_fulfillment: Optional[float] = Field(default=None, ge=0)
    payment_timeliness: Optional[float] = Field(default=None, ge=0)
    order_consistency: Optional[float] = Field(default=None, ge=0)
    platform_engagement: Optional[float] = Field(default=None, ge=0)


FACTOR_FIELDS = tuple(TrustScoreFactors.model_fields.keys())


class TrustScoreOut(CamelModel):
    user_id: str
    current_score: float
    factors: TrustScoreFactors
    total_orders: int = 0
    successful_orders: int = 0
    last_updated: datetime


class TrustScoreHistoryOut(CamelModel):
    id: int
    user_id: str
    score: float
    factors: Dict[str, Any] = Field(default_factory=dict)
    reason: str
    timestamp: datetime


class TrustTrendPoint(CamelModel):
    score: float
    timestamp: datetime


class RankingEntry(CamelModel):
    rank: int
    user_id: str
    current_score: float
    factors: TrustScoreFactors
    last_updated: datetime


# ---------------------------------------------------------------------
# Entradas
# ---------------------------------------------------------------------
class FactorUpdate(CamelModel):
    """
    Bolsa de factores tipada (antes era un `any` del body).
      - recalculate=True  -> el score sale del recálculo
      - recalculate=False -> se usa current_score del caller (override)
    """

    recalculate: bool = False
    current_score: Optional[float] = Field(default=None, ge=0, le=100)
    factors: TrustScoreFactors = Field(default_factory=TrustScoreFactors)
    reason: Optional[str] = Field(default=None, max_length=255)


class RecalculateRequest(CamelModel):
    # Opcionales a nivel schema: el router responde BAD_REQUEST con mensaje propio
    user_id: Optional[str] = Field(default=None, max_length=64)
    role: Optional[UserRole] = None


# ---------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------
class ApiError(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[ApiError] = None


class RecalculationResult(CamelModel):
    user_id: str
    new_score: float


__all__ = [
    "ApiResponse",
    "FACTOR_FIELDS",
    "FactorUpdate",
    "RankingEntry",
    "RecalculateRequest",
    "RecalculationResult",
    "TrustScoreFactors",
    "TrustScoreHistoryOut",
    "TrustScoreOut",
    "TrustTrendPoint",
]
