# app/services/trust_score_calc.py
"""Cálculo puro del trust score (sin BD): conteos -> score 0..100 + factores."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from app.core.enums import MAX_RATING, MAX_TRUST_SCORE, MIN_TRUST_SCORE, TrustWeight, UserRole


@dataclass(frozen=True)
class ScoreInputs:
    role: UserRole
    total_orders: int = 0
    delivered_orders: int = 0
    on_time_deliveries: int = 0
    completed_payments: int = 0
    on_time_payments: int = 0
    ratings: Tuple[float, ...] = ()


@dataclass(frozen=True)
class ScoreComputation:
    score: float
    factors: Dict[str, Optional[float]] = field(default_factory=dict)
    total_orders: int = 0
    successful_orders: int = 0


def clamp_score(value: float) -> float:
    return round(max(MIN_TRUST_SCORE, min(MAX_TRUST_SCORE, float(value))), 2)


def _ratio(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return max(0, part) / whole


def _average(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def compute_trust_score(inputs: ScoreInputs) -> ScoreComputation:
    """
    Mezcla fija de tres factores, cada uno puede valer 0 por falta de datos:

      - completion (40): delivered / total orders
      - payments   (30): completed con paid_at <= due_date / completed
      - rating     (30): avg(rating) / 5, solo suppliers

    El resultado se recorta a [0, 100].
    """
    fulfillment = _ratio(inputs.delivered_orders, inputs.total_orders)
    payment_timeliness = _ratio(inputs.on_time_payments, inputs.completed_payments)

    score = fulfillment * TrustWeight.ORDER_COMPLETION
    score += payment_timeliness * TrustWeight.PAYMENT_TIMELINESS

    factors: Dict[str, Optional[float]] = {
        "order_fulfillment": round(fulfillment, 4),
        "payment_timeliness": round(payment_timeliness, 4),
    }

    if inputs.role == UserRole.SUPPLIER:
        avg_rating = _average(inputs.ratings)
        if avg_rating is not None:
            score += (avg_rating / MAX_RATING) * TrustWeight.RATING
        factors["customer_rating"] = round(avg_rating, 4) if avg_rating is not None else 0.0
        # informativo, no entra al score
        factors["on_time_delivery"] = round(
            _ratio(inputs.on_time_deliveries, inputs.delivered_orders), 4
        )
    else:
        # solo aplican a suppliers: nunca se conserva un valor del caller
        factors["customer_rating"] = None
        factors["on_time_delivery"] = None

    return ScoreComputation(
        score=clamp_score(score),
        factors=factors,
        total_orders=max(0, int(inputs.total_orders)),
        successful_orders=max(0, int(inputs.delivered_orders)),
    )
