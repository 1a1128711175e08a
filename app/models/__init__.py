# app/models/__init__.py

from app.models.user import User
from app.models.order import Order
from app.models.payment import Payment
from app.models.supplier_rating import SupplierRating
from app.models.trust_score import TrustScore
from app.models.trust_score_history import TrustScoreHistory


__all__ = [
    "User",
    "Order",
    "Payment",
    "SupplierRating",
    "TrustScore",
    "TrustScoreHistory",
]
