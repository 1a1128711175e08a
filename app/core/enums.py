# app/core/enums.py
from enum import Enum


class UserRole(str, Enum):
    VENDOR = "vendor"
    SUPPLIER = "supplier"


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


# ---------------------------------------------------------------------
# Trust score: pesos fijos del recálculo (suman 100)
# ---------------------------------------------------------------------
class TrustWeight:
    ORDER_COMPLETION = 40.0
    PAYMENT_TIMELINESS = 30.0
    RATING = 30.0


MIN_TRUST_SCORE = 0.0
MAX_TRUST_SCORE = 100.0
MAX_RATING = 5.0
