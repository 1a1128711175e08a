# app/services/ledgers.py
"""
Ledgers de solo lectura que consume el trust score engine.

Cada ledger recibe la Session explícitamente (nada de repositorios
globales colgados de un pool compartido).
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.enums import OrderStatus, PaymentStatus, UserRole
from app.models.order import Order
from app.models.payment import Payment
from app.models.supplier_rating import SupplierRating
from app.models.user import User


def _role_value(role: UserRole | str) -> str:
    return role.value if isinstance(role, UserRole) else str(role)


class OrderLedger:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _party_column(self, role: UserRole | str):
        return Order.supplier_id if _role_value(role) == UserRole.SUPPLIER.value else Order.vendor_id

    def count_orders(self, user_id: str, role: UserRole | str) -> int:
        col = self._party_column(role)
        return int(self.db.query(func.count(Order.id)).filter(col == user_id).scalar() or 0)

    def count_by_status(self, user_id: str, role: UserRole | str, status: OrderStatus | str) -> int:
        col = self._party_column(role)
        st = status.value if isinstance(status, OrderStatus) else str(status)
        return int(
            self.db.query(func.count(Order.id))
            .filter(col == user_id, Order.status == st)
            .scalar()
            or 0
        )

    def count_on_time_deliveries(self, supplier_id: str) -> int:
        # entregadas con actual_delivery_time <= estimated_delivery_time
        return int(
            self.db.query(func.count(Order.id))
            .filter(
                Order.supplier_id == supplier_id,
                Order.status == OrderStatus.DELIVERED.value,
                Order.actual_delivery_time.isnot(None),
                Order.estimated_delivery_time.isnot(None),
                Order.actual_delivery_time <= Order.estimated_delivery_time,
            )
            .scalar()
            or 0
        )


class PaymentLedger:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _party_column(self, role: UserRole | str):
        return Payment.supplier_id if _role_value(role) == UserRole.SUPPLIER.value else Payment.vendor_id

    def count_completed(self, user_id: str, role: UserRole | str) -> int:
        col = self._party_column(role)
        return int(
            self.db.query(func.count(Payment.id))
            .filter(col == user_id, Payment.payment_status == PaymentStatus.COMPLETED.value)
            .scalar()
            or 0
        )

    def count_on_time_completed(self, user_id: str, role: UserRole | str) -> int:
        col = self._party_column(role)
        return int(
            self.db.query(func.count(Payment.id))
            .filter(
                col == user_id,
                Payment.payment_status == PaymentStatus.COMPLETED.value,
                Payment.paid_at.isnot(None),
                Payment.paid_at <= Payment.due_date,
            )
            .scalar()
            or 0
        )


class RatingLedger:
    def __init__(self, db: Session) -> None:
        self.db = db

    def ratings_for(self, supplier_id: str) -> List[float]:
        rows = (
            self.db.query(SupplierRating.rating)
            .filter(SupplierRating.supplier_id == supplier_id)
            .all()
        )
        return [float(r[0]) for r in rows if r[0] is not None]


class UserDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_role(self, user_id: str) -> Optional[UserRole]:
        row = self.db.query(User.role).filter(User.id == user_id).first()
        if not row:
            return None
        try:
            return UserRole(str(row[0]).strip().lower())
        except ValueError:
            return None

    def all_user_ids(self) -> List[str]:
        return [str(r[0]) for r in self.db.query(User.id).order_by(User.id.asc()).all()]
