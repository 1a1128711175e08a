"""Shared test fixtures for the VendorConnect trust score API."""

from __future__ import annotations

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator

# Settings se instancia al importar app.config: el env va primero
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-32-bytes-long!!")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.core.security import issue_token
from app.db import Base, get_db
from app.models.order import Order
from app.models.payment import Payment
from app.models.supplier_rating import SupplierRating
from app.models.user import User

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(sql_engine):
    return sessionmaker(
        bind=sql_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
def db_session(session_factory) -> Iterator[Session]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory) -> Iterator[TestClient]:
    from app.main import app

    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict[str, str]:
    token = issue_token(user_id)
    return {"Authorization": f"Bearer {token}"}


# --- Factory functions for test data ---


def _id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def make_user(db: Session, **kwargs: Any) -> User:
    """Factory for User with sensible defaults (commits)."""
    defaults: dict[str, Any] = {
        "id": _id("user"),
        "name": "Test User",
        "role": "vendor",
        "is_active": True,
    }
    defaults.update(kwargs)
    user = User(**defaults)
    db.add(user)
    db.commit()
    return user


def make_order(db: Session, vendor: User, supplier: User | None = None, **kwargs: Any) -> Order:
    """Factory for Order; delivered on time unless told otherwise."""
    defaults: dict[str, Any] = {
        "id": _id("order"),
        "vendor_id": vendor.id,
        "supplier_id": supplier.id if supplier else None,
        "status": "delivered",
        "total_amount": 1000,
        "estimated_delivery_time": BASE_TIME + timedelta(hours=4),
        "actual_delivery_time": BASE_TIME + timedelta(hours=3),
    }
    defaults.update(kwargs)
    order = Order(**defaults)
    db.add(order)
    db.commit()
    return order


def make_payment(db: Session, order: Order, *, on_time: bool = True, **kwargs: Any) -> Payment:
    """Factory for a completed Payment, paid before (or after) its due date."""
    due = BASE_TIME + timedelta(days=7)
    defaults: dict[str, Any] = {
        "id": _id("pay"),
        "order_id": order.id,
        "vendor_id": order.vendor_id,
        "supplier_id": order.supplier_id,
        "amount": 1000,
        "payment_method": "upi",
        "payment_status": "completed",
        "due_date": due,
        "paid_at": due - timedelta(days=1) if on_time else due + timedelta(days=2),
    }
    defaults.update(kwargs)
    payment = Payment(**defaults)
    db.add(payment)
    db.commit()
    return payment


def make_rating(db: Session, order: Order, rating: int = 5, **kwargs: Any) -> SupplierRating:
    """Factory for SupplierRating against the order's supplier."""
    defaults: dict[str, Any] = {
        "id": _id("rating"),
        "order_id": order.id,
        "vendor_id": order.vendor_id,
        "supplier_id": order.supplier_id,
        "rating": rating,
    }
    defaults.update(kwargs)
    row = SupplierRating(**defaults)
    db.add(row)
    db.commit()
    return row


@pytest.fixture
def vendor(db_session: Session) -> User:
    return make_user(db_session, id="vendor-1", name="Ravi Chaat Corner", role="vendor")


@pytest.fixture
def supplier(db_session: Session) -> User:
    return make_user(db_session, id="supplier-1", name="Sharma Vegetables", role="supplier")
