"""HTTP tests for /trust-score: envelope, auth and error codes."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from app.main import app
from app.routers.trust_score import get_trust_score_engine
from app.services.trust_score import TrustScoreEngine
from app.services.trust_score_store import TrustScoreStore
from tests.conftest import auth_headers, make_order, make_payment, make_rating, make_user


@pytest.fixture
def headers(vendor):
    return auth_headers(vendor.id)


def _seed_score(client, headers, user_id, score):
    resp = client.post(
        f"/trust-score/update-factors/{user_id}",
        json={"currentScore": score},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text


# --- auth / system ---


def test_health_needs_no_token(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_missing_token_is_unauthorized(client, vendor):
    resp = client.get(f"/trust-score/score/{vendor.id}")

    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"


def test_token_for_unknown_user_is_unauthorized(client, vendor):
    resp = client.get(f"/trust-score/score/{vendor.id}", headers=auth_headers("ghost"))
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHORIZED"


def test_inactive_user_is_unauthorized(client, db_session):
    user = make_user(db_session, id="vendor-off", role="vendor", is_active=False)
    resp = client.get("/trust-score/rankings", headers=auth_headers(user.id))
    assert resp.status_code == 401


def test_user_with_null_is_active_is_accepted(client, db_session):
    user = make_user(db_session, id="vendor-legacy", role="vendor", is_active=None)

    resp = client.get("/auth/me", headers=auth_headers(user.id))
    assert resp.status_code == 200
    assert resp.json()["id"] == "vendor-legacy"
    assert client.get("/trust-score/rankings", headers=auth_headers(user.id)).status_code == 200


def test_auth_me(client, vendor, headers):
    resp = client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == vendor.id


# --- GET /score ---


def test_score_not_found(client, vendor, headers):
    resp = client.get(f"/trust-score/score/{vendor.id}", headers=headers)

    assert resp.status_code == 404
    assert resp.json() == {
        "success": False,
        "error": {"code": "NOT_FOUND", "message": "Trust score not found for this user."},
    }


def test_score_after_initialize(client, session_factory, vendor, headers):
    db = session_factory()
    try:
        TrustScoreEngine(db).initialize(vendor.id)
    finally:
        db.close()

    resp = client.get(f"/trust-score/score/{vendor.id}", headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["userId"] == vendor.id
    assert data["currentScore"] == 50
    assert data["factors"]["orderFulfillment"] == 0.0
    assert data["totalOrders"] == 0
    assert "lastUpdated" in data


# --- POST /recalculate ---


def test_recalculate_requires_user_and_role(client, vendor, headers):
    resp = client.post("/trust-score/recalculate", json={"userId": vendor.id}, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["error"] == {"code": "BAD_REQUEST", "message": "userId and role are required."}


def test_recalculate_rejects_unknown_role(client, vendor, headers):
    resp = client.post(
        "/trust-score/recalculate",
        json={"userId": vendor.id, "role": "admin"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "BAD_REQUEST"


def test_recalculate_role_mismatch(client, vendor, headers):
    resp = client.post(
        "/trust-score/recalculate",
        json={"userId": vendor.id, "role": "supplier"},
        headers=headers,
    )
    assert resp.status_code == 400


def test_recalculate_unknown_user(client, headers):
    resp = client.post(
        "/trust-score/recalculate",
        json={"userId": "ghost", "role": "vendor"},
        headers=headers,
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


def test_recalculate_persists_new_score(client, db_session, vendor, supplier, headers):
    for _ in range(2):
        order = make_order(db_session, vendor, supplier)
        make_payment(db_session, order)
        make_rating(db_session, order, rating=4)

    resp = client.post(
        "/trust-score/recalculate",
        json={"userId": supplier.id, "role": "supplier"},
        headers=headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Trust score recalculation triggered successfully."
    # 40 + 30 + 4/5*30
    assert body["data"] == {"userId": supplier.id, "newScore": 94.0}

    score = client.get(f"/trust-score/score/{supplier.id}", headers=headers).json()["data"]
    assert score["currentScore"] == 94.0
    assert score["factors"]["customerRating"] == 4.0
    assert score["successfulOrders"] == 2


# --- POST /update-factors ---


def test_update_factors_override(client, vendor, headers):
    resp = client.post(
        f"/trust-score/update-factors/{vendor.id}",
        json={"currentScore": 81.5, "factors": {"platformEngagement": 0.9}, "reason": "Onboarding bonus"},
        headers=headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Trust factors updated."
    assert body["data"]["currentScore"] == 81.5
    assert body["data"]["factors"]["platformEngagement"] == 0.9

    history = client.get(f"/trust-score/history/{vendor.id}", headers=headers).json()["data"]
    assert history[0]["reason"] == "Onboarding bonus"
    assert history[0]["score"] == 81.5


def test_update_factors_recalculate(client, db_session, vendor, supplier, headers):
    order = make_order(db_session, vendor, supplier)
    make_payment(db_session, order)

    resp = client.post(
        f"/trust-score/update-factors/{vendor.id}",
        json={"recalculate": True},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Trust factors updated and score recalculated."
    assert resp.json()["data"]["currentScore"] == 70


def test_update_factors_rejects_out_of_range_score(client, vendor, headers):
    resp = client.post(
        f"/trust-score/update-factors/{vendor.id}",
        json={"currentScore": 150},
        headers=headers,
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "BAD_REQUEST"
    assert body["error"]["details"]


def test_update_factors_without_score_or_recalculate(client, vendor, headers):
    resp = client.post(f"/trust-score/update-factors/{vendor.id}", json={}, headers=headers)
    assert resp.status_code == 400


# --- GET /history, /trend ---


def test_history_newest_first(client, vendor, headers):
    for score in (40, 55, 62):
        _seed_score(client, headers, vendor.id, score)

    resp = client.get(f"/trust-score/history/{vendor.id}", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [h["score"] for h in data] == [62, 55, 40]
    assert {"id", "userId", "score", "factors", "reason", "timestamp"} <= set(data[0])

    limited = client.get(f"/trust-score/history/{vendor.id}?limit=1", headers=headers).json()["data"]
    assert len(limited) == 1


def test_history_empty_for_user_without_scores(client, vendor, headers):
    resp = client.get(f"/trust-score/history/{vendor.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == []


def test_trend(client, vendor, headers):
    for score in (30, 45):
        _seed_score(client, headers, vendor.id, score)

    data = client.get(f"/trust-score/trend/{vendor.id}", headers=headers).json()["data"]
    assert [p["score"] for p in data] == [45, 30]
    assert "timestamp" in data[0]


# --- GET /rankings ---


def test_rankings_order_and_rank(client, db_session, vendor, headers):
    _seed_score(client, headers, vendor.id, 61)
    for uid, score in (("s-1", 88), ("s-2", 45)):
        make_user(db_session, id=uid, role="supplier")
        _seed_score(client, headers, uid, score)

    data = client.get("/trust-score/rankings", headers=headers).json()["data"]
    assert [(e["rank"], e["userId"], e["currentScore"]) for e in data] == [
        (1, "s-1", 88),
        (2, vendor.id, 61),
        (3, "s-2", 45),
    ]

    suppliers = client.get("/trust-score/rankings?role=supplier&limit=1", headers=headers).json()["data"]
    assert [e["userId"] for e in suppliers] == ["s-1"]


def test_rankings_rejects_unknown_role(client, headers):
    resp = client.get("/trust-score/rankings?role=admin", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "BAD_REQUEST"


# --- 500 ---


class _BrokenStore(TrustScoreStore):
    def _append_history(self, user_id, **kwargs):
        raise OperationalError("INSERT INTO trust_score_history", {}, Exception("database is locked"))


def test_storage_failure_is_server_error(client, session_factory, vendor, headers):
    def _broken_engine():
        db = session_factory()
        try:
            yield TrustScoreEngine(db, store=_BrokenStore(db))
        finally:
            db.close()

    app.dependency_overrides[get_trust_score_engine] = _broken_engine
    try:
        resp = client.post(
            f"/trust-score/update-factors/{vendor.id}",
            json={"currentScore": 70},
            headers=headers,
        )
    finally:
        app.dependency_overrides.pop(get_trust_score_engine, None)

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "SERVER_ERROR"
    assert body["error"]["message"] == "Failed to persist trust score."

    # nada quedó a medias
    assert client.get(f"/trust-score/score/{vendor.id}", headers=headers).status_code == 404
