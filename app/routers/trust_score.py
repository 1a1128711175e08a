# app/routers/trust_score.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.enums import UserRole
from app.core.errors import TrustValidationError
from app.core.timeutils import as_utc
from app.db import get_db
from app.models.trust_score import TrustScore
from app.models.trust_score_history import TrustScoreHistory
from app.routers.auth import get_current_user
from app.schemas.trust_score import (
    ApiResponse,
    FactorUpdate,
    RankingEntry,
    RecalculateRequest,
    RecalculationResult,
    TrustScoreFactors,
    TrustScoreHistoryOut,
    TrustScoreOut,
    TrustTrendPoint,
)
from app.services.trust_score import TrustScoreEngine

router = APIRouter(
    prefix="/trust-score",
    tags=["Trust Score"],
    dependencies=[Depends(get_current_user)],
)


def get_trust_score_engine(db: Session = Depends(get_db)) -> TrustScoreEngine:
    return TrustScoreEngine(db)


def _score_out(ts: TrustScore) -> TrustScoreOut:
    return TrustScoreOut(
        user_id=ts.user_id,
        current_score=float(ts.current_score),
        factors=TrustScoreFactors.model_validate(ts),
        total_orders=int(ts.total_orders or 0),
        successful_orders=int(ts.successful_orders or 0),
        last_updated=as_utc(ts.last_updated),
    )


def _history_out(h: TrustScoreHistory) -> TrustScoreHistoryOut:
    return TrustScoreHistoryOut(
        id=int(h.id),
        user_id=h.user_id,
        score=float(h.score),
        factors=h.factors if isinstance(h.factors, dict) else {},
        reason=h.reason,
        timestamp=as_utc(h.created_at),
    )


@router.get("/score/{user_id}", response_model=ApiResponse[TrustScoreOut])
def get_trust_score(
    user_id: str,
    engine: TrustScoreEngine = Depends(get_trust_score_engine),
) -> ApiResponse[TrustScoreOut]:
    return ApiResponse(data=_score_out(engine.get_score(user_id)))


@router.get("/history/{user_id}", response_model=ApiResponse[List[TrustScoreHistoryOut]])
def get_trust_score_history(
    user_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    engine: TrustScoreEngine = Depends(get_trust_score_engine),
) -> ApiResponse[List[TrustScoreHistoryOut]]:
    return ApiResponse(data=[_history_out(h) for h in engine.get_history(user_id, limit=limit)])


@router.get("/trend/{user_id}", response_model=ApiResponse[List[TrustTrendPoint]])
def get_trust_score_trend(
    user_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    engine: TrustScoreEngine = Depends(get_trust_score_engine),
) -> ApiResponse[List[TrustTrendPoint]]:
    points = [
        TrustTrendPoint(score=s, timestamp=as_utc(t))
        for s, t in engine.get_trend(user_id, limit=limit)
    ]
    return ApiResponse(data=points)


@router.post("/update-factors/{user_id}", response_model=ApiResponse[TrustScoreOut])
def update_trust_factors(
    user_id: str,
    payload: FactorUpdate,
    engine: TrustScoreEngine = Depends(get_trust_score_engine),
) -> ApiResponse[TrustScoreOut]:
    ts = engine.update_factors(user_id, payload)
    msg = "Trust factors updated and score recalculated." if payload.recalculate else "Trust factors updated."
    return ApiResponse(data=_score_out(ts), message=msg)


@router.get("/rankings", response_model=ApiResponse[List[RankingEntry]])
def get_trust_rankings(
    role: Optional[UserRole] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1),
    engine: TrustScoreEngine = Depends(get_trust_score_engine),
) -> ApiResponse[List[RankingEntry]]:
    rows = engine.get_rankings(role, limit=limit)
    entries = [
        RankingEntry(
            rank=i,
            user_id=ts.user_id,
            current_score=float(ts.current_score),
            factors=TrustScoreFactors.model_validate(ts),
            last_updated=as_utc(ts.last_updated),
        )
        for i, ts in enumerate(rows, start=1)
    ]
    return ApiResponse(data=entries)


@router.post("/recalculate", response_model=ApiResponse[RecalculationResult])
def trigger_score_recalculation(
    payload: RecalculateRequest,
    engine: TrustScoreEngine = Depends(get_trust_score_engine),
) -> ApiResponse[RecalculationResult]:
    user_id = (payload.user_id or "").strip()
    if not user_id or payload.role is None:
        raise TrustValidationError("userId and role are required.")

    ts = engine.recalculate_and_save(user_id, role=payload.role)
    return ApiResponse(
        data=RecalculationResult(user_id=ts.user_id, new_score=float(ts.current_score)),
        message="Trust score recalculation triggered successfully.",
    )
