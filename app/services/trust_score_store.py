# app/services/trust_score_store.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.enums import UserRole
from app.core.errors import StorageError
from app.core.timeutils import utcnow
from app.db import transaction
from app.models.trust_score import TrustScore
from app.models.trust_score_history import TrustScoreHistory
from app.models.user import User
from app.schemas.trust_score import FACTOR_FIELDS, TrustScoreFactors
from app.services.trust_score_calc import clamp_score

logger = logging.getLogger("vendorconnect.trust_score_store")

_ON_CONFLICT_INSERT = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _factors_snapshot(factors: Dict[str, Optional[float]]) -> Dict[str, Optional[float]]:
    # snapshot en camelCase, igual que lo ve el front
    return TrustScoreFactors(**{k: factors.get(k) for k in FACTOR_FIELDS}).model_dump(by_alias=True)


class TrustScoreStore:
    """
    Persistencia de trust_scores (estado actual) + trust_score_history (log).

    Invariante: current_score == score de la fila de history más reciente.
    Por eso upsert + append van SIEMPRE en la misma transacción.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # lecturas
    # ------------------------------------------------------------------
    def get(self, user_id: str) -> Optional[TrustScore]:
        return self.db.query(TrustScore).filter(TrustScore.user_id == user_id).first()

    def history(self, user_id: str, limit: Optional[int] = None) -> List[TrustScoreHistory]:
        q = (
            self.db.query(TrustScoreHistory)
            .filter(TrustScoreHistory.user_id == user_id)
            .order_by(TrustScoreHistory.created_at.desc(), TrustScoreHistory.id.desc())
        )
        if limit is not None:
            q = q.limit(int(limit))
        return q.all()

    def rankings(self, role: Optional[UserRole] = None, limit: Optional[int] = None) -> List[TrustScore]:
        q = self.db.query(TrustScore)
        if role is not None:
            q = q.join(User, User.id == TrustScore.user_id).filter(User.role == role.value)

        # desempate estable por user_id
        q = q.order_by(TrustScore.current_score.desc(), TrustScore.user_id.asc())
        if limit is not None:
            q = q.limit(int(limit))
        return q.all()

    # ------------------------------------------------------------------
    # escritura
    # ------------------------------------------------------------------
    def _locked_score(self, user_id: str) -> Optional[TrustScore]:
        return (
            self.db.query(TrustScore)
            .filter(TrustScore.user_id == user_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def _insert_if_missing(self, user_id: str, *, score: float, now: datetime) -> None:
        """
        INSERT idempotente (ON CONFLICT (user_id) DO NOTHING): si otra
        transacción creó la fila entre el SELECT y este INSERT, no pasa nada.
        Asume transacción activa.
        """
        values = {
            "user_id": user_id,
            "current_score": score,
            "total_orders": 0,
            "successful_orders": 0,
            "last_updated": now,
        }
        insert_fn = _ON_CONFLICT_INSERT.get(self.db.get_bind().dialect.name)
        if insert_fn is not None:
            self.db.execute(
                insert_fn(TrustScore).values(**values).on_conflict_do_nothing(index_elements=["user_id"])
            )
            return

        # sin ON CONFLICT: savepoint para que la carrera no tumbe la transacción
        try:
            with self.db.begin_nested():
                self.db.execute(insert(TrustScore).values(**values))
        except IntegrityError:
            # carrera normal: otro request insertó primero
            pass

    def _upsert_score(
        self,
        user_id: str,
        *,
        score: float,
        factors: Dict[str, Optional[float]],
        total_orders: Optional[int],
        successful_orders: Optional[int],
        now: datetime,
    ) -> TrustScore:
        # lock del row existente; si no existe, INSERT idempotente y lock de nuevo
        ts = self._locked_score(user_id)
        if ts is None:
            self._insert_if_missing(user_id, score=score, now=now)
            ts = self._locked_score(user_id)
        if ts is None:
            raise StorageError(f"Unable to get or create trust score for user {user_id}.")

        ts.current_score = score
        for name in FACTOR_FIELDS:
            setattr(ts, name, factors.get(name))

        if total_orders is not None:
            ts.total_orders = int(total_orders)
        if successful_orders is not None:
            ts.successful_orders = int(successful_orders)

        ts.last_updated = now
        self.db.flush()
        return ts

    def _append_history(
        self,
        user_id: str,
        *,
        score: float,
        factors: Dict[str, Optional[float]],
        reason: str,
        now: datetime,
    ) -> TrustScoreHistory:
        row = TrustScoreHistory(
            user_id=user_id,
            score=score,
            factors=_factors_snapshot(factors),
            reason=reason,
            created_at=now,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def save(
        self,
        user_id: str,
        *,
        score: float,
        factors: Dict[str, Optional[float]],
        reason: str,
        total_orders: Optional[int] = None,
        successful_orders: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> TrustScore:
        """
        Upsert del score + append en history, atómico.
        Si cualquiera de los dos falla -> rollback completo y StorageError.
        """
        score = clamp_score(score)
        now = now or utcnow()

        try:
            with transaction(self.db):
                ts = self._upsert_score(
                    user_id,
                    score=score,
                    factors=factors,
                    total_orders=total_orders,
                    successful_orders=successful_orders,
                    now=now,
                )
                self._append_history(user_id, score=score, factors=factors, reason=reason, now=now)
        except SQLAlchemyError as e:
            logger.error("Fallo guardando trust score user=%s (rollback): %s", user_id, e)
            raise StorageError("Failed to persist trust score.", details=str(e)) from e

        return ts
