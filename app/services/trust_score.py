# app/services/trust_score.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from app.config import settings
from app.core.enums import OrderStatus, UserRole
from app.core.errors import TrustScoreNotFound, TrustValidationError
from app.models.trust_score import TrustScore
from app.models.trust_score_history import TrustScoreHistory
from app.schemas.trust_score import FACTOR_FIELDS, FactorUpdate
from app.services.ledgers import OrderLedger, PaymentLedger, RatingLedger, UserDirectory
from app.services.trust_score_calc import ScoreComputation, ScoreInputs, compute_trust_score
from app.services.trust_score_store import TrustScoreStore

logger = logging.getLogger("vendorconnect.trust_score")

REASON_INITIAL = "Initial trust score"
REASON_RECALCULATED = "Score recalculated"
REASON_OVERRIDE = "Manual score override"
REASON_BATCH = "Scheduled recalculation"


@dataclass
class BatchRecalculationResult:
    processed: int = 0
    succeeded: int = 0
    failed: Dict[str, str] = field(default_factory=dict)


def parse_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    if role is None or isinstance(role, UserRole):
        return role
    raw = str(role).strip().lower()
    if not raw:
        return None
    try:
        return UserRole(raw)
    except ValueError:
        raise TrustValidationError(
            f"Invalid role '{role}'. Expected 'vendor' or 'supplier'."
        ) from None


class TrustScoreEngine:
    """
    Trust score por usuario (vendor/supplier):
      - recálculo determinista desde los ledgers (orders/payments/ratings)
      - persistencia atómica score + history (TrustScoreStore)
      - rankings / tendencias

    Todas las dependencias se inyectan; si no vienen, se construyen sobre `db`.
    """

    def __init__(
        self,
        db: Session,
        *,
        store: Optional[TrustScoreStore] = None,
        orders: Optional[OrderLedger] = None,
        payments: Optional[PaymentLedger] = None,
        ratings: Optional[RatingLedger] = None,
        users: Optional[UserDirectory] = None,
        allow_override: Optional[bool] = None,
    ) -> None:
        self.db = db
        self.store = store or TrustScoreStore(db)
        self.orders = orders or OrderLedger(db)
        self.payments = payments or PaymentLedger(db)
        self.ratings = ratings or RatingLedger(db)
        self.users = users or UserDirectory(db)
        self.allow_override = (
            settings.TRUST_SCORE_ALLOW_OVERRIDE if allow_override is None else bool(allow_override)
        )

    # ------------------------------------------------------------------
    # consultas
    # ------------------------------------------------------------------
    def get_score(self, user_id: str) -> TrustScore:
        ts = self.store.get(user_id)
        if ts is None:
            raise TrustScoreNotFound("Trust score not found for this user.")
        return ts

    def get_history(self, user_id: str, limit: Optional[int] = None) -> List[TrustScoreHistory]:
        return self.store.history(user_id, limit=limit)

    def get_trend(self, user_id: str, limit: Optional[int] = None) -> List[Tuple[float, datetime]]:
        return [(float(h.score), h.created_at) for h in self.store.history(user_id, limit=limit)]

    def get_rankings(
        self,
        role: Union[UserRole, str, None] = None,
        limit: Optional[int] = None,
    ) -> List[TrustScore]:
        if limit is not None:
            if int(limit) < 1:
                raise TrustValidationError("limit must be a positive integer.")
            limit = min(int(limit), settings.TRUST_RANKINGS_MAX_LIMIT)
        return self.store.rankings(parse_role(role), limit=limit)

    # ------------------------------------------------------------------
    # recálculo
    # ------------------------------------------------------------------
    def _resolve_role(self, user_id: str, role: Union[UserRole, str, None]) -> UserRole:
        actual = self.users.get_role(user_id)
        if actual is None:
            raise TrustScoreNotFound(f"User {user_id} not found.")

        requested = parse_role(role)
        if requested is not None and requested != actual:
            raise TrustValidationError(
                f"Role '{requested.value}' does not match user role '{actual.value}'."
            )
        return actual

    def _collect_inputs(self, user_id: str, role: UserRole) -> ScoreInputs:
        ratings: Tuple[float, ...] = ()
        on_time_deliveries = 0
        if role == UserRole.SUPPLIER:
            ratings = tuple(self.ratings.ratings_for(user_id))
            on_time_deliveries = self.orders.count_on_time_deliveries(user_id)

        return ScoreInputs(
            role=role,
            total_orders=self.orders.count_orders(user_id, role),
            delivered_orders=self.orders.count_by_status(user_id, role, OrderStatus.DELIVERED),
            on_time_deliveries=on_time_deliveries,
            completed_payments=self.payments.count_completed(user_id, role),
            on_time_payments=self.payments.count_on_time_completed(user_id, role),
            ratings=ratings,
        )

    def recalculate(self, user_id: str, role: Union[UserRole, str, None] = None) -> ScoreComputation:
        """Calcula (sin persistir) el score actual del usuario desde los ledgers."""
        resolved = self._resolve_role(user_id, role)
        logger.info("Calculando trust score user=%s role=%s", user_id, resolved.value)

        result = compute_trust_score(self._collect_inputs(user_id, resolved))
        logger.debug("Trust score user=%s -> %s factors=%s", user_id, result.score, result.factors)
        return result

    def recalculate_and_save(
        self,
        user_id: str,
        role: Union[UserRole, str, None] = None,
        reason: str = REASON_RECALCULATED,
    ) -> TrustScore:
        result = self.recalculate(user_id, role=role)
        return self.store.save(
            user_id,
            score=result.score,
            factors=result.factors,
            reason=reason,
            total_orders=result.total_orders,
            successful_orders=result.successful_orders,
        )

    def update_factors(
        self,
        user_id: str,
        update: Union[FactorUpdate, Dict[str, Any]],
        reason: Optional[str] = None,
    ) -> TrustScore:
        if not isinstance(update, FactorUpdate):
            update = FactorUpdate.model_validate(update)

        factors: Dict[str, Optional[float]] = update.factors.model_dump()

        if update.recalculate:
            result = self.recalculate(user_id)
            # los factores que produce el recálculo pisan los del caller
            factors.update(result.factors)
            return self.store.save(
                user_id,
                score=result.score,
                factors=factors,
                reason=reason or update.reason or REASON_RECALCULATED,
                total_orders=result.total_orders,
                successful_orders=result.successful_orders,
            )

        # --- override: score fijado por el caller ---
        if not self.allow_override:
            raise TrustValidationError(
                "Manual score override is disabled. Send recalculate=true instead."
            )
        if update.current_score is None:
            raise TrustValidationError("currentScore is required when recalculate is false.")
        if self.users.get_user(user_id) is None:
            raise TrustScoreNotFound(f"User {user_id} not found.")

        logger.warning(
            "Override manual de trust score user=%s score=%s reason=%s",
            user_id,
            update.current_score,
            update.reason,
        )
        return self.store.save(
            user_id,
            score=update.current_score,
            factors=factors,
            reason=reason or update.reason or REASON_OVERRIDE,
        )

    def initialize(self, user_id: str) -> TrustScore:
        """
        Seed al crear el usuario (lo llama el flujo de registro).
        Es un upsert: llamarlo dos veces sobreescribe, no falla.
        """
        return self.store.save(
            user_id,
            score=settings.TRUST_SCORE_DEFAULT,
            factors={name: 0.0 for name in FACTOR_FIELDS},
            reason=REASON_INITIAL,
            total_orders=0,
            successful_orders=0,
        )

    def trigger_recalculation_for_all(
        self,
        user_ids: Optional[Iterable[str]] = None,
        reason: str = REASON_BATCH,
    ) -> BatchRecalculationResult:
        """
        Recalcula + persiste a todos los usuarios (o a `user_ids`), uno por uno,
        una transacción c/u. Un usuario que falla se loguea y NO corta el batch.
        """
        result = BatchRecalculationResult()
        targets = list(user_ids) if user_ids is not None else self.users.all_user_ids()

        for user_id in targets:
            result.processed += 1
            try:
                self.recalculate_and_save(user_id, reason=reason)
                result.succeeded += 1
            except Exception as e:
                # si falló una lectura la sesión puede quedar sucia
                self.db.rollback()
                logger.exception("Fallo recalculando trust score user=%s (se continúa)", user_id)
                result.failed[user_id] = f"{type(e).__name__}: {e}"

        logger.info(
            "Batch trust score: processed=%s ok=%s failed=%s",
            result.processed,
            result.succeeded,
            len(result.failed),
        )
        return result
