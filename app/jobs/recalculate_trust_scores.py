# app/jobs/recalculate_trust_scores.py
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from sqlalchemy.orm import Session

from app.services.trust_score import BatchRecalculationResult, TrustScoreEngine


def run_recalculation_job(db: Session, *, user_ids: Optional[List[str]] = None) -> BatchRecalculationResult:
    # sin user_ids -> todos los usuarios
    engine = TrustScoreEngine(db)
    if user_ids:
        return engine.trigger_recalculation_for_all(user_ids, reason="Manual batch recalculation")
    return engine.trigger_recalculation_for_all()


def _get_db_session() -> Session:
    from app.db import SessionLocal  # type: ignore
    return SessionLocal()


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="VendorConnect trust score batch recalculation")
    p.add_argument("--user-id", action="append", default=None, help="Only recalculate this user (repeatable)")
    p.add_argument("--log-level", default="INFO")
    args = p.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    db = _get_db_session()
    try:
        result = run_recalculation_job(db, user_ids=args.user_id)
        print(
            f"[trust_score_job] processed={result.processed} ok={result.succeeded} failed={len(result.failed)}"
        )
        for uid, err in result.failed.items():
            print(f"[trust_score_job] FAILED user={uid}: {err}", file=sys.stderr)
    except Exception as e:
        db.rollback()
        print(f"[trust_score_job] ERROR: {type(e).__name__}: {e}", file=sys.stderr)
        raise
    finally:
        db.close()

    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
