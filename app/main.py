from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.core.errors import register_error_handlers
from app.routers import auth, trust_score

logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title="VendorConnect Trust Score API",
    version="0.1.0",
    description="Trust score (0-100) de vendors y suppliers: cálculo, historial y rankings.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.get("/health", tags=["system"])
def health_check():
    return {"status": "ok", "service": "vendorconnect-trust-api"}


# Routers
app.include_router(auth.router)
app.include_router(trust_score.router)
