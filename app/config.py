# app/config.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Backend / JWT / DB ---
    DATABASE_URL: str
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    LOG_LEVEL: str = "INFO"

    # Front (Vite dev + producción)
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # --- Trust score ---
    TRUST_SCORE_DEFAULT: float = 50.0
    # Permite que update-factors fije current_score sin recalcular (ver DESIGN.md)
    TRUST_SCORE_ALLOW_OVERRIDE: bool = True
    TRUST_RANKINGS_MAX_LIMIT: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
