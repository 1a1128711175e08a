# app/core/security.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from app.config import settings

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    role: Optional[str] = None


# ------------------------------
# JWT
#
# Los tokens los emite el servicio de auth (registro/login) con el mismo
# SECRET_KEY. Aquí se valida el bearer de cada request; `issue_token`
# existe para tests y herramientas internas.
# ------------------------------
def issue_token(
    user_id: str,
    role: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims: Dict[str, Any] = {"sub": str(user_id), "exp": expire}
    if role:
        claims["role"] = role
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def read_token(token: str) -> Optional[TokenClaims]:
    """None si la firma/expiración no valen o falta `sub`."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None

    sub = payload.get("sub")
    if not sub:
        return None
    return TokenClaims(user_id=str(sub), role=payload.get("role"))
