# app/routers/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from app.core.security import read_token
from app.db import get_db
from app.models.user import User

# Login/registro viven en el servicio de auth; aquí solo se valida el bearer
router = APIRouter(prefix="/auth", tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class CurrentUser(BaseModel):
    id: str
    name: str
    role: str
    email: Optional[str] = None
    is_active: Optional[bool] = True

    model_config = ConfigDict(from_attributes=True)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = read_token(token)
    if claims is None:
        raise unauthorized

    # desactivados (is_active=false) no consultan trust scores; NULL cuenta como activo
    user = db.query(User).filter(User.id == claims.user_id, User.is_active.isnot(False)).first()
    if user is None:
        raise unauthorized
    return user


@router.get("/me", response_model=CurrentUser)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
