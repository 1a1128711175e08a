from sqlalchemy import Column, String, DateTime, Boolean, func, true
from sqlalchemy.orm import relationship

from ..db import Base


class User(Base):
    """
    Tabla `users` del servicio de auth/registro.
    Aquí solo se lee (rol para rankings y recálculo).
    """

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    mobile = Column(String(20), unique=True, index=True, nullable=True)
    email = Column(String(255), nullable=True)

    role = Column(String(16), nullable=False, index=True)  # vendor/supplier

    is_active = Column(Boolean, default=True, server_default=true())

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    trust_score = relationship("TrustScore", back_populates="user", uselist=False)
