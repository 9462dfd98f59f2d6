"""User model."""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class User(Base):
    """User model for authentication and credential lifecycle.

    ``verification_token`` and ``reset_token`` hold SHA-256 fingerprints of
    the emailed tokens. Each token column is always written together with
    its expiry column.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    is_verified: Mapped[bool] = mapped_column(default=False, nullable=False)

    verification_token: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    verification_expires: Mapped[Optional[datetime]] = mapped_column(DateTime)
    reset_token: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    reset_expires: Mapped[Optional[datetime]] = mapped_column(DateTime)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(email={self.email}, verified={self.is_verified})>"
