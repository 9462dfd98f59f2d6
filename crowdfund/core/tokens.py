"""Opaque link tokens and signed session tokens."""
import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import AuthSettings
from .exceptions import InvalidTokenError, TokenExpiredError

# 32 bytes -> 256 bits of randomness
OPAQUE_TOKEN_BYTES = 32


@dataclass(frozen=True)
class SessionClaims:
    """Identity carried by a session token."""

    user_id: uuid.UUID
    email: str
    expires_at: datetime


class TokenCodec:
    """Issues verification/reset tokens and signs session tokens."""

    token_type = "access"

    def __init__(self, settings: AuthSettings):
        self.secret_key = settings.secret_key
        self.algorithm = settings.algorithm
        self.access_token_ttl = timedelta(minutes=settings.access_token_expire_minutes)

    @staticmethod
    def generate_opaque_token() -> str:
        """Random URL-safe token for emailed links."""
        return secrets.token_urlsafe(OPAQUE_TOKEN_BYTES)

    @staticmethod
    def fingerprint(token: str) -> str:
        """SHA-256 hex digest stored in place of the raw token."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def sign(self, claims: dict, ttl: Optional[timedelta] = None) -> str:
        """Create a signed session token."""
        now = datetime.now(timezone.utc)
        to_encode = claims.copy()
        to_encode.update({
            "iat": now,
            "exp": now + (ttl or self.access_token_ttl),
            "type": self.token_type,
        })
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def issue_session_token(self, user_id: uuid.UUID, email: str) -> str:
        return self.sign({"sub": str(user_id), "email": email})

    def verify(self, token: str) -> SessionClaims:
        """Decode a session token.

        Raises TokenExpiredError for an expired signature and
        InvalidTokenError for anything else that does not check out.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError("Session token has expired")
        except JWTError:
            raise InvalidTokenError("Invalid session token")

        if payload.get("type") != self.token_type:
            raise InvalidTokenError("Invalid session token")

        email = payload.get("email")
        try:
            user_id = uuid.UUID(payload.get("sub") or "")
        except ValueError:
            raise InvalidTokenError("Invalid session token")
        if not email:
            raise InvalidTokenError("Invalid session token")

        return SessionClaims(
            user_id=user_id,
            email=email,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
