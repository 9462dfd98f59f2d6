"""Bearer session guard and ownership checks."""
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from .exceptions import (
    AuthenticationError,
    ForbiddenError,
    InvalidTokenError,
    TokenExpiredError,
)
from .logging import SecurityLogger

# Security scheme; missing credentials are reported by get_current_user
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity injected into protected handlers."""

    id: uuid.UUID
    email: str


def _reject(request: Request, reason: str, message: str) -> AuthenticationError:
    SecurityLogger.log_unauthorized_access(
        path=str(request.url.path),
        method=request.method,
        ip_address=request.client.host if request.client else None,
        reason=reason,
    )
    return AuthenticationError(message, details={"reason": reason})


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Get current authenticated user from the bearer token."""
    if credentials is None:
        raise _reject(request, "missing_token", "No token provided")

    codec = request.app.state.token_codec
    try:
        claims = codec.verify(credentials.credentials)
    except TokenExpiredError:
        raise _reject(request, "expired_token", "Token has expired")
    except InvalidTokenError:
        raise _reject(request, "invalid_token", "Invalid token")

    # Tokens outlive accounts; the holder must still exist
    account = await db.get(User, claims.user_id)
    if account is None:
        raise _reject(request, "unknown_user", "User no longer exists")

    user = CurrentUser(id=account.id, email=account.email)
    request.state.user = user
    return user


def ensure_owner(
    owner_id: uuid.UUID,
    current_user: CurrentUser,
    message: str = "Not allowed",
) -> None:
    """Only the creator of a resource may change or delete it."""
    if owner_id != current_user.id:
        raise ForbiddenError(message)
