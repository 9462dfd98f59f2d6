"""Registration, verification, login and password reset."""
from datetime import datetime, timedelta
from typing import Optional, Tuple

from starlette.concurrency import run_in_threadpool

from ..config import Settings
from ..models.base import utcnow
from ..models.user import User
from ..services.mail import Mailer
from ..services.users import UserRepository
from .exceptions import (
    DuplicateEmailError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UserNotFoundError,
)
from .logging import BusinessLogger, SecurityLogger
from .passwords import PasswordHasher
from .tokens import TokenCodec


class AuthService:
    """Authentication service.

    A user starts unverified with an outstanding verification token and
    becomes verified exactly once. Password reset works in either state and
    uses its own token pair. Opaque tokens are stored as fingerprints; the
    raw value only travels in the emailed link.
    """

    def __init__(
        self,
        settings: Settings,
        hasher: PasswordHasher,
        codec: TokenCodec,
        mailer: Mailer,
    ):
        self.hasher = hasher
        self.codec = codec
        self.mailer = mailer
        self.verification_ttl = timedelta(minutes=settings.auth.verification_expire_minutes)
        self.reset_ttl = timedelta(minutes=settings.auth.reset_expire_minutes)
        self.conceal_unknown_emails = settings.auth.conceal_unknown_emails
        self.link_base = settings.api.public_base_url.rstrip("/") + settings.api.prefix
        # Compared against on unknown emails so every login pays for one bcrypt check
        self.dummy_hash = hasher.hash(codec.generate_opaque_token())

    async def hash_password(self, password: str) -> str:
        return await run_in_threadpool(self.hasher.hash, password)

    async def verify_password(self, password: str, hashed_password: str) -> bool:
        return await run_in_threadpool(self.hasher.verify, password, hashed_password)

    def _new_link_token(self, ttl: timedelta) -> Tuple[str, str, datetime]:
        """Return (raw token, stored fingerprint, expiry)."""
        token = self.codec.generate_opaque_token()
        return token, self.codec.fingerprint(token), utcnow() + ttl

    async def _send_verification(self, user: User, token: str) -> None:
        link = f"{self.link_base}/verify/{token}"
        minutes = int(self.verification_ttl.total_seconds() // 60)
        await self.mailer.send(
            user.email,
            "Verify your email",
            "Welcome!\n\n"
            f"Please verify your email by opening the link below:\n{link}\n\n"
            f"This link expires in {minutes} minutes.",
        )

    async def _send_reset(self, user: User, token: str) -> None:
        link = f"{self.link_base}/reset-password/{token}"
        minutes = int(self.reset_ttl.total_seconds() // 60)
        await self.mailer.send(
            user.email,
            "Reset your password",
            f"Use the link below to choose a new password:\n{link}\n\n"
            f"This link expires in {minutes} minutes. "
            "If you did not ask for a reset you can ignore this email.",
        )

    async def register(
        self,
        users: UserRepository,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> User:
        """Create an unverified user and email the verification link."""
        if await users.find_by_email(email) is not None:
            raise DuplicateEmailError()

        token, fingerprint, expires = self._new_link_token(self.verification_ttl)
        user = await users.insert(User(
            email=email,
            name=name,
            hashed_password=await self.hash_password(password),
            is_verified=False,
            verification_token=fingerprint,
            verification_expires=expires,
        ))
        BusinessLogger.log_user_registered(str(user.id), user.email)

        await self._send_verification(user, token)
        return user

    async def verify_email(self, users: UserRepository, token: str) -> User:
        """Consume a verification token."""
        fingerprint = self.codec.fingerprint(token)
        user = await users.find_by_verification_token(fingerprint)
        if user is None:
            SecurityLogger.log_token_rejected("verification", "unknown")
            raise InvalidTokenError("Invalid or expired verification link")

        # Expired tokens stay in place until a resend overwrites them
        if user.verification_expires is None or utcnow() > user.verification_expires:
            SecurityLogger.log_token_rejected("verification", "expired")
            raise TokenExpiredError("Verification link has expired")

        consumed = await users.update(
            user,
            {
                "is_verified": True,
                "verification_token": None,
                "verification_expires": None,
            },
            expected={"verification_token": fingerprint},
        )
        if not consumed:
            raise InvalidTokenError("Invalid or expired verification link")

        BusinessLogger.log_email_verified(str(user.id))
        return user

    async def resend_verification(self, users: UserRepository, email: str) -> bool:
        """Replace the verification token and email it again.

        Returns False without side effects when the user is already verified.
        """
        user = await users.find_by_email(email)
        if user is None:
            raise UserNotFoundError()

        if user.is_verified:
            return False

        token, fingerprint, expires = self._new_link_token(self.verification_ttl)
        await users.update(
            user,
            {"verification_token": fingerprint, "verification_expires": expires},
        )
        BusinessLogger.log_verification_resent(str(user.id))

        await self._send_verification(user, token)
        return True

    async def login(
        self,
        users: UserRepository,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> str:
        """Check credentials and return a signed session token."""
        user = await users.find_by_email(email)
        if user is None:
            await self.verify_password(password, self.dummy_hash)
            SecurityLogger.log_login_attempt(email, False, ip_address, "unknown_email")
            raise InvalidCredentialsError()

        # Decided before any hash comparison
        if not user.is_verified:
            SecurityLogger.log_login_attempt(email, False, ip_address, "not_verified")
            raise EmailNotVerifiedError()

        if not await self.verify_password(password, user.hashed_password):
            SecurityLogger.log_login_attempt(email, False, ip_address, "bad_password")
            raise InvalidCredentialsError()

        SecurityLogger.log_login_attempt(email, True, ip_address)
        return self.codec.issue_session_token(user.id, user.email)

    async def forgot_password(self, users: UserRepository, email: str) -> None:
        """Issue a reset token, replacing any earlier one, and email it."""
        user = await users.find_by_email(email)
        if user is None:
            if self.conceal_unknown_emails:
                return
            raise UserNotFoundError()

        token, fingerprint, expires = self._new_link_token(self.reset_ttl)
        await users.update(user, {"reset_token": fingerprint, "reset_expires": expires})
        BusinessLogger.log_password_reset_requested(str(user.id))

        await self._send_reset(user, token)

    async def validate_reset_token(self, users: UserRepository, token: str) -> User:
        """Check a reset token without consuming it."""
        user = await users.find_by_reset_token(self.codec.fingerprint(token))
        if user is None:
            SecurityLogger.log_token_rejected("reset", "unknown")
            raise InvalidTokenError("Invalid or expired reset link")

        if user.reset_expires is None or utcnow() > user.reset_expires:
            SecurityLogger.log_token_rejected("reset", "expired")
            raise TokenExpiredError("Reset link has expired")

        return user

    async def reset_password(
        self,
        users: UserRepository,
        token: str,
        new_password: str,
    ) -> User:
        """Consume a reset token and store the new password hash."""
        user = await self.validate_reset_token(users, token)

        consumed = await users.update(
            user,
            {
                "hashed_password": await self.hash_password(new_password),
                "reset_token": None,
                "reset_expires": None,
            },
            expected={"reset_token": self.codec.fingerprint(token)},
        )
        if not consumed:
            raise InvalidTokenError("Invalid or expired reset link")

        BusinessLogger.log_password_reset(str(user.id))
        return user
