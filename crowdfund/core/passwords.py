"""Password hashing and verification."""
import bcrypt

from .exceptions import ValidationError

# bcrypt only looks at the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > PASSWORD_MAX_BYTES


class PasswordHasher:
    """bcrypt hasher with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash password using bcrypt.

        Raises ValidationError for passwords bcrypt cannot hash in full.
        """
        if password_too_long(password):
            raise ValidationError(
                f"Password must be at most {PASSWORD_MAX_BYTES} bytes",
                details={"field": "password"},
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash.

        A missing or malformed stored hash counts as a mismatch, and so does
        a password longer than any stored one can be.
        """
        if not hashed_password or password_too_long(plain_password):
            return False
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                hashed_password.encode("utf-8")
            )
        except (ValueError, TypeError):
            return False
