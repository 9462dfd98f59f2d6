"""Custom exceptions for the application."""


class BaseAPIException(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = None,
        details: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseAPIException):
    """Malformed input."""

    def __init__(self, message: str = "Validation failed", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )


class DuplicateEmailError(BaseAPIException):
    """Email already registered."""

    def __init__(self, message: str = "Email already registered", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="DUPLICATE_EMAIL",
            details=details
        )


class InvalidCredentialsError(BaseAPIException):
    """Unknown email or wrong password.

    Both cases share this class and message so that login does not reveal
    which accounts exist.
    """

    def __init__(self, message: str = "Invalid credentials", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_CREDENTIALS",
            details=details
        )


class InvalidTokenError(BaseAPIException):
    """Unknown, consumed or tampered token."""

    def __init__(self, message: str = "Invalid or expired link", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_TOKEN",
            details=details
        )


class TokenExpiredError(BaseAPIException):
    """Token found but past its expiry."""

    def __init__(self, message: str = "Token has expired", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="TOKEN_EXPIRED",
            details=details
        )


class EmailNotVerifiedError(BaseAPIException):
    """Login attempted before email verification."""

    def __init__(
        self,
        message: str = "Please verify your email before logging in",
        details: dict = None
    ):
        super().__init__(
            message=message,
            status_code=403,
            error_code="EMAIL_NOT_VERIFIED",
            details=details
        )


class AuthenticationError(BaseAPIException):
    """Missing or invalid bearer credential."""

    def __init__(self, message: str = "Authentication failed", details: dict = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTHENTICATION_ERROR",
            details=details
        )


class ForbiddenError(BaseAPIException):
    """Authenticated user does not own the resource."""

    def __init__(self, message: str = "Not allowed", details: dict = None):
        super().__init__(
            message=message,
            status_code=403,
            error_code="FORBIDDEN",
            details=details
        )


class NotFoundError(BaseAPIException):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", details: dict = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND_ERROR",
            details=details
        )


class UserNotFoundError(NotFoundError):
    """No account for the given email."""

    def __init__(self, message: str = "User not found", details: dict = None):
        super().__init__(message=message, details=details)
        self.error_code = "USER_NOT_FOUND"


class MailDeliveryError(BaseAPIException):
    """Outgoing mail could not be delivered."""

    def __init__(self, message: str = "Failed to send email", details: dict = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="MAIL_DELIVERY_ERROR",
            details=details
        )


class RateLimitExceeded(BaseAPIException):
    """Rate limit exceeded error."""

    def __init__(self, message: str = "Rate limit exceeded", details: dict = None):
        super().__init__(
            message=message,
            status_code=429,
            error_code="RATE_LIMIT_EXCEEDED",
            details=details
        )
