"""Logging configuration and utilities."""
import logging
import sys
from typing import Any, Dict

import structlog
from structlog.stdlib import LoggerFactory

from ..config import Settings


def configure_logging(settings: Settings):
    """Configure structured logging."""

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.monitoring.log_json
        else structlog.dev.ConsoleRenderer()
    )

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.monitoring.log_level.upper()),
    )

    # Set third-party log levels
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class RequestLogger:
    """Request logging utility."""

    @staticmethod
    def log_request(
        method: str,
        path: str,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log incoming request."""
        logger = structlog.get_logger("api.request")
        logger.info(
            "Request started",
            method=method,
            path=path,
            request_id=request_id,
            **(extra_data or {})
        )

    @staticmethod
    def log_response(
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        user_id: str = None,
        request_id: str = None,
    ):
        """Log response."""
        logger = structlog.get_logger("api.response")
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=response_time_ms,
            user_id=user_id,
            request_id=request_id,
        )


class BusinessLogger:
    """Business event logging utility."""

    @staticmethod
    def log_user_registered(user_id: str, email: str):
        """Log a new account."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User registered",
            event_type="user_registered",
            user_id=user_id,
            email=email,
        )

    @staticmethod
    def log_email_verified(user_id: str):
        """Log completed email verification."""
        logger = structlog.get_logger("business.user")
        logger.info("Email verified", event_type="email_verified", user_id=user_id)

    @staticmethod
    def log_verification_resent(user_id: str):
        """Log a replaced verification token."""
        logger = structlog.get_logger("business.user")
        logger.info("Verification resent", event_type="verification_resent", user_id=user_id)

    @staticmethod
    def log_password_reset_requested(user_id: str):
        """Log a forgot-password request."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "Password reset requested",
            event_type="password_reset_requested",
            user_id=user_id,
        )

    @staticmethod
    def log_password_reset(user_id: str):
        """Log a completed password reset."""
        logger = structlog.get_logger("business.user")
        logger.info("Password reset", event_type="password_reset", user_id=user_id)

    @staticmethod
    def log_campaign_changed(campaign_id: str, user_id: str, action: str):
        """Log campaign create/update/delete."""
        logger = structlog.get_logger("business.campaign")
        logger.info(
            "Campaign changed",
            event_type=f"campaign_{action}",
            campaign_id=campaign_id,
            user_id=user_id,
        )

    @staticmethod
    def log_donation_recorded(
        donation_id: str,
        campaign_id: str,
        user_id: str,
        amount: str,
        transaction_id: str = None
    ):
        """Log donation."""
        logger = structlog.get_logger("business.donation")
        logger.info(
            "Donation recorded",
            event_type="donation_recorded",
            donation_id=donation_id,
            campaign_id=campaign_id,
            user_id=user_id,
            amount=amount,
            transaction_id=transaction_id,
        )

    @staticmethod
    def log_payment_completed(transaction_id: str, campaign_id: str, user_id: str, amount: str):
        logger = structlog.get_logger("business.payment")
        logger.info(
            "Payment completed",
            event_type="payment_completed",
            transaction_id=transaction_id,
            campaign_id=campaign_id,
            user_id=user_id,
            amount=amount,
        )


class SecurityLogger:
    """Security event logging utility."""

    @staticmethod
    def log_login_attempt(
        email: str,
        success: bool,
        ip_address: str = None,
        failure_reason: str = None
    ):
        """Log login attempt."""
        logger = structlog.get_logger("security.auth")
        logger.info(
            "Login attempt",
            event_type="login_attempt",
            email=email,
            success=success,
            ip_address=ip_address,
            failure_reason=failure_reason
        )

    @staticmethod
    def log_token_rejected(purpose: str, reason: str):
        """Log a rejected verification or reset token."""
        logger = structlog.get_logger("security.token")
        logger.warning(
            "Token rejected",
            event_type="token_rejected",
            purpose=purpose,
            reason=reason,
        )

    @staticmethod
    def log_unauthorized_access(
        path: str,
        method: str,
        ip_address: str = None,
        reason: str = None
    ):
        """Log unauthorized access attempt."""
        logger = structlog.get_logger("security.access")
        logger.warning(
            "Unauthorized access attempt",
            event_type="unauthorized_access",
            path=path,
            method=method,
            ip_address=ip_address,
            reason=reason
        )

    @staticmethod
    def log_rate_limit_exceeded(
        ip_address: str,
        path: str,
        limit_type: str = "general"
    ):
        """Log rate limit exceeded."""
        logger = structlog.get_logger("security.rate_limit")
        logger.warning(
            "Rate limit exceeded",
            event_type="rate_limit_exceeded",
            ip_address=ip_address,
            path=path,
            limit_type=limit_type
        )
