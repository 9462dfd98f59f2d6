"""Pydantic schemas module."""
from .auth import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    NewPasswordRequest,
    ProfileResponse,
    RegisterRequest,
    UserIdentity,
)
from .campaign import (
    CampaignCreate,
    CampaignCreatedResponse,
    CampaignDonation,
    CampaignResponse,
    CommentCreate,
    CommentCreatedResponse,
    CommentResponse,
    DonationCreate,
    DonationCreatedResponse,
    DonationResponse,
    DonationStats,
    LikeCount,
    LikedCampaign,
    PaymentResponse,
    PaymentStats,
)
from .common import (
    ErrorResponse,
    HealthResponse,
    MessageResponse,
)

__all__ = [
    # Auth
    "EmailRequest",
    "LoginRequest",
    "LoginResponse",
    "NewPasswordRequest",
    "ProfileResponse",
    "RegisterRequest",
    "UserIdentity",
    # Campaigns
    "CampaignCreate",
    "CampaignCreatedResponse",
    "CampaignDonation",
    "CampaignResponse",
    "CommentCreate",
    "CommentCreatedResponse",
    "CommentResponse",
    "DonationCreate",
    "DonationCreatedResponse",
    "DonationResponse",
    "DonationStats",
    "LikeCount",
    "LikedCampaign",
    "PaymentResponse",
    "PaymentStats",
    # Common
    "ErrorResponse",
    "HealthResponse",
    "MessageResponse",
]
