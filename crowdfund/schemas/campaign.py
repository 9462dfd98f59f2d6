"""Campaign, donation, payment, like and comment schemas."""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import Field

from .common import BaseSchema, MessageResponse

Amount = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class CampaignCreate(BaseSchema):
    """Campaign creation and update body."""

    title: str = Field(..., min_length=1, max_length=255, description="Campaign title")
    description: Optional[str] = Field(None, description="Campaign description")
    goal_amount: Amount


class CampaignResponse(BaseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: Optional[str] = None
    goal_amount: float
    raised_amount: float
    created_at: datetime
    owner_email: Optional[str] = None
    owner_name: Optional[str] = None


class CampaignCreatedResponse(MessageResponse):
    campaign: CampaignResponse


class DonationCreate(BaseSchema):
    """Donation and fake payment body."""

    campaign_id: uuid.UUID = Field(..., description="Campaign to fund")
    amount: Amount


class DonationResponse(BaseSchema):
    id: uuid.UUID
    campaign_id: uuid.UUID
    amount: float
    transaction_id: Optional[str] = None
    created_at: datetime
    campaign_title: Optional[str] = None


class DonationCreatedResponse(MessageResponse):
    donation: DonationResponse


class CampaignDonation(BaseSchema):
    amount: float
    created_at: datetime
    email: str


class DonationStats(BaseSchema):
    total_donations: int
    total_raised: float


class PaymentResponse(MessageResponse):
    success: bool = True
    transaction_id: str


class PaymentStats(BaseSchema):
    donors: int
    total_funds: float


class LikeCount(BaseSchema):
    total_likes: int


class CommentCreate(BaseSchema):
    comment: str = Field(..., min_length=1, max_length=5000, description="Comment text")


class CommentResponse(BaseSchema):
    id: uuid.UUID
    campaign_id: uuid.UUID
    user_id: uuid.UUID
    comment: str
    created_at: datetime
    name: Optional[str] = None
    campaign_title: Optional[str] = None


class CommentCreatedResponse(MessageResponse):
    comment: CommentResponse


class LikedCampaign(BaseSchema):
    id: uuid.UUID
    title: str
    created_at: datetime
