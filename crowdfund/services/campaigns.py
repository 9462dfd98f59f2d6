"""Campaign service."""
import uuid
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..core.logging import BusinessLogger
from ..core.security import CurrentUser, ensure_owner
from ..models.campaign import Campaign
from ..models.user import User
from ..schemas.campaign import CampaignCreate, CampaignResponse
from .cache import CAMPAIGNS_ALL_KEY, CampaignCache


def _to_response(campaign: Campaign, email: str = None, name: str = None) -> CampaignResponse:
    response = CampaignResponse.model_validate(campaign)
    response.owner_email = email
    response.owner_name = name
    return response


async def get_campaign_or_404(db: AsyncSession, campaign_id: uuid.UUID) -> Campaign:
    """Load a campaign or raise NotFoundError."""
    campaign = await db.get(Campaign, campaign_id)
    if campaign is None:
        raise NotFoundError("Campaign not found")
    return campaign


class CampaignService:
    """Campaign CRUD with a cached public listing."""

    def __init__(self, cache: CampaignCache):
        self.cache = cache

    async def list_campaigns(self, db: AsyncSession) -> List[Dict[str, Any]]:
        """All campaigns, newest first, with owner details."""
        cached = await self.cache.get(CAMPAIGNS_ALL_KEY)
        if cached is not None:
            return cached

        stmt = (
            select(Campaign, User.email, User.name)
            .join(User, Campaign.user_id == User.id)
            .order_by(Campaign.created_at.desc())
        )
        result = await db.execute(stmt)
        campaigns = [
            _to_response(campaign, email, name).model_dump(mode="json")
            for campaign, email, name in result.all()
        ]

        await self.cache.set(CAMPAIGNS_ALL_KEY, campaigns)
        return campaigns

    async def get_campaign(self, db: AsyncSession, campaign_id: uuid.UUID) -> CampaignResponse:
        stmt = (
            select(Campaign, User.email, User.name)
            .join(User, Campaign.user_id == User.id)
            .where(Campaign.id == campaign_id)
        )
        row = (await db.execute(stmt)).first()
        if row is None:
            raise NotFoundError("Campaign not found")
        campaign, email, name = row
        return _to_response(campaign, email, name)

    async def create_campaign(
        self,
        db: AsyncSession,
        user: CurrentUser,
        data: CampaignCreate,
    ) -> Campaign:
        campaign = Campaign(
            user_id=user.id,
            title=data.title,
            description=data.description,
            goal_amount=data.goal_amount,
        )
        db.add(campaign)
        await db.commit()
        await db.refresh(campaign)

        await self.cache.invalidate(CAMPAIGNS_ALL_KEY)
        BusinessLogger.log_campaign_changed(str(campaign.id), str(user.id), "created")
        return campaign

    async def update_campaign(
        self,
        db: AsyncSession,
        user: CurrentUser,
        campaign_id: uuid.UUID,
        data: CampaignCreate,
    ) -> Campaign:
        campaign = await get_campaign_or_404(db, campaign_id)
        ensure_owner(campaign.user_id, user, "Unauthorized to update this campaign")

        campaign.title = data.title
        campaign.description = data.description
        campaign.goal_amount = data.goal_amount
        await db.commit()

        await self.cache.invalidate(CAMPAIGNS_ALL_KEY)
        BusinessLogger.log_campaign_changed(str(campaign.id), str(user.id), "updated")
        return campaign

    async def delete_campaign(
        self,
        db: AsyncSession,
        user: CurrentUser,
        campaign_id: uuid.UUID,
    ) -> None:
        campaign = await get_campaign_or_404(db, campaign_id)
        ensure_owner(campaign.user_id, user, "Unauthorized to delete this campaign")

        await db.delete(campaign)
        await db.commit()

        await self.cache.invalidate(CAMPAIGNS_ALL_KEY)
        BusinessLogger.log_campaign_changed(str(campaign_id), str(user.id), "deleted")
