"""Per-user dashboard views."""
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.security import CurrentUser
from ..models.campaign import Campaign, Comment, Like
from ..schemas.campaign import CampaignResponse, CommentResponse, LikedCampaign


class DashboardService:
    """Read-only views of what the current user created, funded or liked.

    Funded projects come from DonationService.user_donations.
    """

    async def my_campaigns(self, db: AsyncSession, user: CurrentUser) -> List[CampaignResponse]:
        result = await db.execute(
            select(Campaign)
            .where(Campaign.user_id == user.id)
            .order_by(Campaign.created_at.desc())
        )
        return [CampaignResponse.model_validate(c) for c in result.scalars().all()]

    async def my_comments(self, db: AsyncSession, user: CurrentUser) -> List[CommentResponse]:
        result = await db.execute(
            select(Comment, Campaign.title)
            .join(Campaign, Comment.campaign_id == Campaign.id)
            .where(Comment.user_id == user.id)
            .order_by(Comment.created_at.desc())
        )
        comments = []
        for comment, title in result.all():
            response = CommentResponse.model_validate(comment)
            response.campaign_title = title
            comments.append(response)
        return comments

    async def my_likes(self, db: AsyncSession, user: CurrentUser) -> List[LikedCampaign]:
        result = await db.execute(
            select(Campaign.id, Campaign.title, Like.created_at)
            .join(Campaign, Like.campaign_id == Campaign.id)
            .where(Like.user_id == user.id)
            .order_by(Like.created_at.desc())
        )
        return [
            LikedCampaign(id=campaign_id, title=title, created_at=created_at)
            for campaign_id, title, created_at in result.all()
        ]
