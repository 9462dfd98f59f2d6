"""Like and comment routes."""
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.security import CurrentUser, get_current_user
from ...database import get_db
from ...schemas.campaign import (
    CommentCreate,
    CommentCreatedResponse,
    CommentResponse,
    LikeCount,
)
from ...schemas.common import MessageResponse
from ...services.engagement import EngagementService
from ..dependencies import get_engagement_service

likes_router = APIRouter(prefix="/likes", tags=["Likes"])
comments_router = APIRouter(prefix="/comments", tags=["Comments"])


@likes_router.post("/{campaign_id}", response_model=MessageResponse)
async def like_campaign(
    campaign_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    await engagement_service.like(db, current_user, campaign_id)
    return MessageResponse(message="Campaign liked")


@likes_router.delete("/{campaign_id}", response_model=MessageResponse)
async def unlike_campaign(
    campaign_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    await engagement_service.unlike(db, current_user, campaign_id)
    return MessageResponse(message="Like removed")


@likes_router.get("/count/{campaign_id}", response_model=LikeCount)
async def like_count(
    campaign_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    return LikeCount(total_likes=await engagement_service.like_count(db, campaign_id))


@comments_router.post(
    "/{campaign_id}",
    response_model=CommentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    campaign_id: uuid.UUID,
    body: CommentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    comment = await engagement_service.add_comment(db, current_user, campaign_id, body.comment)
    return CommentCreatedResponse(
        message="Comment added",
        comment=CommentResponse.model_validate(comment),
    )


@comments_router.get("/{campaign_id}", response_model=List[CommentResponse])
async def list_comments(
    campaign_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    return await engagement_service.list_comments(db, campaign_id)


@comments_router.put("/{comment_id}", response_model=MessageResponse)
async def update_comment(
    comment_id: uuid.UUID,
    body: CommentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    """Edit a comment. Author only."""
    await engagement_service.update_comment(db, current_user, comment_id, body.comment)
    return MessageResponse(message="Comment updated")


@comments_router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    engagement_service: EngagementService = Depends(get_engagement_service),
):
    """Delete a comment. Author only."""
    await engagement_service.delete_comment(db, current_user, comment_id)
    return MessageResponse(message="Comment deleted")
