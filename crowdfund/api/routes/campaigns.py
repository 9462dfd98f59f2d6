"""Campaign routes."""
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.security import CurrentUser, get_current_user
from ...database import get_db
from ...schemas.campaign import CampaignCreate, CampaignCreatedResponse, CampaignResponse
from ...schemas.common import MessageResponse
from ...services.campaigns import CampaignService
from ..dependencies import get_campaign_service

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


@router.post(
    "",
    response_model=CampaignCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_campaign(
    body: CampaignCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    campaign = await campaign_service.create_campaign(db, current_user, body)
    return CampaignCreatedResponse(
        message="Campaign created successfully",
        campaign=CampaignResponse.model_validate(campaign),
    )


@router.get("", response_model=List[CampaignResponse])
async def list_campaigns(
    db: AsyncSession = Depends(get_db),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    """List campaigns, served from cache when possible."""
    return await campaign_service.list_campaigns(db)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    return await campaign_service.get_campaign(db, campaign_id)


@router.put("/{campaign_id}", response_model=MessageResponse)
async def update_campaign(
    campaign_id: uuid.UUID,
    body: CampaignCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    """Update a campaign. Owner only."""
    await campaign_service.update_campaign(db, current_user, campaign_id, body)
    return MessageResponse(message="Campaign updated successfully")


@router.delete("/{campaign_id}", response_model=MessageResponse)
async def delete_campaign(
    campaign_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    campaign_service: CampaignService = Depends(get_campaign_service),
):
    """Delete a campaign. Owner only."""
    await campaign_service.delete_campaign(db, current_user, campaign_id)
    return MessageResponse(message="Campaign deleted successfully")
