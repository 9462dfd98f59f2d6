"""Dashboard routes."""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.security import CurrentUser, get_current_user
from ...database import get_db
from ...schemas.campaign import (
    CampaignResponse,
    CommentResponse,
    DonationResponse,
    LikedCampaign,
)
from ...services.dashboard import DashboardService
from ...services.donations import DonationService
from ..dependencies import get_dashboard_service, get_donation_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/funded", response_model=List[DonationResponse])
async def funded_projects(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    """Campaigns the current user has funded."""
    return await donation_service.user_donations(db, current_user)


@router.get("/comments", response_model=List[CommentResponse])
async def my_comments(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard_service.my_comments(db, current_user)


@router.get("/my-campaigns", response_model=List[CampaignResponse])
async def my_campaigns(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard_service.my_campaigns(db, current_user)


@router.get("/likes", response_model=List[LikedCampaign])
async def my_likes(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    return await dashboard_service.my_likes(db, current_user)
