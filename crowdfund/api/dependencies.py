"""FastAPI dependencies that hand out the application's components."""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthService
from ..database import get_db
from ..services import (
    CampaignService,
    DashboardService,
    DonationService,
    EngagementService,
    UserRepository,
)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_campaign_service(request: Request) -> CampaignService:
    return request.app.state.campaign_service


def get_donation_service(request: Request) -> DonationService:
    return request.app.state.donation_service


def get_engagement_service(request: Request) -> EngagementService:
    return request.app.state.engagement_service


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service
