"""Donation and fake payment routes."""
import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.security import CurrentUser, get_current_user
from ...database import get_db
from ...schemas.campaign import (
    CampaignDonation,
    DonationCreate,
    DonationCreatedResponse,
    DonationResponse,
    DonationStats,
    PaymentResponse,
    PaymentStats,
)
from ...services.donations import DonationService
from ..dependencies import get_donation_service

router = APIRouter(prefix="/donations", tags=["Donations"])
payments_router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "",
    response_model=DonationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def donate(
    body: DonationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    donation = await donation_service.record_donation(
        db, current_user, body.campaign_id, body.amount
    )
    return DonationCreatedResponse(
        message="Donation successful",
        donation=DonationResponse.model_validate(donation),
    )


@router.get("/my", response_model=List[DonationResponse])
async def my_donations(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    """Donation history of the current user."""
    return await donation_service.user_donations(db, current_user)


@router.get("/campaign/{campaign_id}", response_model=List[CampaignDonation])
async def campaign_donations(
    campaign_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    return await donation_service.campaign_donations(db, campaign_id)


@router.get("/stats/{campaign_id}", response_model=DonationStats)
async def donation_stats(
    campaign_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    return await donation_service.donation_stats(db, campaign_id)


@payments_router.post("/pay", response_model=PaymentResponse)
async def pay(
    body: DonationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    """Fake payment: records the donation and emails donor and owner."""
    transaction_id = await donation_service.pay(
        db, current_user, body.campaign_id, body.amount
    )
    return PaymentResponse(message="Payment successful", transaction_id=transaction_id)


@payments_router.get("/history", response_model=List[DonationResponse])
async def payment_history(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    return await donation_service.user_donations(db, current_user, payments_only=True)


@payments_router.get("/stats/{campaign_id}", response_model=PaymentStats)
async def payment_stats(
    campaign_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    donation_service: DonationService = Depends(get_donation_service),
):
    return await donation_service.payment_stats(db, campaign_id)
