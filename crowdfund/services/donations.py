"""Donations and fake payments."""
import secrets
import time
import uuid
from decimal import Decimal
from typing import List, Optional

import structlog
from sqlalchemy import distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import MailDeliveryError
from ..core.logging import BusinessLogger
from ..core.security import CurrentUser
from ..models.campaign import Campaign, Donation
from ..models.user import User
from ..schemas.campaign import (
    CampaignDonation,
    DonationResponse,
    DonationStats,
    PaymentStats,
)
from .cache import CAMPAIGNS_ALL_KEY, CampaignCache
from .campaigns import get_campaign_or_404
from .mail import Mailer

logger = structlog.get_logger(__name__)


def generate_transaction_id() -> str:
    """Fake gateway reference: TXN_<epoch ms>_<random>."""
    return f"TXN_{int(time.time() * 1000)}_{secrets.randbelow(10000)}"


class DonationService:
    """Records donations and keeps campaign totals in step."""

    def __init__(self, cache: CampaignCache, mailer: Mailer):
        self.cache = cache
        self.mailer = mailer

    async def record_donation(
        self,
        db: AsyncSession,
        user: CurrentUser,
        campaign_id: uuid.UUID,
        amount: Decimal,
        transaction_id: Optional[str] = None,
    ) -> Donation:
        """Insert the donation and bump the campaign total in one transaction."""
        await get_campaign_or_404(db, campaign_id)

        donation = Donation(
            user_id=user.id,
            campaign_id=campaign_id,
            amount=amount,
            transaction_id=transaction_id,
        )
        db.add(donation)
        await db.execute(
            update(Campaign)
            .where(Campaign.id == campaign_id)
            .values(raised_amount=Campaign.raised_amount + amount)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        await db.refresh(donation)

        await self.cache.invalidate(CAMPAIGNS_ALL_KEY)
        BusinessLogger.log_donation_recorded(
            str(donation.id), str(campaign_id), str(user.id), str(amount), transaction_id
        )
        return donation

    async def pay(
        self,
        db: AsyncSession,
        user: CurrentUser,
        campaign_id: uuid.UUID,
        amount: Decimal,
    ) -> str:
        """Fake payment: always succeeds, then notifies donor and owner."""
        transaction_id = generate_transaction_id()
        await self.record_donation(db, user, campaign_id, amount, transaction_id)
        BusinessLogger.log_payment_completed(
            transaction_id, str(campaign_id), str(user.id), str(amount)
        )

        owner_email = (await db.execute(
            select(User.email)
            .join(Campaign, Campaign.user_id == User.id)
            .where(Campaign.id == campaign_id)
        )).scalar_one()

        await self._notify(
            user.email,
            "Payment Successful",
            f"You have successfully funded {amount}.\nTransaction ID: {transaction_id}",
        )
        await self._notify(
            owner_email,
            "New Funding Received",
            f"Your campaign received {amount}.\nTransaction ID: {transaction_id}",
        )
        return transaction_id

    async def _notify(self, to: str, subject: str, body: str) -> None:
        # The payment is already recorded; delivery is best effort here
        try:
            await self.mailer.send(to, subject, body)
        except MailDeliveryError:
            logger.error("Payment notification not delivered", to=to, subject=subject)

    async def user_donations(
        self,
        db: AsyncSession,
        user: CurrentUser,
        payments_only: bool = False,
    ) -> List[DonationResponse]:
        """Donations made by ``user``, newest first, with campaign titles."""
        stmt = (
            select(Donation, Campaign.title)
            .join(Campaign, Donation.campaign_id == Campaign.id)
            .where(Donation.user_id == user.id)
            .order_by(Donation.created_at.desc())
        )
        if payments_only:
            stmt = stmt.where(Donation.transaction_id.is_not(None))

        result = await db.execute(stmt)
        donations = []
        for donation, title in result.all():
            response = DonationResponse.model_validate(donation)
            response.campaign_title = title
            donations.append(response)
        return donations

    async def campaign_donations(
        self,
        db: AsyncSession,
        campaign_id: uuid.UUID,
    ) -> List[CampaignDonation]:
        stmt = (
            select(Donation.amount, Donation.created_at, User.email)
            .join(User, Donation.user_id == User.id)
            .where(Donation.campaign_id == campaign_id)
            .order_by(Donation.created_at.desc())
        )
        result = await db.execute(stmt)
        return [
            CampaignDonation(amount=amount, created_at=created_at, email=email)
            for amount, created_at, email in result.all()
        ]

    async def donation_stats(self, db: AsyncSession, campaign_id: uuid.UUID) -> DonationStats:
        stmt = select(
            func.count(Donation.id),
            func.coalesce(func.sum(Donation.amount), 0),
        ).where(Donation.campaign_id == campaign_id)
        count, total = (await db.execute(stmt)).one()
        return DonationStats(total_donations=count, total_raised=total)

    async def payment_stats(self, db: AsyncSession, campaign_id: uuid.UUID) -> PaymentStats:
        stmt = select(
            func.count(distinct(Donation.user_id)),
            func.coalesce(func.sum(Donation.amount), 0),
        ).where(Donation.campaign_id == campaign_id)
        donors, total = (await db.execute(stmt)).one()
        return PaymentStats(donors=donors, total_funds=total)
