"""Services module."""
from .cache import CampaignCache
from .campaigns import CampaignService
from .dashboard import DashboardService
from .donations import DonationService
from .engagement import EngagementService
from .mail import LogMailer, Mailer, SMTPMailer, build_mailer
from .users import UserRepository

__all__ = [
    "CampaignCache",
    "CampaignService",
    "DashboardService",
    "DonationService",
    "EngagementService",
    "LogMailer",
    "Mailer",
    "SMTPMailer",
    "build_mailer",
    "UserRepository",
]
