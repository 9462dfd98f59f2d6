"""Database models module."""
from .base import Base, utcnow
from .user import User
from .campaign import Campaign, Comment, Donation, Like

__all__ = [
    "Base",
    "utcnow",
    "User",
    "Campaign",
    "Donation",
    "Like",
    "Comment",
]
