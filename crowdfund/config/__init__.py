"""Configuration module."""
from .settings import (
    APISettings,
    AuthSettings,
    DatabaseSettings,
    MailSettings,
    MonitoringSettings,
    RedisSettings,
    Settings,
)

__all__ = [
    "APISettings",
    "AuthSettings",
    "DatabaseSettings",
    "MailSettings",
    "MonitoringSettings",
    "RedisSettings",
    "Settings",
]
