"""Database module."""
from .engine import Database, create_engine
from .session import get_db

__all__ = [
    "Database",
    "create_engine",
    "get_db",
]
