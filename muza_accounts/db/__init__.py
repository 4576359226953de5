"""Database package"""

from muza_accounts.db.session import AsyncSessionLocal, engine, get_db
from muza_accounts.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
