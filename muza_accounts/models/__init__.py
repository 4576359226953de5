"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from muza_accounts.models.base import Base, TimestampMixin, PrimaryKeyMixin, utcnow
from muza_accounts.models.user import User, AuthProvider
from muza_accounts.models.verification_code import VerificationCode, VerificationPurpose
from muza_accounts.models.product import Product, BoughtProduct

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "utcnow",
    "User",
    "AuthProvider",
    "VerificationCode",
    "VerificationPurpose",
    "Product",
    "BoughtProduct",
]
