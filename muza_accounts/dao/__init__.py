"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from muza_accounts.dao.base import BaseDAO
from muza_accounts.dao.user import UserDAO
from muza_accounts.dao.verification_code import VerificationCodeDAO
from muza_accounts.dao.product import ProductDAO, BoughtProductDAO

__all__ = [
    "BaseDAO",
    "UserDAO",
    "VerificationCodeDAO",
    "ProductDAO",
    "BoughtProductDAO",
]
