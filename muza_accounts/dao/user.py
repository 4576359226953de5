"""
User Data Access Object.

WHY: UserDAO provides database operations for the User model, following
the DAO pattern for separation of concerns and testability.
"""

from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.dao.base import BaseDAO
from muza_accounts.models.base import utcnow
from muza_accounts.models.user import User, AuthProvider
from muza_accounts.core.exceptions import UserExistsError
from muza_accounts.core.messages import get_message


class UserDAO(BaseDAO[User]):
    """
    Data Access Object for User model.

    WHY: All user queries go through this DAO, so email comparison is
    case-insensitive everywhere.
    """

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        WHY: Case-insensitive comparison prevents duplicate accounts with
        different casing (user@example.com vs USER@EXAMPLE.COM).

        Args:
            email: User's email address

        Returns:
            User instance if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_user_id: Optional[int] = None) -> bool:
        """
        Check if an account already owns an email.

        Args:
            email: Email address to check
            exclude_user_id: Ignore this account (the one changing its email)

        Returns:
            True if another account owns the email, False otherwise
        """
        query = select(User.id).where(func.lower(User.email) == email.strip().lower())
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def create_user(
        self,
        email: str,
        name: str,
        hashed_password: Optional[str],
        auth_provider: AuthProvider = AuthProvider.LOCAL,
    ) -> User:
        """
        Create a new user.

        Raises:
            UserExistsError: If email already exists
        """
        if await self.email_exists(email):
            raise UserExistsError(
                message=get_message("user_exists"),
                resource_type="User",
                email=email,
            )

        return await self.create(
            email=email,
            name=name,
            hashed_password=hashed_password,
            auth_provider=auth_provider,
        )

    async def update_email(self, user_id: int, new_email: str) -> Optional[User]:
        return await self.update(user_id, email=new_email)

    async def update_name(self, user_id: int, name: str) -> Optional[User]:
        return await self.update(user_id, name=name)

    async def update_password(self, user_id: int, new_hashed_password: str) -> Optional[User]:
        """
        Update user's password.

        WHY: updated_at is set explicitly so a password change is visible
        even on backends where onupdate is not applied to RETURNING rows.

        Args:
            user_id: User ID
            new_hashed_password: New hashed password (use hash_password())

        Returns:
            Updated User instance if found, None otherwise
        """
        return await self.update(
            user_id,
            hashed_password=new_hashed_password,
            updated_at=utcnow(),
        )

    async def set_avatar(self, user_id: int, avatar_url: Optional[str]) -> Optional[User]:
        """Store (or clear with None) the relative avatar path."""
        return await self.update(user_id, avatar_url=avatar_url)
