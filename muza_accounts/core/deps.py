"""
FastAPI dependencies for authentication and injected collaborators.

WHY: Dependencies provide reusable authentication logic and hand route
handlers the collaborators built once in create_app (email service,
image storage), so tests can swap them without patching modules.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.auth import verify_token
from muza_accounts.core.exceptions import (
    AuthenticationError,
    TokenExpiredError,
    TokenInvalidError,
)
from muza_accounts.db.session import get_db
from muza_accounts.dao.user import UserDAO
from muza_accounts.models.user import User
from muza_accounts.services.avatar_storage import ProfileImageStorage
from muza_accounts.services.email import EmailService


# HTTP Bearer token security scheme
# Format: "Authorization: Bearer <token>"
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        AuthenticationError: If token is invalid, expired, or user not found
    """
    try:
        payload = verify_token(credentials.credentials)
    except (TokenExpiredError, TokenInvalidError) as e:
        raise AuthenticationError(
            message=str(e),
            status_code=e.status_code,
        )

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError(message="Invalid token: missing user_id")

    # WHY: User data in token might be stale; always fetch current data
    user = await UserDAO(db).get_by_id(user_id)
    if not user:
        # WHY: User might have been deleted after token was issued
        raise AuthenticationError(message="User not found", user_id=user_id)

    return user


def get_email_service(request: Request) -> EmailService:
    """Email service built by create_app."""
    return request.app.state.email_service


def get_image_storage(request: Request) -> ProfileImageStorage:
    """Profile image storage built by create_app."""
    return request.app.state.image_storage
