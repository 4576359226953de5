"""
JWT authentication and password hashing utilities.

WHY: This module provides secure authentication functionality:
1. Password hashing with bcrypt (OWASP A07: Authentication Failures)
2. JWT token generation and verification
"""

from datetime import timedelta
from typing import Dict, Any, Optional
from jose import jwt, JWTError
from passlib.context import CryptContext

from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
)
from muza_accounts.models.base import utcnow


# Password hashing context
# WHY: bcrypt with 12 rounds keeps hashes compatible with accounts created
# before this service took over the users table.
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


# ============================================================================
# Password Hashing
# ============================================================================


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password (60 characters, includes salt and cost factor)
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    WHY: Constant-time comparison (built into passlib) prevents timing
    attacks. Accounts without a stored hash (federated sign-in) never match.

    Args:
        plain_password: Password provided by user
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================================
# JWT Token Management
# ============================================================================


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Token includes:
    - User data (user_id, email)
    - exp: Expiration time (default: JWT_EXPIRATION_MINUTES)
    - iat: Issued at time
    - nbf: Not before time

    Args:
        data: Claims to encode in token
        expires_delta: Optional custom expiration time

    Returns:
        JWT token string
    """
    to_encode = data.copy()
    now = utcnow()

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    to_encode.update(
        {
            "exp": expire,
            "iat": now,
            "nbf": now,
        }
    )

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload with user data

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is malformed or signature invalid
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )

    except jwt.ExpiredSignatureError:
        raise TokenExpiredError(message="Token has expired")

    except JWTError as e:
        raise TokenInvalidError(
            message="Invalid token",
            error=str(e),
        )
