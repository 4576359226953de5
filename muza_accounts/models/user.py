"""
User model.

WHY: Users own a profile (name, avatar), credentials (email, password hash)
and purchases. Federated users (Google, Facebook) have no password hash.
"""

import enum
from sqlalchemy import Column, String, Enum, Boolean

from muza_accounts.models.base import Base, TimestampMixin, PrimaryKeyMixin


class AuthProvider(str, enum.Enum):
    """
    How the account signs in.

    WHY: Federated accounts may have no password; clients show a
    "set password" form instead of "change password" for them.
    """

    LOCAL = "local"
    GOOGLE = "google"
    FACEBOOK = "facebook"


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """User account with profile data and credentials."""

    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    # WHY: Stored stripped and lower-cased; the unique index is the final
    # guard against two accounts claiming one address
    email = Column(String(255), unique=True, index=True, nullable=False)

    # WHY: hashed_password is nullable to support federated-only users
    hashed_password = Column(String(255), nullable=True)

    # Relative path under the public uploads mount, e.g. /uploads/profiles/x.png
    avatar_url = Column(String(512), nullable=True)

    auth_provider = Column(
        Enum(
            AuthProvider,
            name="authprovider",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=AuthProvider.LOCAL,
    )

    is_admin = Column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
