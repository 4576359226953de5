"""
Verification code model for registration and email-change confirmation.

WHAT: Stores short-lived, single-use 6-digit codes sent to an email address.

WHY: Proving control of an address requires:
1. Time-limited codes (15 minutes by default)
2. One-time use (is_used flips on consumption or supersession)
3. Cryptographically secure generation (secrets module)

HOW: Codes are keyed by the target email, not by user, because the address
being verified may not belong to any account yet (registration) or may be
the new address of an existing account (email change).
"""

import enum
import secrets
from datetime import datetime, timedelta
from sqlalchemy import Column, String, Enum, DateTime, Boolean, Index

from muza_accounts.core.config import settings
from muza_accounts.models.base import Base, TimestampMixin, PrimaryKeyMixin, utcnow


class VerificationPurpose(str, enum.Enum):
    """Flow a code was issued for."""

    REGISTRATION = "registration"
    EMAIL_CHANGE = "email_change"


class VerificationCode(Base, PrimaryKeyMixin, TimestampMixin):
    """
    Single-use verification code addressed to an email.

    Lifecycle: created -> consumed (is_used) | superseded (is_used) | expired.
    At most one active (unused, unexpired) code exists per email.
    """

    __tablename__ = "verification_codes"

    email = Column(String(255), nullable=False, index=True)
    """Address being verified (stored normalized)."""

    code = Column(String(6), nullable=False)
    """6-digit numeric code."""

    purpose = Column(
        Enum(
            VerificationPurpose,
            name="verificationpurpose",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )

    expires_at = Column(DateTime, nullable=False)

    is_used = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        # For finding the active code of an email
        Index(
            "ix_verification_codes_email_used_expires",
            "email",
            "is_used",
            "expires_at",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<VerificationCode(id={self.id}, purpose={self.purpose}, "
            f"email={self.email}, expires_at={self.expires_at})>"
        )

    @property
    def is_expired(self) -> bool:
        return utcnow() >= self.expires_at

    @property
    def is_active(self) -> bool:
        """Unused and unexpired."""
        return not self.is_used and not self.is_expired

    @classmethod
    def generate_code(cls) -> str:
        """
        Generate a 6-digit numeric code in the range 100000-999999.

        WHY: No leading zeros keeps the code exactly six characters even when
        clients treat it as a number.
        """
        return str(100000 + secrets.randbelow(900000))

    @classmethod
    def get_expiration(cls) -> datetime:
        return utcnow() + timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)
