"""
Verification service: issue, check and track email verification codes.

WHAT: Business rules around VerificationCodeDAO.

WHY: Both registration and email change prove control of an address the
same way, so code issuance and validation live in one place:
- create_code supersedes every earlier unused code for the email
- verify_code consumes a code at most once
- wrong and expired codes are reported with the same message

HOW: Operates on the request session; the caller's transaction makes
invalidate-then-insert atomic.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.exceptions import DatabaseError
from muza_accounts.core.messages import get_message
from muza_accounts.dao.verification_code import VerificationCodeDAO
from muza_accounts.models.verification_code import VerificationPurpose

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Outcome of a code check."""

    is_valid: bool
    message: str


class VerificationService:
    """Issues and validates verification codes."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.codes = VerificationCodeDAO(session)

    async def create_code(self, email: str, purpose: VerificationPurpose) -> str:
        """
        Issue a new code for an email.

        Args:
            email: Normalized target address
            purpose: Flow the code belongs to

        Returns:
            The plaintext 6-digit code

        Raises:
            DatabaseError: If the code could not be stored
        """
        try:
            verification = await self.codes.create_code(email, purpose)
        except SQLAlchemyError as e:
            raise DatabaseError(
                operation="create_verification_code",
                reason=str(e),
            ) from e

        logger.info(
            "Verification code issued",
            extra={"email": email, "purpose": purpose.value, "code_id": verification.id},
        )
        return verification.code

    async def verify_code(self, email: str, code: str) -> VerificationResult:
        """
        Check a code and consume it on success.

        The lookup is by email and code only. A code's purpose labels the
        flow that issued it but does not restrict where it is redeemed, so a
        live registration code also completes an email change for the same
        address and the reverse. Both flows issue codes to the address being
        proven, and create_code supersedes earlier codes for it regardless of
        purpose.

        Returns:
            VerificationResult; invalid for wrong, used and expired codes alike
        """
        verification = await self.codes.get_active_code(email, code)
        if verification is None:
            logger.info("Verification code rejected", extra={"email": email})
            return VerificationResult(
                is_valid=False,
                message=get_message("invalid_or_expired_code"),
            )

        await self.codes.mark_as_used(verification)
        logger.info(
            "Verification code consumed",
            extra={"email": email, "code_id": verification.id},
        )
        return VerificationResult(is_valid=True, message=get_message("code_verified"))

    async def has_pending_verification(self, email: str) -> bool:
        """True iff an unused, unexpired code exists for the email (any purpose)."""
        return await self.codes.has_active_code(email)

    async def discard_code(self, email: str, code: str) -> int:
        """Delete a consumed code row."""
        return await self.codes.delete_code(email, code)

    async def cleanup_expired_codes(self, older_than_days: int = 7) -> int:
        """Maintenance: drop long-expired codes."""
        removed = await self.codes.cleanup_expired_codes(older_than_days)
        logger.info("Expired verification codes removed", extra={"count": removed})
        return removed
