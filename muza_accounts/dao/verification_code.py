"""
Verification code DAO.

WHAT: Data access for verification codes: issuance, lookup of the active
code, consumption and cleanup.

WHY: The one-active-code-per-email invariant lives here: issuing a code
first marks every unused code of the email as used, in the caller's
transaction, then inserts the new one.

HOW: Extends BaseDAO with code-specific methods:
- create_code: invalidate previous unused codes, insert a new one
- get_active_code: unused, unexpired row matching email + code
- has_active_code: any unused, unexpired row for email
- mark_as_used / delete_code / delete_for_email / cleanup_expired_codes
"""

from datetime import timedelta
from typing import Optional
from sqlalchemy import select, and_, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.dao.base import BaseDAO
from muza_accounts.models.base import utcnow
from muza_accounts.models.verification_code import VerificationCode, VerificationPurpose


class VerificationCodeDAO(BaseDAO[VerificationCode]):
    """Data Access Object for verification codes."""

    def __init__(self, session: AsyncSession):
        super().__init__(VerificationCode, session)

    async def create_code(
        self,
        email: str,
        purpose: VerificationPurpose,
        invalidate_previous: bool = True,
    ) -> VerificationCode:
        """
        Create a new verification code for an email.

        HOW:
        1. Optionally mark all unused codes for the email as used
        2. Generate a 6-digit code with a fresh expiry
        3. Store and return the new row

        Args:
            email: Normalized target address
            purpose: Flow the code is issued for
            invalidate_previous: Whether to supersede earlier unused codes

        Returns:
            Created VerificationCode
        """
        if invalidate_previous:
            await self.invalidate_unused_codes(email)

        return await self.create(
            email=email,
            code=VerificationCode.generate_code(),
            purpose=purpose,
            expires_at=VerificationCode.get_expiration(),
            is_used=False,
        )

    async def invalidate_unused_codes(self, email: str) -> int:
        """
        Mark all unused codes for an email as used, regardless of purpose.

        Returns:
            Number of codes invalidated
        """
        stmt = (
            update(VerificationCode)
            .where(
                and_(
                    VerificationCode.email == email,
                    VerificationCode.is_used.is_(False),
                )
            )
            .values(is_used=True, updated_at=utcnow())
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_active_code(self, email: str, code: str) -> Optional[VerificationCode]:
        """
        Find the unused, unexpired row with exactly this email and code.

        Returns:
            VerificationCode if valid, None if wrong, used or expired
        """
        stmt = (
            select(VerificationCode)
            .where(
                and_(
                    VerificationCode.email == email,
                    VerificationCode.code == code,
                    VerificationCode.is_used.is_(False),
                    VerificationCode.expires_at > utcnow(),
                )
            )
            .order_by(VerificationCode.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def has_active_code(self, email: str) -> bool:
        """True iff an unused, unexpired code exists for the email."""
        stmt = (
            select(VerificationCode.id)
            .where(
                and_(
                    VerificationCode.email == email,
                    VerificationCode.is_used.is_(False),
                    VerificationCode.expires_at > utcnow(),
                )
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_as_used(self, code: VerificationCode) -> VerificationCode:
        """Consume a code so it can never validate again."""
        code.is_used = True
        await self.session.flush()
        await self.session.refresh(code)
        return code

    async def delete_code(self, email: str, code: str) -> int:
        """
        Delete rows matching email + code.

        WHY: The email-change flow removes the consumed row once the new
        address is applied.

        Returns:
            Number of rows deleted
        """
        result = await self.session.execute(
            delete(VerificationCode).where(
                and_(
                    VerificationCode.email == email,
                    VerificationCode.code == code,
                )
            )
        )
        return result.rowcount

    async def delete_for_email(self, email: str) -> int:
        """Delete every code addressed to an email."""
        result = await self.session.execute(
            delete(VerificationCode).where(VerificationCode.email == email)
        )
        return result.rowcount

    async def cleanup_expired_codes(self, older_than_days: int = 7) -> int:
        """
        Delete codes that expired more than ``older_than_days`` ago.

        Returns:
            Number of rows deleted
        """
        cutoff = utcnow() - timedelta(days=older_than_days)
        result = await self.session.execute(
            delete(VerificationCode).where(VerificationCode.expires_at < cutoff)
        )
        return result.rowcount
