"""
Unit tests for VerificationCodeDAO.

WHY: The code store enforces the core guarantees of both verification
flows:
1. At most one active code per email (new codes supersede old ones)
2. Codes are single-use
3. Expired codes never validate

HOW: Runs against the in-memory SQLite schema from conftest.
"""

import pytest
from sqlalchemy import select

from muza_accounts.dao.verification_code import VerificationCodeDAO
from muza_accounts.models.verification_code import VerificationCode, VerificationPurpose
from tests.factories import VerificationCodeFactory


EMAIL = "new@example.com"


class TestCreateCode:
    """Tests for issuing codes."""

    @pytest.mark.asyncio
    async def test_creates_six_digit_code(self, db_session):
        dao = VerificationCodeDAO(db_session)

        verification = await dao.create_code(EMAIL, VerificationPurpose.EMAIL_CHANGE)

        assert len(verification.code) == 6
        assert 100000 <= int(verification.code) <= 999999
        assert verification.is_used is False
        assert verification.is_active is True
        assert verification.purpose == VerificationPurpose.EMAIL_CHANGE

    @pytest.mark.asyncio
    async def test_supersedes_unused_codes_of_any_purpose(self, db_session):
        """
        Test a new code invalidates every earlier unused code for the email.

        WHY: Only the most recently sent code may work, whichever flow sent
        the earlier one.
        """
        dao = VerificationCodeDAO(db_session)
        first = await dao.create_code(EMAIL, VerificationPurpose.REGISTRATION)

        second = await dao.create_code(EMAIL, VerificationPurpose.EMAIL_CHANGE)
        await db_session.refresh(first)

        assert first.is_used is True
        assert second.is_used is False

        result = await db_session.execute(
            select(VerificationCode).where(
                VerificationCode.email == EMAIL,
                VerificationCode.is_used.is_(False),
            )
        )
        assert [row.id for row in result.scalars().all()] == [second.id]

    @pytest.mark.asyncio
    async def test_other_emails_untouched(self, db_session):
        dao = VerificationCodeDAO(db_session)
        other = await dao.create_code("other@example.com", VerificationPurpose.EMAIL_CHANGE)

        await dao.create_code(EMAIL, VerificationPurpose.EMAIL_CHANGE)
        await db_session.refresh(other)

        assert other.is_used is False


class TestGetActiveCode:
    """Tests for code lookup."""

    @pytest.mark.asyncio
    async def test_finds_matching_code(self, db_session):
        created = await VerificationCodeFactory.create(db_session, email=EMAIL, code="654321")

        found = await VerificationCodeDAO(db_session).get_active_code(EMAIL, "654321")

        assert found is not None
        assert found.id == created.id

    @pytest.mark.asyncio
    async def test_wrong_code(self, db_session):
        await VerificationCodeFactory.create(db_session, email=EMAIL, code="654321")

        assert await VerificationCodeDAO(db_session).get_active_code(EMAIL, "000000") is None

    @pytest.mark.asyncio
    async def test_code_for_other_email(self, db_session):
        await VerificationCodeFactory.create(db_session, email="other@example.com", code="654321")

        assert await VerificationCodeDAO(db_session).get_active_code(EMAIL, "654321") is None

    @pytest.mark.asyncio
    async def test_expired_code(self, db_session):
        await VerificationCodeFactory.create(
            db_session, email=EMAIL, code="654321", expires_in_minutes=-1
        )

        assert await VerificationCodeDAO(db_session).get_active_code(EMAIL, "654321") is None

    @pytest.mark.asyncio
    async def test_used_code(self, db_session):
        await VerificationCodeFactory.create(db_session, email=EMAIL, code="654321", is_used=True)

        assert await VerificationCodeDAO(db_session).get_active_code(EMAIL, "654321") is None


class TestHasActiveCode:
    @pytest.mark.asyncio
    async def test_active(self, db_session):
        await VerificationCodeFactory.create(db_session, email=EMAIL)

        assert await VerificationCodeDAO(db_session).has_active_code(EMAIL) is True

    @pytest.mark.asyncio
    async def test_only_expired_or_used(self, db_session):
        await VerificationCodeFactory.create(db_session, email=EMAIL, expires_in_minutes=-1)
        await VerificationCodeFactory.create(db_session, email=EMAIL, code="111111", is_used=True)

        assert await VerificationCodeDAO(db_session).has_active_code(EMAIL) is False


class TestMaintenance:
    @pytest.mark.asyncio
    async def test_mark_as_used(self, db_session):
        created = await VerificationCodeFactory.create(db_session, email=EMAIL)
        dao = VerificationCodeDAO(db_session)

        await dao.mark_as_used(created)

        assert created.is_used is True
        assert await dao.get_active_code(EMAIL, created.code) is None

    @pytest.mark.asyncio
    async def test_delete_code(self, db_session):
        await VerificationCodeFactory.create(db_session, email=EMAIL, code="654321")

        deleted = await VerificationCodeDAO(db_session).delete_code(EMAIL, "654321")

        assert deleted == 1

    @pytest.mark.asyncio
    async def test_cleanup_removes_only_long_expired(self, db_session):
        await VerificationCodeFactory.create(
            db_session, email=EMAIL, code="111111", expires_in_minutes=-(8 * 24 * 60)
        )
        recent = await VerificationCodeFactory.create(
            db_session, email=EMAIL, code="222222", expires_in_minutes=-5
        )
        dao = VerificationCodeDAO(db_session)

        removed = await dao.cleanup_expired_codes(older_than_days=7)

        assert removed == 1
        assert await dao.get_by_id(recent.id) is not None
