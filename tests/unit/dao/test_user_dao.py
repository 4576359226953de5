"""
Unit tests for UserDAO.
"""

import pytest

from muza_accounts.core.exceptions import UserExistsError
from muza_accounts.dao.user import UserDAO
from tests.factories import UserFactory


class TestEmailLookup:
    """Tests for address lookups used by uniqueness checks."""

    @pytest.mark.asyncio
    async def test_get_by_email_is_case_insensitive(self, db_session):
        user = await UserFactory.create(db_session, email="anna@example.com")

        found = await UserDAO(db_session).get_by_email("  Anna@Example.COM ")

        assert found is not None
        assert found.id == user.id

    @pytest.mark.asyncio
    async def test_email_exists_excluding_owner(self, db_session):
        """
        Test the owner of an address is not a conflict with itself.

        WHY: Email change checks "owned by another account".
        """
        user = await UserFactory.create(db_session, email="anna@example.com")
        dao = UserDAO(db_session)

        assert await dao.email_exists("anna@example.com") is True
        assert await dao.email_exists("anna@example.com", exclude_user_id=user.id) is False


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_session):
        await UserFactory.create(db_session, email="anna@example.com")

        with pytest.raises(UserExistsError):
            await UserDAO(db_session).create_user(
                email="anna@example.com",
                name="Anna",
                hashed_password=None,
            )


class TestUpdates:
    @pytest.mark.asyncio
    async def test_update_email(self, db_session):
        user = await UserFactory.create(db_session, email="old@example.com")

        updated = await UserDAO(db_session).update_email(user.id, "new@example.com")

        assert updated.email == "new@example.com"

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db_session):
        assert await UserDAO(db_session).update_name(9999, "Nobody") is None

    @pytest.mark.asyncio
    async def test_set_and_clear_avatar(self, db_session):
        user = await UserFactory.create(db_session)
        dao = UserDAO(db_session)

        updated = await dao.set_avatar(user.id, "/uploads/profiles/a.png")
        assert updated.avatar_url == "/uploads/profiles/a.png"

        cleared = await dao.set_avatar(user.id, None)
        assert cleared.avatar_url is None
