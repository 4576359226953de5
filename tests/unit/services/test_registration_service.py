"""
Unit tests for RegistrationService.
"""

import pytest

from muza_accounts.core.auth import verify_token
from muza_accounts.core.exceptions import (
    AuthenticationError,
    EmailExistsError,
    InputError,
    InvalidVerificationCodeError,
    PendingVerificationError,
    ValidationError,
)
from muza_accounts.models.user import AuthProvider
from muza_accounts.services.email import EmailService, EmailType, MockEmailProvider
from muza_accounts.services.registration import RegistrationService
from tests.factories import UserFactory


@pytest.fixture
def provider():
    return MockEmailProvider()


@pytest.fixture
def service(db_session, provider):
    return RegistrationService(db_session, email_service=EmailService(provider))


class TestInitiate:
    @pytest.mark.asyncio
    async def test_sends_registration_code(self, service, provider):
        email = await service.initiate(" Anna@Example.com ")

        assert email == "anna@example.com"
        assert provider.sent_emails[0].email_type == EmailType.REGISTRATION_CODE

    @pytest.mark.asyncio
    async def test_registered_address(self, db_session, service):
        await UserFactory.create(db_session, email="anna@example.com")

        with pytest.raises(EmailExistsError):
            await service.initiate("anna@example.com")

    @pytest.mark.asyncio
    async def test_pending_code(self, service):
        await service.initiate("anna@example.com")

        with pytest.raises(PendingVerificationError):
            await service.initiate("anna@example.com")

    @pytest.mark.asyncio
    async def test_resend_while_pending(self, service, provider):
        await service.initiate("anna@example.com")

        await service.resend_code("anna@example.com")

        assert len(provider.sent_emails) == 2

    @pytest.mark.asyncio
    async def test_bad_format(self, service):
        with pytest.raises(InputError):
            await service.initiate("anna")


class TestVerify:
    @pytest.mark.asyncio
    async def test_creates_account(self, service, fixed_code):
        await service.initiate("anna@example.com")

        user, token = await service.verify("anna@example.com", fixed_code, "Anna", "Secret123")

        assert user.email == "anna@example.com"
        assert user.auth_provider == AuthProvider.LOCAL
        assert verify_token(token)["user_id"] == user.id

    @pytest.mark.asyncio
    async def test_wrong_code(self, service, fixed_code):
        await service.initiate("anna@example.com")

        with pytest.raises(InvalidVerificationCodeError):
            await service.verify("anna@example.com", "000000", "Anna", "Secret123")

    @pytest.mark.asyncio
    async def test_short_password(self, service, fixed_code):
        await service.initiate("anna@example.com")

        with pytest.raises(InputError):
            await service.verify("anna@example.com", fixed_code, "Anna", "abc")

    @pytest.mark.asyncio
    async def test_missing_name(self, service, fixed_code):
        with pytest.raises(ValidationError):
            await service.verify("anna@example.com", fixed_code, " ", "Secret123")


class TestLogin:
    @pytest.mark.asyncio
    async def test_success(self, db_session, service):
        user = await UserFactory.create(db_session, email="anna@example.com", password="Secret123")

        logged_in, token = await service.login("ANNA@example.com", "Secret123")

        assert logged_in.id == user.id
        assert verify_token(token)["email"] == "anna@example.com"

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_match(self, db_session, service):
        await UserFactory.create(db_session, email="anna@example.com", password="Secret123")

        with pytest.raises(AuthenticationError) as wrong:
            await service.login("anna@example.com", "nope")
        with pytest.raises(AuthenticationError) as unknown:
            await service.login("nobody@example.com", "nope")

        assert wrong.value.message == unknown.value.message

    @pytest.mark.asyncio
    async def test_federated_account_cannot_use_password(self, db_session, service):
        await UserFactory.create(
            db_session, email="anna@example.com", password=None, auth_provider=AuthProvider.GOOGLE
        )

        with pytest.raises(AuthenticationError):
            await service.login("anna@example.com", "anything")
