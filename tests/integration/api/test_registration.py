"""
Integration tests for registration and login.

WHAT: Tests /api/auth/register/{initiate,verify,resend-code} and
/api/auth/login end-to-end with the mock mail provider.
"""

import pytest
from httpx import AsyncClient

from muza_accounts.core.auth import verify_token
from muza_accounts.core.messages import get_message
from muza_accounts.services.email import EmailType
from tests.factories import TEST_PASSWORD


class TestRegistration:
    @pytest.mark.asyncio
    async def test_full_flow(self, client: AsyncClient, fixed_code, mock_email_provider):
        initiate = await client.post(
            "/api/auth/register/initiate", json={"email": "Anna@Example.com"}
        )

        assert initiate.status_code == 200
        assert initiate.json()["email"] == "anna@example.com"
        assert mock_email_provider.sent_emails[0].email_type == EmailType.REGISTRATION_CODE

        verify = await client.post(
            "/api/auth/register/verify",
            json={
                "email": "anna@example.com",
                "verificationCode": fixed_code,
                "name": "Anna",
                "password": "Secret123",
            },
        )

        assert verify.status_code == 201
        body = verify.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "anna@example.com"
        assert verify_token(body["access_token"])["user_id"] == body["user"]["id"]

        profile = await client.get(
            "/api/users/profile",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert profile.status_code == 200

    @pytest.mark.asyncio
    async def test_initiate_twice_is_pending(self, client: AsyncClient):
        await client.post("/api/auth/register/initiate", json={"email": "anna@example.com"})

        response = await client.post(
            "/api/auth/register/initiate", json={"email": "anna@example.com"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "PENDING_VERIFICATION"

    @pytest.mark.asyncio
    async def test_resend_while_pending(self, client: AsyncClient, mock_email_provider):
        await client.post("/api/auth/register/initiate", json={"email": "anna@example.com"})

        response = await client.post(
            "/api/auth/register/resend-code", json={"email": "anna@example.com"}
        )

        assert response.status_code == 200
        assert len(mock_email_provider.sent_emails) == 2

    @pytest.mark.asyncio
    async def test_registered_address(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/auth/register/initiate", json={"email": test_user.email}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "EMAIL_EXISTS"

    @pytest.mark.asyncio
    async def test_wrong_code(self, client: AsyncClient, fixed_code):
        await client.post("/api/auth/register/initiate", json={"email": "anna@example.com"})

        response = await client.post(
            "/api/auth/register/verify",
            json={
                "email": "anna@example.com",
                "verificationCode": "000000",
                "name": "Anna",
                "password": "Secret123",
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_VERIFICATION_CODE"

class TestLogin:
    @pytest.mark.asyncio
    async def test_success(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/auth/login",
            json={"email": test_user.email, "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["user"]["id"] == test_user.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/auth/login",
            json={"email": test_user.email, "password": "WrongPassword"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == get_message("invalid_credentials")

    @pytest.mark.asyncio
    async def test_unknown_email(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": "WrongPassword"},
        )

        assert response.status_code == 401

class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers
