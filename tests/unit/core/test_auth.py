"""
Unit tests for password hashing and JWT helpers.

WHY: Every authenticated endpoint depends on these; a regression locks
users out or lets forged tokens through.
"""

from datetime import timedelta

import pytest
from jose import jwt

from muza_accounts.core.auth import (
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)
from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import TokenExpiredError, TokenInvalidError


class TestPasswordHashing:
    """Tests for bcrypt hashing."""

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("SecurePassword123!")

        assert hashed != "SecurePassword123!"
        assert hashed.startswith("$2b$")

    def test_verify_correct_password(self):
        hashed = hash_password("SecurePassword123!")

        assert verify_password("SecurePassword123!", hashed) is True

    def test_verify_wrong_password(self):
        hashed = hash_password("SecurePassword123!")

        assert verify_password("WrongPassword", hashed) is False

    def test_verify_without_stored_hash(self):
        """
        Test accounts without a hash never match.

        WHY: Federated accounts have no password; any guess must fail.
        """
        assert verify_password("anything", None) is False
        assert verify_password("anything", "") is False


class TestTokens:
    """Tests for JWT creation and verification."""

    def test_round_trip_claims(self):
        token = create_access_token({"user_id": 7, "email": "a@example.com"})

        payload = verify_token(token)

        assert payload["user_id"] == 7
        assert payload["email"] == "a@example.com"
        assert {"exp", "iat", "nbf"} <= payload.keys()

    def test_expired_token(self):
        token = create_access_token({"user_id": 7}, expires_delta=timedelta(minutes=-5))

        with pytest.raises(TokenExpiredError):
            verify_token(token)

    def test_wrong_signature(self):
        token = jwt.encode({"user_id": 7}, "other-secret", algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(TokenInvalidError):
            verify_token(token)

    def test_malformed_token(self):
        with pytest.raises(TokenInvalidError):
            verify_token("not-a-jwt")
