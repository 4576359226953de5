"""
Registration and login service.

WHAT: Email-code registration (initiate, verify, resend) and password login.

WHY: A new account is created only after its owner proves control of the
address with a registration code, the same way an email change is
confirmed. Login issues the JWT used by every authenticated endpoint.

HOW:
1. initiate: email present -> format -> not registered -> no pending code;
   issue a registration code and mail it
2. verify: fields present -> password length -> code valid -> address still
   free -> create account -> drop the consumed code -> issue token
3. resend: email present -> format -> not registered -> new code
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.auth import create_access_token, hash_password, verify_password
from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import (
    AuthenticationError,
    EmailExistsError,
    InputError,
    InvalidVerificationCodeError,
    PendingVerificationError,
    UserExistsError,
    ValidationError,
)
from muza_accounts.core.messages import get_message
from muza_accounts.dao.user import UserDAO
from muza_accounts.models.user import AuthProvider, User
from muza_accounts.models.verification_code import VerificationPurpose
from muza_accounts.services.account import is_valid_email, normalize_email
from muza_accounts.services.email import EmailService
from muza_accounts.services.verification import VerificationService

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return create_access_token({"user_id": user.id, "email": user.email})


class RegistrationService:
    """Sign-up by emailed code, and password login."""

    def __init__(self, session: AsyncSession, email_service: Optional[EmailService] = None):
        self.session = session
        self.email_service = email_service
        self.users = UserDAO(session)
        self.verification = VerificationService(session)

    def _require_email(self, email: Optional[str]) -> str:
        email = normalize_email(email)
        if not email:
            raise ValidationError(message=get_message("email_required"))
        if not is_valid_email(email):
            raise InputError(message=get_message("invalid_email_format"), email=email)
        return email

    async def _issue_and_send(self, email: str) -> None:
        code = await self.verification.create_code(email, VerificationPurpose.REGISTRATION)
        await self.email_service.send_verification_code(
            email, code, VerificationPurpose.REGISTRATION
        )

    async def initiate(self, email: Optional[str]) -> str:
        """
        Mail a registration code to an unregistered address.

        Raises:
            ValidationError: Missing or malformed email
            EmailExistsError: The address is already registered
            PendingVerificationError: A code for the address is still active
        """
        email = self._require_email(email)

        if await self.users.email_exists(email):
            raise EmailExistsError(message=get_message("email_exists"), email=email)

        if await self.verification.has_pending_verification(email):
            raise PendingVerificationError(message=get_message("pending_verification"), email=email)

        await self._issue_and_send(email)
        logger.info("Registration initiated", extra={"email": email})
        return email

    async def resend_code(self, email: Optional[str]) -> str:
        """Issue a fresh registration code; the previous one is superseded."""
        email = self._require_email(email)

        if await self.users.email_exists(email):
            raise EmailExistsError(message=get_message("email_exists"), email=email)

        await self._issue_and_send(email)
        logger.info("Registration code resent", extra={"email": email})
        return email

    async def verify(
        self,
        email: Optional[str],
        code: Optional[str],
        name: Optional[str],
        password: Optional[str],
    ) -> Tuple[User, str]:
        """
        Create the account once the registration code checks out.

        Returns:
            (created user, access token)

        Raises:
            ValidationError: Missing fields or short password
            InvalidVerificationCodeError: Wrong, used or expired code
            UserExistsError: The address was registered in the meantime
        """
        email = normalize_email(email)
        code = (code or "").strip()
        name = (name or "").strip()
        if not email or not code or not name or not password:
            raise ValidationError(message=get_message("registration_fields_required"))

        if len(password) < settings.MIN_PASSWORD_LENGTH:
            raise InputError(
                message=get_message(
                    "password_too_short", min_length=settings.MIN_PASSWORD_LENGTH
                ),
                min_length=settings.MIN_PASSWORD_LENGTH,
            )

        result = await self.verification.verify_code(email, code)
        if not result.is_valid:
            raise InvalidVerificationCodeError(message=result.message, email=email)

        try:
            user = await self.users.create_user(
                email=email,
                name=name,
                hashed_password=hash_password(password),
                auth_provider=AuthProvider.LOCAL,
            )
        except IntegrityError as e:
            raise UserExistsError(message=get_message("user_exists"), email=email) from e

        await self.verification.discard_code(email, code)

        logger.info("User registered", extra={"user_id": user.id, "email": email})
        return user, issue_token(user)

    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Authenticate with email and password.

        WHY: One generic message for unknown email, federated account and
        wrong password prevents account enumeration.

        Raises:
            AuthenticationError: If the credentials do not match
        """
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError(message=get_message("invalid_credentials"))

        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Login failed", extra={"email": email})
            raise AuthenticationError(message=get_message("invalid_credentials"))

        logger.info("Login succeeded", extra={"user_id": user.id})
        return user, issue_token(user)
