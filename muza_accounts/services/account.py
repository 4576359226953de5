"""
Account service: profile, credential and email-change operations.

WHAT: Applies changes to a user's account once input checks (and, for
email changes, code verification) pass.

WHY: Handlers stay thin; the ordering of checks lives here so every
client gets the same error for the same situation:

Email change
1. initiate: fields present -> format -> same account -> user exists ->
   differs from current -> not owned by another account -> no pending code;
   then issue an email_change code and mail it to the new address
2. verify: fields present -> same account -> code valid -> address still
   free -> update email -> drop the consumed code -> notify old address
3. resend: email present -> format -> not owned -> issue and mail a new code
   (no pending-code check, the new code supersedes the old one)

HOW: Runs inside the request transaction, so a failure at any step leaves
the account and the code store unchanged. Avatar operations commit
themselves before touching files on disk, since a file delete cannot be
rolled back.
"""

import logging
import re
from typing import BinaryIO, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.auth import hash_password, verify_password
from muza_accounts.core.config import settings
from muza_accounts.core.exceptions import (
    AuthorizationError,
    EmailExistsError,
    IncorrectPasswordError,
    InputError,
    InvalidVerificationCodeError,
    PendingEmailChangeError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)
from muza_accounts.core.messages import get_message
from muza_accounts.dao.product import BoughtProductDAO
from muza_accounts.dao.user import UserDAO
from muza_accounts.dao.verification_code import VerificationCodeDAO
from muza_accounts.models.user import User
from muza_accounts.models.verification_code import VerificationPurpose
from muza_accounts.services.avatar_storage import ProfileImageStorage
from muza_accounts.services.email import EmailService
from muza_accounts.services.verification import VerificationService

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: Optional[str]) -> str:
    """Strip and lower-case an address; None becomes an empty string."""
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def ensure_own_account(acting_user_id: int, target_user_id: int) -> None:
    """
    Reject operations addressed to another account.

    Raises:
        AuthorizationError: If the body id is not the authenticated user
    """
    if target_user_id != acting_user_id:
        raise AuthorizationError(
            message=get_message("forbidden_other_user"),
            acting_user_id=acting_user_id,
            target_user_id=target_user_id,
        )


class AccountService:
    """Profile and credential management for one request."""

    def __init__(
        self,
        session: AsyncSession,
        email_service: Optional[EmailService] = None,
        storage: Optional[ProfileImageStorage] = None,
    ):
        self.session = session
        self.email_service = email_service
        self.storage = storage or ProfileImageStorage()
        self.users = UserDAO(session)
        self.purchases = BoughtProductDAO(session)
        self.codes = VerificationCodeDAO(session)
        self.verification = VerificationService(session)

    async def _get_user(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(message=get_message("user_not_found"), user_id=user_id)
        return user

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: int) -> User:
        return await self._get_user(user_id)

    async def update_name(self, user_id: int, name: Optional[str]) -> User:
        """
        Replace the display name.

        Raises:
            ValidationError: If name is missing or blank
            UserNotFoundError: If the user does not exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError(message=get_message("name_required"))

        user = await self.users.update_name(user_id, name)
        if user is None:
            raise UserNotFoundError(message=get_message("user_not_found"), user_id=user_id)

        logger.info("Profile name updated", extra={"user_id": user_id})
        return user

    # ------------------------------------------------------------------
    # Password
    # ------------------------------------------------------------------

    async def change_password(
        self,
        user_id: int,
        old_password: Optional[str],
        new_password: Optional[str],
    ) -> User:
        """
        Change the account password.

        WHY: Accounts created through a federated provider have no stored
        hash; for them the old password is not checked and the new one
        becomes their first password.

        Raises:
            ValidationError: If either password is missing
            InputError: If the new password is too short
            UserNotFoundError: If the user does not exist
            IncorrectPasswordError: If the old password does not match
        """
        if not old_password or not new_password:
            raise ValidationError(message=get_message("passwords_required"))

        if len(new_password) < settings.MIN_PASSWORD_LENGTH:
            raise InputError(
                message=get_message(
                    "password_too_short", min_length=settings.MIN_PASSWORD_LENGTH
                ),
                min_length=settings.MIN_PASSWORD_LENGTH,
            )

        user = await self._get_user(user_id)

        if user.hashed_password and not verify_password(old_password, user.hashed_password):
            logger.info("Password change rejected: wrong current password", extra={"user_id": user_id})
            raise IncorrectPasswordError(message=get_message("current_password_incorrect"))

        updated = await self.users.update_password(user_id, hash_password(new_password))
        logger.info("Password changed", extra={"user_id": user_id})
        return updated

    # ------------------------------------------------------------------
    # Email change
    # ------------------------------------------------------------------

    async def _send_code(self, email: str, code: str) -> None:
        await self.email_service.send_verification_code(
            email, code, VerificationPurpose.EMAIL_CHANGE
        )

    async def initiate_email_change(
        self,
        acting_user_id: int,
        user_id: Optional[int],
        new_email: Optional[str],
    ) -> dict:
        """
        Start an email change by mailing a code to the new address.

        Returns:
            {"email": new address, "currentEmail": address on file}

        Raises:
            ValidationError: Missing fields, bad format, unchanged address
            AuthorizationError: user_id is not the authenticated user
            UserNotFoundError: The user does not exist
            EmailExistsError: Another account owns the new address
            PendingEmailChangeError: A code for the address is still active
            EmailServiceError: The code email could not be sent
        """
        email = normalize_email(new_email)
        if not email or user_id is None:
            raise ValidationError(message=get_message("email_change_fields_required"))

        if not is_valid_email(email):
            raise InputError(message=get_message("invalid_email_format"), email=email)

        ensure_own_account(acting_user_id, user_id)
        user = await self._get_user(user_id)

        if normalize_email(user.email) == email:
            raise ValidationError(message=get_message("email_same_as_current"))

        if await self.users.email_exists(email, exclude_user_id=user.id):
            raise EmailExistsError(message=get_message("email_exists"), email=email)

        if await self.verification.has_pending_verification(email):
            raise PendingEmailChangeError(message=get_message("pending_email_change"), email=email)

        code = await self.verification.create_code(email, VerificationPurpose.EMAIL_CHANGE)
        await self._send_code(email, code)

        logger.info(
            "Email change initiated",
            extra={"user_id": user.id, "new_email": email},
        )
        return {"email": email, "currentEmail": user.email}

    async def verify_email_change(
        self,
        acting_user_id: int,
        user_id: Optional[int],
        new_email: Optional[str],
        code: Optional[str],
    ) -> User:
        """
        Apply an email change after the code checks out.

        Raises:
            ValidationError: Missing fields
            AuthorizationError: user_id is not the authenticated user
            InvalidVerificationCodeError: Wrong, used or expired code
            UserExistsError: An account took the address in the meantime
            UserNotFoundError: The user no longer exists
        """
        email = normalize_email(new_email)
        code = (code or "").strip()
        if not email or not code or user_id is None:
            raise ValidationError(message=get_message("email_verify_fields_required"))

        ensure_own_account(acting_user_id, user_id)

        result = await self.verification.verify_code(email, code)
        if not result.is_valid:
            raise InvalidVerificationCodeError(message=result.message, email=email)

        if await self.users.email_exists(email):
            raise UserExistsError(message=get_message("user_exists"), email=email)

        user = await self._get_user(user_id)
        old_email = user.email

        try:
            updated = await self.users.update_email(user_id, email)
        except IntegrityError as e:
            # Unique index caught a concurrent claim of the address
            raise UserExistsError(message=get_message("user_exists"), email=email) from e

        if updated is None:
            raise UserNotFoundError(message=get_message("user_not_found"), user_id=user_id)

        await self.verification.discard_code(email, code)

        logger.info(
            "Email changed",
            extra={"user_id": user_id, "old_email": old_email, "new_email": email},
        )

        if settings.NOTIFY_PREVIOUS_EMAIL and self.email_service is not None:
            await self.email_service.send_email_changed_notice(old_email, email)

        return updated

    async def resend_email_change_code(self, email: Optional[str]) -> str:
        """
        Issue a fresh email-change code for an address and mail it.

        Returns:
            The normalized address the code was sent to

        Raises:
            ValidationError: Missing or malformed email
            EmailExistsError: The address belongs to an account
            EmailServiceError: The code email could not be sent
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError(message=get_message("email_required"))
        if not is_valid_email(email):
            raise InputError(message=get_message("invalid_email_format"), email=email)

        if await self.users.email_exists(email):
            raise EmailExistsError(message=get_message("email_exists"), email=email)

        code = await self.verification.create_code(email, VerificationPurpose.EMAIL_CHANGE)
        await self._send_code(email, code)

        logger.info("Email change code resent", extra={"new_email": email})
        return email

    # ------------------------------------------------------------------
    # Profile image
    # ------------------------------------------------------------------

    async def upload_profile_image(
        self,
        user_id: int,
        file: Optional[BinaryIO],
        filename: Optional[str],
        content_type: Optional[str],
    ) -> str:
        """
        Store a new avatar and replace the previous one.

        The new path is committed before the old file is removed, so a failed
        write never leaves avatar_url pointing at a deleted file. If the
        commit fails the freshly stored file is removed instead.

        Returns:
            Relative public path of the stored image
        """
        if file is None:
            raise ValidationError(message=get_message("image_required"))

        user = await self._get_user(user_id)
        previous = user.avatar_url

        path = await self.storage.save(file, filename, content_type)
        try:
            await self.users.set_avatar(user_id, path)
            await self.session.commit()
        except Exception:
            await self.storage.delete(path)
            raise

        if previous and previous != path:
            await self.storage.delete(previous)

        logger.info("Profile image uploaded", extra={"user_id": user_id})
        return path

    async def remove_profile_image(self, user_id: int) -> None:
        """Clear the stored path, then delete the file (if any)."""
        user = await self._get_user(user_id)
        previous = user.avatar_url

        await self.users.set_avatar(user_id, None)
        await self.session.commit()

        if previous:
            await self.storage.delete(previous)
        logger.info("Profile image removed", extra={"user_id": user_id})

    # ------------------------------------------------------------------
    # Account deletion
    # ------------------------------------------------------------------

    async def delete_account(self, user_id: int) -> None:
        """
        Hard-delete the account with its purchases and pending codes.

        WHY: Purchases are removed explicitly as well as by the FK cascade,
        since SQLite only enforces cascades with foreign keys enabled. The
        avatar file goes only after the deletion is committed.
        """
        user = await self._get_user(user_id)
        avatar = user.avatar_url
        email = user.email

        purchases = await self.purchases.delete_for_user(user_id)
        codes = await self.codes.delete_for_email(normalize_email(email))
        await self.users.delete(user_id)
        await self.session.commit()

        if avatar:
            await self.storage.delete(avatar)

        logger.info(
            "Account deleted",
            extra={"user_id": user_id, "purchases_removed": purchases, "codes_removed": codes},
        )
