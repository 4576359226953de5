"""
User account API endpoints.

WHY: These endpoints let a signed-in user manage their own account:
1. Profile - read, rename, upload/remove avatar
2. Credentials - change password, change email by emailed code
3. Account - delete, request material resend

Security:
- Every route requires a bearer token (get_current_user)
- Body ids must match the authenticated user (403 otherwise)
- Code-issuing routes are rate limited by RateLimitMiddleware
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.deps import get_current_user, get_email_service, get_image_storage
from muza_accounts.core.messages import get_message
from muza_accounts.core.urls import absolute_url
from muza_accounts.db.session import get_db
from muza_accounts.models.user import User
from muza_accounts.schemas.account import (
    ChangePasswordRequest,
    EmailChangeInitiateResponse,
    EmailChangeVerifyResponse,
    EmailUser,
    ImageUploadResponse,
    InitiateEmailChangeRequest,
    MessageResponse,
    NameUser,
    ProfileResponse,
    ProfileUser,
    ResendCodeRequest,
    ResendCodeResponse,
    ResendMaterialRequest,
    UpdateNameRequest,
    UpdateNameResponse,
    VerifyEmailChangeRequest,
)
from muza_accounts.services.account import AccountService
from muza_accounts.services.avatar_storage import ProfileImageStorage
from muza_accounts.services.email import EmailService
from muza_accounts.services.purchase import PurchaseService


router = APIRouter(prefix="/users", tags=["users"])


def _account_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
    storage: ProfileImageStorage = Depends(get_image_storage),
) -> AccountService:
    return AccountService(db, email_service=email_service, storage=storage)


def _profile_user(user: User) -> ProfileUser:
    return ProfileUser(
        id=user.id,
        name=user.name,
        email=user.email,
        avatar_url=absolute_url(user.avatar_url),
        auth_provider=user.auth_provider.value,
        created_at=user.created_at,
        is_admin=user.is_admin,
    )


# ============================================================================
# Profile
# ============================================================================


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get profile",
    description="Profile of the authenticated user with absolute avatar URL",
)
async def get_profile(
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> ProfileResponse:
    user = await service.get_profile(current_user.id)
    return ProfileResponse(user=_profile_user(user))


@router.put(
    "/profile/name",
    response_model=UpdateNameResponse,
    summary="Update display name",
)
async def update_name(
    payload: UpdateNameRequest,
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> UpdateNameResponse:
    user = await service.update_name(current_user.id, payload.name)
    return UpdateNameResponse(
        message=get_message("name_updated"),
        user=NameUser(id=user.id, email=user.email, name=user.name),
    )


@router.post(
    "/profile/image",
    response_model=ImageUploadResponse,
    summary="Upload profile image",
    description="Multipart field 'image'; image/* only, up to 5 MB",
)
async def upload_profile_image(
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> ImageUploadResponse:
    """
    Replace the avatar.

    WHY: The previous file is removed after the new path is stored so a
    user never has more than one avatar on disk.
    """
    path = await service.upload_profile_image(
        current_user.id,
        image.file if image is not None else None,
        image.filename if image is not None else None,
        image.content_type if image is not None else None,
    )
    return ImageUploadResponse(
        message=get_message("image_uploaded"),
        image_url=absolute_url(path),
    )


@router.delete(
    "/profile/image",
    response_model=MessageResponse,
    summary="Remove profile image",
)
async def remove_profile_image(
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> MessageResponse:
    await service.remove_profile_image(current_user.id)
    return MessageResponse(message=get_message("image_removed"))


# ============================================================================
# Credentials
# ============================================================================


@router.post(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> MessageResponse:
    await service.change_password(current_user.id, payload.old_password, payload.new_password)
    return MessageResponse(message=get_message("password_changed"))


@router.post(
    "/email/change/initiate",
    response_model=EmailChangeInitiateResponse,
    summary="Start email change",
    description="Sends a 6-digit code to the new address",
)
async def initiate_email_change(
    payload: InitiateEmailChangeRequest,
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> EmailChangeInitiateResponse:
    result = await service.initiate_email_change(current_user.id, payload.id, payload.new_email)
    return EmailChangeInitiateResponse(
        message=get_message("email_change_code_sent"),
        email=result["email"],
        current_email=result["currentEmail"],
    )


@router.post(
    "/email/change/verify",
    response_model=EmailChangeVerifyResponse,
    summary="Confirm email change",
)
async def verify_email_change(
    payload: VerifyEmailChangeRequest,
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> EmailChangeVerifyResponse:
    user = await service.verify_email_change(
        current_user.id,
        payload.user_id,
        payload.new_email,
        payload.verification_code,
    )
    return EmailChangeVerifyResponse(
        message=get_message("email_changed"),
        user=EmailUser(id=user.id, email=user.email),
    )


@router.post(
    "/email/change/resend-code",
    response_model=ResendCodeResponse,
    summary="Resend email change code",
)
async def resend_email_change_code(
    payload: ResendCodeRequest,
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> ResendCodeResponse:
    email = await service.resend_email_change_code(payload.email)
    return ResendCodeResponse(message=get_message("code_resent"), email=email)


# ============================================================================
# Account
# ============================================================================


@router.delete(
    "/account",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete account",
)
async def delete_account(
    current_user: User = Depends(get_current_user),
    service: AccountService = Depends(_account_service),
) -> MessageResponse:
    await service.delete_account(current_user.id)
    return MessageResponse(message=get_message("account_deleted"))


@router.post(
    "/resend-material",
    response_model=MessageResponse,
    summary="Request purchased material resend",
)
async def resend_material(
    payload: ResendMaterialRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    message = await PurchaseService(db).request_material_resend(
        current_user.id, payload.material_name, payload.purchase_date
    )
    return MessageResponse(message=message)
