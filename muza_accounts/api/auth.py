"""
Registration and login API endpoints.

WHY: These endpoints provide the sign-up and sign-in flow:
1. register/initiate - mail a code to the address being registered
2. register/verify - create the account with the code, return a JWT
3. register/resend-code - mail a fresh code
4. login - exchange email and password for a JWT

Security:
- Rate limiting applied via RateLimitMiddleware
- Generic error messages on login prevent account enumeration
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from muza_accounts.core.config import settings
from muza_accounts.core.deps import get_email_service
from muza_accounts.core.messages import get_message
from muza_accounts.db.session import get_db
from muza_accounts.schemas.auth import (
    AuthUser,
    CodeSentResponse,
    LoginRequest,
    RegisterInitiateRequest,
    RegisterVerifyRequest,
    TokenResponse,
)
from muza_accounts.services.email import EmailService
from muza_accounts.services.registration import RegistrationService


router = APIRouter(prefix="/auth", tags=["authentication"])


def _registration_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> RegistrationService:
    return RegistrationService(db, email_service=email_service)


@router.post(
    "/register/initiate",
    response_model=CodeSentResponse,
    summary="Start registration",
    description="Sends a 6-digit code to the address being registered",
)
async def register_initiate(
    payload: RegisterInitiateRequest,
    service: RegistrationService = Depends(_registration_service),
) -> CodeSentResponse:
    email = await service.initiate(payload.email)
    return CodeSentResponse(message=get_message("registration_code_sent"), email=email)


@router.post(
    "/register/verify",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Complete registration",
)
async def register_verify(
    payload: RegisterVerifyRequest,
    service: RegistrationService = Depends(_registration_service),
) -> TokenResponse:
    user, token = await service.verify(
        payload.email,
        payload.verification_code,
        payload.name,
        payload.password,
    )
    return TokenResponse(
        message=get_message("registration_complete"),
        access_token=token,
        expires_in=settings.JWT_EXPIRATION_MINUTES * 60,
        user=AuthUser.model_validate(user),
    )


@router.post(
    "/register/resend-code",
    response_model=CodeSentResponse,
    summary="Resend registration code",
)
async def register_resend_code(
    payload: RegisterInitiateRequest,
    service: RegistrationService = Depends(_registration_service),
) -> CodeSentResponse:
    email = await service.resend_code(payload.email)
    return CodeSentResponse(message=get_message("code_resent"), email=email)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login user",
)
async def login(
    credentials: LoginRequest,
    service: RegistrationService = Depends(_registration_service),
) -> TokenResponse:
    user, token = await service.login(credentials.email, credentials.password)
    return TokenResponse(
        access_token=token,
        expires_in=settings.JWT_EXPIRATION_MINUTES * 60,
        user=AuthUser.model_validate(user),
    )
