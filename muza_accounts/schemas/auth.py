"""
Pydantic schemas for registration and login endpoints.

WHY: Schemas define request/response contracts and the OpenAPI docs.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RegisterInitiateRequest(BaseModel):
    email: Optional[str] = Field(None, examples=["user@example.com"])


class RegisterVerifyRequest(BaseModel):
    model_config = {"populate_by_name": True}

    email: Optional[str] = None
    verification_code: Optional[str] = Field(None, alias="verificationCode")
    name: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = Field(None, examples=["user@example.com"])
    password: Optional[str] = None


class AuthUser(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    email: str
    name: str


class TokenResponse(BaseModel):
    """
    JWT token response schema.

    WHY: Returns access token with metadata for client-side token
    management (expiration time, token type).
    """

    success: bool = True
    message: Optional[str] = None
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: AuthUser


class CodeSentResponse(BaseModel):
    success: bool = True
    message: str
    email: str
