"""
Pydantic schemas for profile and account endpoints.

WHY: Field names follow the clients' camelCase JSON through aliases while
Python code uses snake_case. Request fields are Optional so missing values
reach the service, which reports them with localized messages in a fixed
order instead of a generic schema error.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CamelModel(BaseModel):
    """Accepts both alias (camelCase) and field names; responses use aliases."""

    model_config = {"populate_by_name": True, "from_attributes": True}


# ============================================================================
# Requests
# ============================================================================


class UpdateNameRequest(CamelModel):
    name: Optional[str] = Field(None, description="New display name", examples=["Olena"])


class ChangePasswordRequest(CamelModel):
    old_password: Optional[str] = Field(None, alias="oldPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")


class InitiateEmailChangeRequest(CamelModel):
    new_email: Optional[str] = Field(None, alias="newEmail", examples=["new@example.com"])
    id: Optional[int] = Field(None, description="Id of the authenticated user")


class VerifyEmailChangeRequest(CamelModel):
    new_email: Optional[str] = Field(None, alias="newEmail")
    verification_code: Optional[str] = Field(None, alias="verificationCode", examples=["123456"])
    user_id: Optional[int] = Field(None, alias="userId")


class ResendCodeRequest(CamelModel):
    email: Optional[str] = None


class ResendMaterialRequest(CamelModel):
    material_name: Optional[str] = Field(None, alias="materialName")
    purchase_date: Optional[str] = Field(None, alias="purchaseDate")


# ============================================================================
# Responses
# ============================================================================


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ProfileUser(CamelModel):
    """Profile as shown to its owner; avatar_url is absolute."""

    id: int
    name: str
    email: str
    avatar_url: Optional[str] = None
    auth_provider: str = Field(..., alias="authProvider")
    created_at: datetime = Field(..., alias="createdAt")
    is_admin: bool = False


class ProfileResponse(CamelModel):
    user: ProfileUser


class NameUser(CamelModel):
    id: int
    email: str
    name: str


class UpdateNameResponse(MessageResponse):
    user: NameUser


class ImageUploadResponse(MessageResponse):
    image_url: str = Field(..., alias="imageUrl")


class EmailChangeInitiateResponse(MessageResponse):
    email: str
    current_email: str = Field(..., alias="currentEmail")


class EmailUser(CamelModel):
    id: int
    email: str


class EmailChangeVerifyResponse(MessageResponse):
    user: EmailUser


class ResendCodeResponse(MessageResponse):
    email: str
