"""
Pydantic schemas for API request/response validation.
"""

from datetime import date, datetime
from typing import Optional
import uuid

from pydantic import BaseModel, EmailStr, Field, field_validator

from storefront.utils.validation import (
    validate_birth_date,
    validate_document,
    validate_password,
    validate_phone,
    validate_url,
)


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str


# Profile schemas
class ProfileFields(BaseModel):
    """Editable profile fields, all optional."""
    bio: Optional[str] = Field(None, min_length=3, max_length=500)
    birth_date: Optional[date] = Field(None, description="YYYY-MM-DD")
    phone: Optional[str] = None
    document: Optional[str] = Field(None, description="CPF, 000.000.000-00")
    profession: Optional[str] = Field(None, min_length=2, max_length=100)
    avatar: Optional[str] = Field(None, max_length=500)

    @field_validator("birth_date", mode="before")
    @classmethod
    def check_birth_date(cls, v):
        return validate_birth_date(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v is not None else v

    @field_validator("document")
    @classmethod
    def check_document(cls, v):
        return validate_document(v) if v is not None else v

    @field_validator("avatar")
    @classmethod
    def check_avatar(cls, v):
        return validate_url(v) if v is not None else v


class ProfileResponse(BaseModel):
    id: uuid.UUID
    bio: Optional[str] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = None
    document: Optional[str] = None
    profession: Optional[str] = None
    avatar: Optional[str] = None
    confirm_email: bool
    unsubscribe: bool
    access_level: str
    dt_created: datetime
    dt_updated: datetime

    class Config:
        from_attributes = True


# Tenant schemas
class TenantResponse(BaseModel):
    id: uuid.UUID
    tenant_type: str
    dt_created: datetime

    class Config:
        from_attributes = True


# User schemas
class UserResponse(BaseModel):
    """User with profile and the tenant the session is scoped to."""
    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    profile: Optional[ProfileResponse] = None
    tenant: Optional[TenantResponse] = None

    class Config:
        from_attributes = True

    @classmethod
    def build(cls, user, tenant=None) -> "UserResponse":
        response = cls.model_validate(user)
        if tenant is not None:
            response.tenant = TenantResponse.model_validate(tenant)
        return response


class RegisterRequest(BaseModel):
    """User registration request."""
    email: EmailStr
    password: str = Field(..., description="At least 8 characters with letters and numbers")
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    tenant_id: Optional[uuid.UUID] = Field(None, description="Join an existing tenant")
    profile: Optional[ProfileFields] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class KeycloakLoginRequest(BaseModel):
    provider_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ChangePasswordRequest(BaseModel):
    code: str = Field(..., min_length=1)
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


class UpdateUserRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)


class AuthResponse(BaseModel):
    """Session issued on register, login and /users/me."""
    user: UserResponse
    token: str
    expires_in: int = Field(..., description="Seconds until the token expires")


class KeycloakLoginResponse(BaseModel):
    message: str
    data: AuthResponse
