"""
Pydantic schemas for tenants, users and authentication.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .mixins import ApiModel, CoreEntityMixin, IdMixin


class AuthUser(ApiModel):
    """Identity yielded by a verified auth token."""

    id: str
    email: str


class LoginRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TenantRead(IdMixin):
    name: str
    created_at: datetime


class UserCreate(ApiModel):
    """Schema for adding a user to the caller's tenant."""

    email: Optional[str] = Field(default=None, max_length=320)
    name: Optional[str] = Field(default=None, max_length=200)
    password: Optional[str] = None


class SignupRequest(UserCreate):
    """Schema for creating a new tenant together with its first user."""

    organization_name: Optional[str] = Field(default=None, max_length=200)


class UserRead(CoreEntityMixin):
    """User as exposed to callers; the password hash is never included."""

    email: str
    name: Optional[str] = None


class SignupResult(ApiModel):
    user: UserRead
    tenant: TenantRead
