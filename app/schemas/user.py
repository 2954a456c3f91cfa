"""
User schemas - what user data is exposed in API responses (never the password).
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserOut(BaseModel):
    """
    Full profile, returned to the user themself.

    Used by:
    - POST /auth/register
    - GET /users/me, PUT /users/me
    - GET /admin/users, PUT /admin/users/{id}/status
    """
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: EmailStr
    display_name: str | None
    avatar: str | None
    is_active: bool
    role: str
    created_at: datetime


class UserUpdate(BaseModel):
    """
    Schema for PUT /users/me. Omitted fields are left unchanged.

    Example request body:
    {"display_name": "Ann B.", "avatar": "https://cdn.example.com/ann.png"}
    """
    display_name: str | None = Field(default=None, max_length=100)
    avatar: str | None = Field(default=None, max_length=500)


class UserSummary(BaseModel):
    """Directory entry returned by GET /users/search (no account details)."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: EmailStr
    display_name: str | None
    avatar: str | None
