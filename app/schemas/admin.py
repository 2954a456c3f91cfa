"""
Admin schemas - account management bodies for the /admin endpoints.
"""

import uuid
from typing import Literal

from pydantic import BaseModel


class UserStatusUpdate(BaseModel):
    """
    Schema for PUT /admin/users/{id}/status.

    Example request body:
    {"status": "disabled"}
    """
    status: Literal["active", "disabled"]


class PasswordResetOut(BaseModel):
    """Temporary password issued by PUT /admin/users/{id}/reset-password. Shown once."""
    user_id: uuid.UUID
    new_password: str
