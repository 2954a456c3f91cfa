"""
Auth schemas - Pydantic models for registration and login.
"""

from pydantic import BaseModel, EmailStr, Field


class UserRegister(BaseModel):
    """
    Schema for POST /auth/register request body.

    Example request body:
    {
        "email": "ann@example.com",
        "password": "correct horse battery",
        "display_name": "Ann"
    }
    """
    email: EmailStr

    # Hashed with bcrypt before storage; bcrypt ignores bytes past 72
    password: str = Field(min_length=6, max_length=72)

    # display_name: how other users find you when inviting you to events
    display_name: str | None = Field(default=None, max_length=100)


class UserLogin(BaseModel):
    """Schema for POST /auth/login request body."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """
    Schema for POST /auth/login response.

    Clients send it back as: Authorization: Bearer <access_token>
    """
    access_token: str
    token_type: str = "bearer"
