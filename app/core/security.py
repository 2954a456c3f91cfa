"""
Security utilities - password hashing and JWT access tokens.

- hash_password / verify_password: bcrypt via passlib, used by the auth router
- generate_temporary_password: one-off password for admin resets
- create_access_token / decode_access_token: signed bearer tokens whose
  "sub" claim is the user's UUID, checked by app.deps.get_current_user
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt  # python-jose
from passlib.context import CryptContext

from app.core.config import settings

# bcrypt hashes embed their own salt; "auto" keeps old schemes verifiable
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt. Never log the plaintext."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def generate_temporary_password() -> str:
    """Random password issued by an admin reset."""
    return secrets.token_urlsafe(12)


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Issue a signed access token.

    Args:
        subject: The user's UUID as a string, stored in "sub"
        expires_delta: Custom lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded token for the "Authorization: Bearer <token>" header
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": subject, "type": TOKEN_TYPE, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[uuid.UUID]:
    """
    Verify a token and return the user id it was issued for.

    Returns None for a bad signature, an expired token, a token of another
    type or a subject that is not a UUID.
    """
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    if claims.get("type", TOKEN_TYPE) != TOKEN_TYPE:
        return None

    try:
        return uuid.UUID(str(claims.get("sub")))
    except ValueError:
        return None
