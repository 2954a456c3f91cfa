"""
Auth router - account registration and password login.
Public endpoints; every other router requires the token issued here.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.security import create_access_token, hash_password, verify_password
from app.db.session import get_db
from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.schemas.auth import Token, UserLogin, UserRegister
from app.schemas.user import UserOut

logger = logging.getLogger("smartcal.routers.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


def _find_by_email(db: Session, email: str) -> User | None:
    # Emails are compared case-insensitively
    return db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    ).scalar_one_or_none()


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------
@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """
    Create an account. display_name is what other users search for when
    inviting someone to an event. The very first account becomes the admin.

    Raises:
        400 Bad Request: email already registered
    """
    if _find_by_email(db, payload.email) is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    first_account = db.execute(select(func.count()).select_from(User)).scalar_one() == 0

    user = User(
        email=payload.email.strip().lower(),
        hashed_password=hash_password(payload.password),
        display_name=(payload.display_name or "").strip() or None,
        role=ROLE_ADMIN if first_account else ROLE_USER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User registered", extra={"user_id": str(user.id)[:8], "role": user.role})
    return user


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------
@router.post("/login", response_model=Token)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    """
    Exchange email and password for a bearer token.

    Raises:
        401 Unauthorized: unknown email or wrong password (same message for both)
        403 Forbidden: account deactivated
    """
    user = _find_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.info("Login rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")

    logger.info("User logged in", extra={"user_id": str(user.id)[:8]})
    return Token(access_token=create_access_token(subject=str(user.id)))
