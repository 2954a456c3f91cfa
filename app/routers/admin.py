"""
Admin router - account management.

Every endpoint requires an admin account (get_current_admin):
- GET /admin/users: all accounts, newest first, inactive included
- PUT /admin/users/{id}/status: enable or disable an account
- PUT /admin/users/{id}/reset-password: replace the password with a temporary one
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.security import generate_temporary_password, hash_password
from app.db.session import get_db
from app.deps import get_current_admin, get_pagination
from app.models.user import User
from app.schemas.admin import PasswordResetOut, UserStatusUpdate
from app.schemas.pagination import Page, Pagination
from app.schemas.user import UserOut

logger = logging.getLogger("smartcal.routers.admin")

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# ---------------------------------------------------------------------------
# GET /admin/users - Account list
# ---------------------------------------------------------------------------
@router.get("/users", response_model=Page[UserOut])
def list_users(
    pagination: Pagination = Depends(get_pagination),
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    total = db.execute(select(func.count()).select_from(User)).scalar_one()
    users = db.execute(
        select(User)
        .order_by(User.created_at.desc(), User.email)
        .offset((pagination.page - 1) * pagination.page_size)
        .limit(pagination.page_size)
    ).scalars().all()

    return Page[UserOut](
        items=[UserOut.model_validate(u) for u in users],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


# ---------------------------------------------------------------------------
# PUT /admin/users/{user_id}/status - Enable / disable
# ---------------------------------------------------------------------------
@router.put("/users/{user_id}/status", response_model=UserOut)
def update_user_status(
    user_id: uuid.UUID,
    payload: UserStatusUpdate,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """
    Enable or disable an account. A disabled account cannot log in and its
    existing tokens stop working.

    Raises:
        400 Bad Request: an admin disabling their own account
        404 Not Found: no such user
    """
    user = _get_user_or_404(db, user_id)
    if user.id == admin.id and payload.status == "disabled":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot disable your own account")

    user.is_active = payload.status == "active"
    db.commit()
    db.refresh(user)

    logger.info(
        "User status changed",
        extra={"user_id": str(admin.id)[:8], "target_user": str(user.id)[:8], "status": payload.status},
    )
    return user


# ---------------------------------------------------------------------------
# PUT /admin/users/{user_id}/reset-password - Temporary password
# ---------------------------------------------------------------------------
@router.put("/users/{user_id}/reset-password", response_model=PasswordResetOut)
def reset_password(
    user_id: uuid.UUID,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """
    Replace the user's password with a random temporary one, returned once.

    Raises:
        404 Not Found: no such user
    """
    user = _get_user_or_404(db, user_id)
    new_password = generate_temporary_password()
    user.hashed_password = hash_password(new_password)
    db.commit()

    logger.info("Password reset", extra={"user_id": str(admin.id)[:8], "target_user": str(user.id)[:8]})
    return PasswordResetOut(user_id=user.id, new_password=new_password)
