"""
Users router - profile and directory search.
All endpoints here require authentication.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user, get_pagination
from app.models.user import User
from app.schemas.pagination import Page, Pagination
from app.schemas.user import UserOut, UserSummary, UserUpdate
from app.services.participant_resolver import like_pattern

router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# GET /users/me - Current user's profile
# ---------------------------------------------------------------------------
@router.get("/me", response_model=UserOut)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user


# ---------------------------------------------------------------------------
# PUT /users/me - Update display name / avatar
# ---------------------------------------------------------------------------
@router.put("/me", response_model=UserOut)
def update_current_user(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update the current user's profile.

    Only fields present in the body change. An empty string clears the field.
    """
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None:
            continue
        setattr(current_user, field, value.strip() or None)

    db.commit()
    db.refresh(current_user)
    return current_user


# ---------------------------------------------------------------------------
# GET /users/search - Directory search
# ---------------------------------------------------------------------------
@router.get("/search", response_model=Page[UserSummary])
def search_users(
    keyword: str = Query(default="", max_length=100),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Find active users by display name or email (case-insensitive substring).

    Used when picking participants for an event. An empty keyword lists
    everyone.
    """
    stmt = select(User).where(User.is_active.is_(True))
    keyword = keyword.strip()
    if keyword:
        pattern = like_pattern(keyword)
        stmt = stmt.where(
            or_(
                User.display_name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            )
        )

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    users = db.execute(
        stmt.order_by(User.display_name, User.email)
        .offset((pagination.page - 1) * pagination.page_size)
        .limit(pagination.page_size)
    ).scalars().all()

    return Page[UserSummary](
        items=[UserSummary.model_validate(u) for u in users],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )
