"""
Notifications router - the current user's inbox.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user, get_pagination
from app.models.user import User
from app.schemas.notification import MarkAllReadResult, NotificationOut, UnreadCount
from app.schemas.pagination import Page, Pagination
from app.services.notification_service import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=Page[NotificationOut])
def list_notifications(
    is_read: bool | None = Query(default=None, description="Filter by read state"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Newest first."""
    items, total = notification_service.list_notifications(
        db,
        current_user.id,
        is_read=is_read,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return Page[NotificationOut](
        items=[NotificationOut.model_validate(n) for n in items],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return UnreadCount(count=notification_service.unread_count(db, current_user.id))


# read-all is declared before /{notification_id}/read so it is never taken for an id
@router.put("/read-all", response_model=MarkAllReadResult)
def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return MarkAllReadResult(updated=notification_service.mark_all_read(db, current_user.id))


@router.put("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """404 when the notification does not exist or belongs to someone else."""
    notification = notification_service.mark_read(db, current_user.id, notification_id)
    if notification is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    return notification
