"""
Operation logs router - history of the current user's event changes.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user, get_pagination
from app.models.user import User
from app.schemas.operation_log import OperationLogOut
from app.schemas.pagination import Page, Pagination
from app.services.operation_log_service import operation_log_service

router = APIRouter(prefix="/operation-logs", tags=["operation-logs"])


@router.get("", response_model=Page[OperationLogOut])
def list_operation_logs(
    action: str | None = Query(default=None, description="create | update | delete"),
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Newest first, optionally filtered by action."""
    items, total = operation_log_service.list_logs(
        db,
        current_user.id,
        action=action or None,
        page=pagination.page,
        page_size=pagination.page_size,
    )
    return Page[OperationLogOut](
        items=[OperationLogOut.from_log(log) for log in items],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )
