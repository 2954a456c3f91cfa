"""
Events router - direct calendar CRUD.

Mutations go through EventService, the same executor that applies
assistant proposals, so ownership checks, operation logs and participant
notifications behave identically for both paths.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.ai.proposal.schemas import Proposal, ProposalAction
from app.db.session import get_db
from app.deps import get_current_user, get_event_service
from app.models.user import User
from app.routers.errors import to_http_exception
from app.schemas.event import EventCreate, EventOut, EventUpdate
from app.services.event_errors import EventError
from app.services.event_service import EventService
from app.utils.datetime_utils import parse_rfc3339

router = APIRouter(prefix="/events", tags=["events"])


# ---------------------------------------------------------------------------
# POST /events - Create an event
# ---------------------------------------------------------------------------
@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    events: EventService = Depends(get_event_service),
):
    """
    Create an event owned by the current user and invite participants.

    Raises:
        400 Bad Request: end_time not after start_time, unknown participant
    """
    try:
        event = events.create_event(db, current_user, payload.to_proposal())
    except EventError as e:
        raise to_http_exception(e)
    return EventOut.from_event(event, current_user.id)


# ---------------------------------------------------------------------------
# GET /events - List own and shared events
# ---------------------------------------------------------------------------
@router.get("", response_model=list[EventOut])
def list_events(
    type: str | None = Query(default=None, description="work | life | growth"),
    start: str | None = Query(default=None, description="RFC3339; events ending at or after"),
    end: str | None = Query(default=None, description="RFC3339; events starting at or before"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    events: EventService = Depends(get_event_service),
):
    """
    Events the current user owns or was invited to, earliest first.

    Unparseable start/end values are ignored.
    """
    items = events.list_events(
        db,
        current_user,
        event_type=type or None,
        start=parse_rfc3339(start),
        end=parse_rfc3339(end),
    )
    return [EventOut.from_event(event, current_user.id) for event in items]


# ---------------------------------------------------------------------------
# GET /events/{event_id} - Event detail
# ---------------------------------------------------------------------------
@router.get("/{event_id}", response_model=EventOut)
def get_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    events: EventService = Depends(get_event_service),
):
    """Visible to the owner and to participants; 404 for anyone else."""
    try:
        event = events.get_event(db, current_user, event_id)
    except EventError as e:
        raise to_http_exception(e)
    return EventOut.from_event(event, current_user.id)


# ---------------------------------------------------------------------------
# PUT /events/{event_id} - Update an event
# ---------------------------------------------------------------------------
@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    payload: EventUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    events: EventService = Depends(get_event_service),
):
    """
    Update an event. Owner only; participants and strangers get 404.
    """
    try:
        target = events.get_event(db, current_user, event_id)
        event = events.update_event(db, current_user, payload.to_proposal(event_id), target=target)
    except EventError as e:
        raise to_http_exception(e)
    return EventOut.from_event(event, current_user.id)


# ---------------------------------------------------------------------------
# DELETE /events/{event_id} - Delete an event
# ---------------------------------------------------------------------------
@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    events: EventService = Depends(get_event_service),
):
    """Delete an event. Owner only; participants are notified of the cancellation."""
    try:
        target = events.get_event(db, current_user, event_id)
        events.delete_event(
            db,
            current_user,
            Proposal(action=ProposalAction.DELETE, target_event_id=event_id),
            target=target,
        )
    except EventError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
