"""
Assistant router - natural-language calendar changes in two steps.

1. POST /assistant/propose {"message": "..."}  -> what I understood + confirm_token
2. POST /assistant/confirm {"confirm_token": "...", "event_id"?: 42} -> applied

Nothing is written until step 2, and a token can be confirmed only once.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.ai.providers.base import AIProviderError
from app.db.session import get_db
from app.deps import get_assistant_service, get_current_user
from app.models.user import User
from app.routers.errors import to_http_exception
from app.schemas.assistant import ConfirmRequest, ConfirmResponse, ProposeRequest, ProposeResponse
from app.services.assistant_service import AssistantService
from app.services.event_errors import EventError

logger = logging.getLogger("smartcal.routers.assistant")

router = APIRouter(prefix="/assistant", tags=["assistant"])


# ---------------------------------------------------------------------------
# POST /assistant/propose
# ---------------------------------------------------------------------------
@router.post("/propose", response_model=ProposeResponse)
async def propose(
    payload: ProposeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assistant: AssistantService = Depends(get_assistant_service),
):
    """
    Interpret a message.

    Returns a confirmation prompt with a token, or a hint when the message
    is incomplete, unsupported or matches no event.

    Raises:
        502 Bad Gateway: the model failed or timed out
        503 Service Unavailable: no model provider configured
    """
    try:
        result = await assistant.propose(db, current_user, payload.message, now=payload.now)
    except (AIProviderError, EventError) as e:
        raise to_http_exception(e)
    return ProposeResponse.from_result(result)


# ---------------------------------------------------------------------------
# POST /assistant/confirm
# ---------------------------------------------------------------------------
@router.post("/confirm", response_model=ConfirmResponse)
def confirm(
    payload: ConfirmRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assistant: AssistantService = Depends(get_assistant_service),
):
    """
    Apply a pending proposal.

    status "error" (expired token, no matching event, invalid values) is a
    normal 200 response carrying a message for the user.

    Raises:
        500 Internal Server Error: the database transaction failed
    """
    try:
        result = assistant.confirm(db, current_user, payload.confirm_token, payload.event_id)
    except EventError as e:
        raise to_http_exception(e)
    return ConfirmResponse.from_result(result)
