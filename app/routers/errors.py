"""
Error translation - domain exceptions to HTTP responses.
"""

import logging

from fastapi import HTTPException, status

from app.ai.providers.base import AIProviderError
from app.services.event_errors import (
    AmbiguousTargetError,
    EventNotFoundError,
    EventStorageError,
    EventValidationError,
)

logger = logging.getLogger("smartcal.routers")


def to_http_exception(error: Exception) -> HTTPException:
    """
    Map a service error to an HTTPException.

    Internal details of storage and model failures are logged, not returned.
    """
    if isinstance(error, EventNotFoundError):
        # Permission errors included: a foreign event looks like a missing one
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    if isinstance(error, (EventValidationError, AmbiguousTargetError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, EventStorageError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
    if isinstance(error, AIProviderError):
        logger.error(f"Model provider failure: {error}")
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Assistant is temporarily unavailable")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
