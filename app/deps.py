"""
Dependencies module - reusable FastAPI dependencies for route handlers.

- get_current_user: validates the bearer JWT and loads the user
- get_current_admin: get_current_user restricted to admin accounts
- get_container / get_event_service / get_assistant_service: services built
  at start-up (app.state.container)
- get_pagination: lenient page/page_size query parameters
"""

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import User
from app.schemas.pagination import Pagination, parse_page, parse_page_size
from app.services.assistant_service import AssistantService
from app.services.container import ServiceContainer
from app.services.event_service import EventService

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# HTTPBearer extracts "Authorization: Bearer <token>"; missing header -> 403
security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the JWT and return the authenticated user.

    Raises:
        401 Unauthorized: invalid or expired token, unknown user
        403 Forbidden: account deactivated
    """
    # Same error for every failure so callers cannot tell which check failed
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    The authenticated user, if they are an admin.

    Raises:
        403 Forbidden: not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


# ---------------------------------------------------------------------------
# SERVICES
# ---------------------------------------------------------------------------

def get_container(request: Request) -> ServiceContainer:
    """Services built in the application lifespan."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return container


def get_event_service(container: ServiceContainer = Depends(get_container)) -> EventService:
    return container.events


def get_assistant_service(container: ServiceContainer = Depends(get_container)) -> AssistantService:
    """The assistant, or 503 when no model provider is configured."""
    if container.assistant is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Assistant is not configured",
        )
    return container.assistant


# ---------------------------------------------------------------------------
# PAGINATION
# ---------------------------------------------------------------------------

def get_pagination(
    page: str | None = Query(default=None, description="Page number, from 1"),
    page_size: str | None = Query(default=None, description="Items per page, 1-100"),
) -> Pagination:
    """Out-of-range or non-numeric values fall back to the defaults."""
    return Pagination(page=parse_page(page), page_size=parse_page_size(page_size))
