"""
Main application entry point - FastAPI app instance and configuration.
Run with: uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging_config import configure_logging
from app.routers import admin, assistant, auth, events, notifications, operation_logs, users
from app.services.container import build_container

configure_logging()
logger = logging.getLogger("smartcal.main")


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------
# Services (model provider, pending proposals, notification workers) are
# built once here and shared by every request through app.state.container.
@asynccontextmanager
async def lifespan(app: FastAPI):
    container = build_container(settings)
    app.state.container = container
    logger.info(f"{settings.APP_NAME} started")
    try:
        yield
    finally:
        container.shutdown()
        logger.info(f"{settings.APP_NAME} stopped")


app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# Origins come from CORS_ALLOW_ORIGINS (comma separated)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# auth.router: /auth/register, /auth/login
# users.router: /users/me, /users/search
# events.router: /events CRUD
# assistant.router: /assistant/propose, /assistant/confirm
# notifications.router: /notifications inbox
# operation_logs.router: /operation-logs history
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin.router)
app.include_router(events.router)
app.include_router(assistant.router)
app.include_router(notifications.router)
app.include_router(operation_logs.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Liveness check. Does not check database connectivity.

    Returns:
        {"status": "ok", "assistant": true|false}
    """
    container = getattr(app.state, "container", None)
    return {
        "status": "ok",
        "assistant": bool(container and container.assistant is not None),
    }
