"""
Event errors - domain exceptions raised by the event pipeline.

Routers translate them to HTTP responses:
- EventValidationError  -> 400
- EventNotFoundError    -> 404 (EventPermissionError too, so existence is not leaked)
- EventStorageError     -> 500
AmbiguousTargetError is handled by the assistant, which asks the user to pick.
"""

from typing import List


class EventError(Exception):
    """Base class for event pipeline errors."""


class EventValidationError(EventError):
    """The requested change is incomplete or inconsistent (missing title, end <= start...)."""


class EventNotFoundError(EventError):
    """No event matches the reference, or it is not visible to the user."""


class EventPermissionError(EventNotFoundError):
    """The event exists but the user is not its owner."""


class AmbiguousTargetError(EventError):
    """Several events match a vague reference; the user must pick one."""

    def __init__(self, candidates: List, message: str = "Several events match"):
        super().__init__(message)
        self.candidates = list(candidates)


class EventStorageError(EventError):
    """The database rejected the transaction; it has been rolled back."""
