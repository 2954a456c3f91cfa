"""
ORM models. Importing this package registers every table on Base.metadata.
"""

from app.models.user import User
from app.models.event import Event, EventParticipant
from app.models.operation_log import OperationLog
from app.models.notification import Notification

__all__ = ["User", "Event", "EventParticipant", "OperationLog", "Notification"]
