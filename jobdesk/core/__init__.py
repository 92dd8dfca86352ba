"""Core application components."""

from jobdesk.core.config import settings
from jobdesk.core.exceptions import ApplicationError, UnauthenticatedError
from jobdesk.core.storage import Base, async_session

__all__ = [
    "ApplicationError",
    "Base",
    "UnauthenticatedError",
    "async_session",
    "settings",
]
