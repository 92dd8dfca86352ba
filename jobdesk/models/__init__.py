"""Database models."""

from jobdesk.models.application import ApplicationStatus, JobApplication
from jobdesk.models.user import User

__all__ = [
    "ApplicationStatus",
    "JobApplication",
    "User",
]
