"""Pydantic schemas for request/response validation."""

from jobdesk.schemas.application import (
    ApplicationForm,
    ApplicationOut,
    ApplicationPageOut,
    RejectRequest,
)
from jobdesk.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    SessionOut,
    VerifyOtpRequest,
)
from jobdesk.schemas.common import Envelope

__all__ = [
    "ApplicationForm",
    "ApplicationOut",
    "ApplicationPageOut",
    "Envelope",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "RejectRequest",
    "SessionOut",
    "VerifyOtpRequest",
]
