"""Schemas for account and session endpoints."""

from pydantic import Field

from jobdesk.schemas.common import CamelModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(CamelModel):
    """New account details."""

    name: str = Field(..., min_length=1, max_length=100)
    lastname: str = Field(default="", max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6, max_length=256)


class VerifyOtpRequest(CamelModel):
    """One-time code submitted to complete registration."""

    user_id: int
    otp: str = Field(..., min_length=4, max_length=10)


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=256)


class RefreshRequest(CamelModel):
    """Refresh credential; falls back to the ``refresh_token`` cookie."""

    refresh_token: str | None = None


class UserOut(CamelModel):
    id: int
    name: str
    lastname: str = ""
    email: str
    is_admin: bool = False


class RegisterOut(CamelModel):
    user_id: int


class SessionOut(CamelModel):
    """Tokens issued by login and refresh."""

    token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserOut


class SubjectOut(CamelModel):
    id: str
    email: str
    is_admin: bool
