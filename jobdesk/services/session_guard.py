"""Request authentication and role authorization."""

import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import ParamSpec, TypeVar

from fastapi import Depends, Request

from jobdesk.core.exceptions import ForbiddenError, UnauthenticatedError
from jobdesk.core.security import (
    SubjectClaims,
    TokenCodec,
    TokenError,
    looks_like_token,
    token_codec,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

BEARER_SCHEME = "bearer"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Subject:
    """Authenticated identity for the duration of one request."""

    id: str
    email: str
    is_admin: bool = False

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.USER

    def has_role(self, role: Role) -> bool:
        return role == Role.USER or self.role == role

    @classmethod
    def from_claims(cls, claims: SubjectClaims) -> "Subject":
        return cls(id=claims.id, email=claims.email, is_admin=claims.is_admin)


def extract_token(authorization: str | None) -> str | None:
    """Accept either a raw token or ``Bearer <token>``."""
    if not authorization:
        return None
    credential = authorization.strip()
    scheme, _, rest = credential.partition(" ")
    if scheme.lower() == BEARER_SCHEME:
        credential = rest.strip()
    return credential or None


class SessionGuard:
    """Turns an Authorization header into a Subject or rejects the request.

    Every failure surfaces as the same UnauthenticatedError; the specific
    cause only reaches the log.
    """

    def __init__(self, codec: TokenCodec | None = None):
        self.codec = codec or token_codec

    def authenticate(self, authorization: str | None) -> Subject:
        token = extract_token(authorization)
        if token is None:
            raise UnauthenticatedError("Unauthorized access - No token provided")

        # Structural check before signature verification
        if not looks_like_token(token):
            logger.debug("Rejected credential with wrong segment count")
            raise UnauthenticatedError("Unauthorized access - Invalid token format")

        try:
            claims = self.codec.verify(token)
        except TokenError as e:
            logger.warning(f"Token rejected ({type(e).__name__}): {e}")
            raise UnauthenticatedError() from e

        subject = Subject.from_claims(claims)
        logger.debug(
            f"Token verified for user {subject.id} ({subject.role.value})"
        )
        return subject


session_guard = SessionGuard()


def get_session_guard() -> SessionGuard:
    return session_guard


async def get_current_subject(
    request: Request,
    guard: SessionGuard = Depends(get_session_guard),
) -> Subject:
    """FastAPI dependency: authenticate and attach the subject to the request."""
    subject = guard.authenticate(request.headers.get("Authorization"))
    request.state.subject = subject
    return subject


def ensure_role(subject: Subject, role: Role) -> None:
    """Raise ForbiddenError unless ``subject`` holds ``role``."""
    if not subject.has_role(role):
        logger.warning(f"User {subject.id} denied: {role.value} role required")
        raise ForbiddenError()


def requires_role(
    role: Role,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Guard a use-case coroutine whose first argument after ``self`` is the subject."""

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            subject = kwargs.get("subject", args[1] if len(args) > 1 else None)
            if not isinstance(subject, Subject):
                raise UnauthenticatedError("Unauthorized")
            ensure_role(subject, role)
            return await func(*args, **kwargs)

        return wrapper

    return decorator
