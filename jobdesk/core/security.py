"""Session token codec and password hashing."""

import logging
import time
from dataclasses import dataclass
from typing import Any

import jwt
from jwt.exceptions import (
    ExpiredSignatureError,
    InvalidSignatureError,
    InvalidTokenError,
)
from passlib.context import CryptContext

from jobdesk.core.config import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedTokenError(TokenError):
    """Token is not a three-part signed structure."""


class TokenSignatureError(TokenError):
    """Token signature does not match its content."""


class TokenExpiredError(TokenError):
    """Token is past its embedded expiry."""


class WrongTokenTypeError(TokenError):
    """Token was issued for a different purpose."""


@dataclass(frozen=True)
class SubjectClaims:
    """Identity claims carried by a session token."""

    id: str
    email: str
    is_admin: bool = False


def looks_like_token(token: str) -> bool:
    """Return True when the string has exactly three dot-separated segments."""
    parts = token.split(".")
    return len(parts) == 3 and all(parts)


class TokenCodec:
    """Issues and verifies signed, time-bounded session tokens."""

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        access_ttl: int | None = None,
        refresh_ttl: int | None = None,
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.access_ttl = access_ttl or settings.access_token_ttl_seconds
        self.refresh_ttl = refresh_ttl or settings.refresh_token_ttl_seconds

    def issue(
        self,
        claims: SubjectClaims,
        token_type: str = ACCESS_TOKEN,
        now: int | None = None,
    ) -> str:
        """Encode claims plus issue/expiry timestamps into a signed token."""
        issued_at = int(time.time()) if now is None else int(now)
        ttl = self.refresh_ttl if token_type == REFRESH_TOKEN else self.access_ttl
        payload: dict[str, Any] = {
            "id": claims.id,
            "email": claims.email,
            "isAdmin": claims.is_admin,
            "iat": issued_at,
            "exp": issued_at + ttl,
            "type": token_type,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, token_type: str = ACCESS_TOKEN) -> SubjectClaims:
        """Return the claims embedded in ``token``.

        Raises MalformedTokenError, TokenSignatureError, TokenExpiredError
        or WrongTokenTypeError.
        """
        if not isinstance(token, str) or not looks_like_token(token):
            raise MalformedTokenError("Token must have three segments")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError(str(e)) from e
        except InvalidSignatureError as e:
            raise TokenSignatureError(str(e)) from e
        except InvalidTokenError as e:
            raise MalformedTokenError(str(e)) from e

        if payload.get("type", ACCESS_TOKEN) != token_type:
            raise WrongTokenTypeError(
                f"Expected {token_type} token, got {payload.get('type')}"
            )

        subject_id = payload.get("id")
        if subject_id is None:
            raise MalformedTokenError("Token has no subject id")

        return SubjectClaims(
            id=str(subject_id),
            email=payload.get("email") or "",
            is_admin=bool(payload.get("isAdmin", False)),
        )


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be identified")
        return False


token_codec = TokenCodec()
