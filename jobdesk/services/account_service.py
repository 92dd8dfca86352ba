"""Account registration, verification and session issuance."""

import logging
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobdesk.core.config import settings
from jobdesk.core.exceptions import (
    AccountExistsError,
    AccountNotVerifiedError,
    InvalidCredentialsError,
    InvalidOtpError,
    UnauthenticatedError,
)
from jobdesk.core.redis_client import OtpStore
from jobdesk.core.security import (
    REFRESH_TOKEN,
    SubjectClaims,
    TokenCodec,
    TokenError,
    hash_password,
    token_codec,
    verify_password,
)
from jobdesk.core.storage import async_session
from jobdesk.models.user import User

logger = logging.getLogger(__name__)

OtpSender = Callable[[str, str], Awaitable[None]]


async def log_otp_delivery(email: str, code: str) -> None:
    """Default OTP delivery: no mail transport is configured, so log it."""
    logger.info(f"OTP issued for {email}")
    logger.debug(f"OTP for {email}: {code}")


@dataclass
class IssuedSession:
    token: str
    refresh_token: str
    user: User


class AccountService:
    """Owns the user store side of the session lifecycle."""

    def __init__(
        self,
        otp_store: OtpStore,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        codec: TokenCodec | None = None,
        otp_sender: OtpSender | None = None,
    ):
        self.otp_store = otp_store
        self.session_factory = session_factory or async_session
        self.codec = codec or token_codec
        self.otp_sender = otp_sender or log_otp_delivery

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()

    def _new_code(self) -> str:
        return "".join(str(secrets.randbelow(10)) for _ in range(settings.otp_length))

    async def register(
        self, name: str, email: str, password: str, lastname: str = ""
    ) -> User:
        """Create (or re-arm) an unverified account and send it a one-time code."""
        email = self._normalize_email(email)
        async with self.session_factory() as session:
            user = await session.scalar(select(User).where(User.email == email))
            if user is not None and user.is_verified:
                raise AccountExistsError()

            if user is None:
                user = User(email=email, name=name.strip(), lastname=lastname.strip())
                session.add(user)
            else:
                user.name = name.strip()
                user.lastname = lastname.strip()
            user.hashed_password = hash_password(password)
            user.is_verified = False
            await session.commit()
            await session.refresh(user)

        code = self._new_code()
        await self.otp_store.put(str(user.id), code)
        await self.otp_sender(user.email, code)
        logger.info(f"Registered pending account {user.id}")
        return user

    async def verify_otp(self, user_id: int, otp: str) -> User:
        """Complete registration when ``otp`` matches the stored code."""
        key = str(user_id)
        attempts = await self.otp_store.register_attempt(key)
        if attempts > settings.otp_max_attempts:
            await self.otp_store.delete(key)
            logger.warning(f"OTP attempts exhausted for user {user_id}")
            raise InvalidOtpError("Too many attempts. Please register again.")

        expected = await self.otp_store.get(key)
        if expected is None or not secrets.compare_digest(expected, otp.strip()):
            raise InvalidOtpError()

        async with self.session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                raise InvalidOtpError()
            user.is_verified = True
            await session.commit()

        await self.otp_store.delete(key)
        logger.info(f"Account {user_id} verified")
        return user

    def _issue(self, user: User) -> IssuedSession:
        claims = SubjectClaims(id=str(user.id), email=user.email, is_admin=user.is_admin)
        return IssuedSession(
            token=self.codec.issue(claims),
            refresh_token=self.codec.issue(claims, token_type=REFRESH_TOKEN),
            user=user,
        )

    async def login(self, email: str, password: str) -> IssuedSession:
        email = self._normalize_email(email)
        async with self.session_factory() as session:
            user = await session.scalar(select(User).where(User.email == email))

        if user is None or not verify_password(password, user.hashed_password):
            logger.info(f"Failed login for {email}")
            raise InvalidCredentialsError()
        if not user.is_verified:
            raise AccountNotVerifiedError()

        logger.info(f"User {user.id} logged in")
        return self._issue(user)

    async def refresh(self, refresh_token: str | None) -> IssuedSession:
        """Exchange a refresh credential for a new token pair.

        Claims are re-read from the user store so role changes take effect.
        """
        if not refresh_token:
            raise UnauthenticatedError("Refresh token missing")
        try:
            claims = self.codec.verify(refresh_token, token_type=REFRESH_TOKEN)
        except TokenError as e:
            logger.warning(f"Refresh rejected ({type(e).__name__}): {e}")
            raise UnauthenticatedError() from e

        async with self.session_factory() as session:
            user = await session.get(User, int(claims.id))

        if user is None or not user.is_verified:
            raise UnauthenticatedError()

        logger.info(f"Session refreshed for user {user.id}")
        return self._issue(user)

    async def ensure_admin(self, email: str, password: str) -> User:
        """Create or promote the bootstrap moderator account."""
        email = self._normalize_email(email)
        async with self.session_factory() as session:
            user = await session.scalar(select(User).where(User.email == email))
            if user is None:
                user = User(
                    email=email,
                    name="Admin",
                    hashed_password=hash_password(password),
                )
                session.add(user)
            user.is_admin = True
            user.is_verified = True
            await session.commit()
            await session.refresh(user)
        logger.info(f"Moderator account ready: {email}")
        return user
