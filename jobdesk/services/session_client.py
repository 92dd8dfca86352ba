"""Client-side session holder with single-flight token refresh."""

import asyncio
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
REFRESH_PATH = "/api/auth/refresh"


class SessionExpiredError(Exception):
    """Raised when the session could not be refreshed; the user must log in again."""

    def __init__(self, message: str = "Session expired. Please login again."):
        self.message = message
        super().__init__(message)


@dataclass
class StoredSession:
    token: str | None = None
    refresh_token: str | None = None
    user: dict[str, Any] | None = None


class TokenStore(Protocol):
    """Durable mirror of the in-memory session."""

    def load(self) -> StoredSession: ...

    def save(self, session: StoredSession) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    def __init__(self):
        self._session = StoredSession()

    def load(self) -> StoredSession:
        return StoredSession(**asdict(self._session))

    def save(self, session: StoredSession) -> None:
        self._session = StoredSession(**asdict(session))

    def clear(self) -> None:
        self._session = StoredSession()


class FileTokenStore:
    """JSON file store so a session survives process restarts."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> StoredSession:
        if not self.path.exists():
            return StoredSession()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Discarding unreadable session file {self.path}: {e}")
            return StoredSession()
        return StoredSession(
            token=data.get("token"),
            refresh_token=data.get("refresh_token"),
            user=data.get("user"),
        )

    def save(self, session: StoredSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(session)), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class ClientSessionManager:
    """Attaches the current token to outgoing calls and recovers from expiry.

    A request answered with 401 is replayed at most once. Concurrent 401s
    share one in-flight refresh; if refreshing fails the session is cleared
    and SessionExpiredError is raised.
    """

    def __init__(self, client: httpx.AsyncClient, store: TokenStore | None = None):
        self.client = client
        self.store = store or MemoryTokenStore()
        self._session = StoredSession()
        self._refresh_task: asyncio.Task[str] | None = None

    @property
    def token(self) -> str | None:
        return self._session.token

    @property
    def user(self) -> dict[str, Any] | None:
        return self._session.user

    @property
    def is_authenticated(self) -> bool:
        return self._session.token is not None

    def restore(self) -> None:
        """Load a previously persisted session."""
        self._session = self.store.load()
        if self._session.token:
            logger.debug("Session restored from token store")

    def set_session(
        self,
        token: str,
        refresh_token: str | None = None,
        user: dict[str, Any] | None = None,
    ) -> None:
        self._session = StoredSession(
            token=token,
            refresh_token=refresh_token,
            user=user if user is not None else self._session.user,
        )
        self.store.save(self._session)

    def clear(self) -> None:
        self._session = StoredSession()
        self.store.clear()

    async def login(self, email: str, password: str) -> dict[str, Any]:
        response = await self.client.post(
            LOGIN_PATH, json={"email": email, "password": password}
        )
        response.raise_for_status()
        data = response.json()["data"]
        self.set_session(data["token"], data.get("refreshToken"), data.get("user"))
        logger.info("Logged in")
        return data["user"]

    async def logout(self) -> None:
        self.clear()
        self.client.cookies.clear()

    def _with_auth(self, headers: dict[str, str] | None, token: str | None) -> dict:
        merged = dict(headers or {})
        if token:
            merged["Authorization"] = f"Bearer {token}"
        return merged

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request with the current token, refreshing once on 401."""
        headers = kwargs.pop("headers", None)
        sent_with = self.token
        response = await self.client.request(
            method, url, headers=self._with_auth(headers, sent_with), **kwargs
        )
        if response.status_code != httpx.codes.UNAUTHORIZED or sent_with is None:
            return response

        if self.token is None:
            # A concurrent refresh already failed and cleared the session
            raise SessionExpiredError()
        if self.token != sent_with:
            # Another caller already refreshed while this request was in flight
            new_token = self.token
        else:
            new_token = await self._refresh_once()

        logger.debug(f"Replaying {method} {url} with refreshed token")
        return await self.client.request(
            method, url, headers=self._with_auth(headers, new_token), **kwargs
        )

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def _refresh_once(self) -> str:
        """Join the in-flight refresh or start one."""
        if self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._refresh())
            self._refresh_task.add_done_callback(self._forget_refresh)
        return await asyncio.shield(self._refresh_task)

    def _forget_refresh(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _refresh(self) -> str:
        credential = self._session.refresh_token or self._session.token
        logger.info("Access token rejected, refreshing session")
        try:
            response = await self.client.post(
                REFRESH_PATH,
                json={"refreshToken": credential},
            )
            payload = response.json() if response.content else {}
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Session refresh failed: {e}")
            self.clear()
            raise SessionExpiredError() from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if response.status_code != httpx.codes.OK or not data or not data.get("token"):
            logger.warning(f"Session refresh refused ({response.status_code})")
            self.clear()
            raise SessionExpiredError()

        self.set_session(data["token"], data.get("refreshToken"), data.get("user"))
        logger.info("Session refreshed")
        return data["token"]
