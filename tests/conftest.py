"""Pytest configuration and fixtures."""

import io
import os
import tempfile

import pytest
import pytest_asyncio

# Set test environment variables before importing jobdesk modules
_TEST_ROOT = tempfile.mkdtemp(prefix="jobdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/default.db"
os.environ["JWT_SECRET"] = "test-secret-key-for-jobdesk"
os.environ["COOKIE_SECURE"] = "false"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import httpx  # noqa: E402
from fastapi import UploadFile  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from jobdesk.core.redis_client import OtpStore, get_otp_store  # noqa: E402
from jobdesk.core.security import SubjectClaims, token_codec  # noqa: E402
from jobdesk.core.storage import init_models  # noqa: E402
from jobdesk.schemas.application import ApplicationForm  # noqa: E402
from jobdesk.services.account_service import AccountService  # noqa: E402
from jobdesk.services.ledger import ApplicationLedger  # noqa: E402
from jobdesk.services.resume_storage import ResumeStorage  # noqa: E402
from jobdesk.services.session_guard import Subject  # noqa: E402
from jobdesk.services.workflow import (  # noqa: E402
    ApplicationWorkflow,
    get_application_workflow,
)

KIB = 1024
MIB = 1024 * 1024


class FakeRedis:
    """In-memory stand-in for the few redis.asyncio calls the OTP store makes."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = str(value)
        self.ttls[key] = ttl

    async def incr(self, key):
        value = int(self.data.get(key, 0)) + 1
        self.data[key] = str(value)
        return value

    async def expire(self, key, ttl):
        self.ttls[key] = ttl

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)
            self.ttls.pop(key, None)

    def pipeline(self):
        return FakePipeline(self)

    async def aclose(self):
        pass


class FakePipeline:
    def __init__(self, redis: FakeRedis):
        self.redis = redis
        self.calls = []

    def setex(self, key, ttl, value):
        self.calls.append(self.redis.setex(key, ttl, value))
        return self

    def delete(self, *keys):
        self.calls.append(self.redis.delete(*keys))
        return self

    async def execute(self):
        return [await call for call in self.calls]


def make_upload(filename: str | None, size: int = KIB, content: bytes | None = None):
    """Build an UploadFile like the one FastAPI hands to the router."""
    data = content if content is not None else b"%" * size
    return UploadFile(file=io.BytesIO(data), filename=filename, size=len(data))


def bearer(subject: Subject) -> dict[str, str]:
    claims = SubjectClaims(id=subject.id, email=subject.email, is_admin=subject.is_admin)
    return {"Authorization": f"Bearer {token_codec.issue(claims)}"}


@pytest.fixture
def user_subject():
    """Regular applicant."""
    return Subject(id="user-1", email="user@example.com", is_admin=False)


@pytest.fixture
def other_subject():
    return Subject(id="user-2", email="other@example.com", is_admin=False)


@pytest.fixture
def admin_subject():
    """Moderator."""
    return Subject(id="admin-1", email="admin@example.com", is_admin=True)


@pytest.fixture
def application_form():
    """Complete application form."""
    return ApplicationForm(
        job_id="job-42",
        job_title="Backend Engineer",
        job_company="Acme",
        applicant_name="Alex Doe",
        applicant_email="alex@example.com",
        cover_letter="I have shipped several FastAPI services to production.",
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await init_models(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def ledger(session_factory):
    return ApplicationLedger(session_factory)


@pytest.fixture
def upload_root(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def resume_storage(upload_root):
    return ResumeStorage(upload_root)


@pytest.fixture
def workflow(ledger, resume_storage):
    return ApplicationWorkflow(ledger, resume_storage)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def otp_store(fake_redis):
    return OtpStore(fake_redis, ttl_seconds=600)


@pytest.fixture
def sent_codes():
    """One-time codes delivered during the test, keyed by email."""
    return {}


@pytest.fixture
def account_service(otp_store, session_factory, sent_codes):
    async def capture(email: str, code: str) -> None:
        sent_codes[email] = code

    return AccountService(otp_store, session_factory, otp_sender=capture)


@pytest.fixture
def stored_resumes(upload_root):
    """List the resume files currently on disk."""

    def _list():
        directory = upload_root / ResumeStorage.SUBDIR
        if not directory.exists():
            return []
        return sorted(p.name for p in directory.iterdir())

    return _list


@pytest_asyncio.fixture
async def client(workflow, otp_store, account_service):
    """HTTP client bound to the app with test dependencies."""
    from jobdesk.main import app
    from jobdesk.routers.auth import get_account_service

    app.dependency_overrides[get_application_workflow] = lambda: workflow
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_account_service] = lambda: account_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
