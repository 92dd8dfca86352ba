"""API routers."""

from jobdesk.routers.auth import router as auth_router
from jobdesk.routers.auth import session_router
from jobdesk.routers.jobs import router as jobs_router

__all__ = ["auth_router", "jobs_router", "session_router"]
