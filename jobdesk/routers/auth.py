"""Authentication router: registration, login and session refresh."""

import logging

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError

from jobdesk.core.config import settings
from jobdesk.core.redis_client import OtpStore, get_otp_store
from jobdesk.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RegisterOut,
    RegisterRequest,
    SessionOut,
    SubjectOut,
    UserOut,
    VerifyOtpRequest,
)
from jobdesk.schemas.common import Envelope
from jobdesk.services.account_service import AccountService, IssuedSession
from jobdesk.services.session_guard import Subject, get_current_subject

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
session_router = APIRouter(prefix="/api/auth", tags=["auth"])

REFRESH_COOKIE = "refresh_token"


async def get_account_service(
    otp_store: OtpStore = Depends(get_otp_store),
) -> AccountService:
    """Create account service with dependencies."""
    return AccountService(otp_store)


def _session_envelope(
    issued: IssuedSession, response: Response, message: str
) -> Envelope[SessionOut]:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=issued.refresh_token,
        max_age=settings.refresh_token_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path=session_router.prefix,
    )
    return Envelope(
        success=True,
        message=message,
        data=SessionOut(
            token=issued.token,
            refresh_token=issued.refresh_token,
            user=UserOut.model_validate(issued.user),
        ),
    )


@router.post(
    "/register",
    response_model=Envelope[RegisterOut],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: RegisterRequest,
    service: AccountService = Depends(get_account_service),
):
    """Create a pending account and send a one-time code."""
    try:
        user = await service.register(
            name=request.name,
            lastname=request.lastname,
            email=request.email,
            password=request.password,
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error during registration: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return Envelope(success=True, message="OTP sent", data=RegisterOut(user_id=user.id))


@router.post("/verify-otp", response_model=Envelope)
async def verify_otp(
    request: VerifyOtpRequest,
    service: AccountService = Depends(get_account_service),
):
    """Complete registration with the one-time code."""
    try:
        await service.verify_otp(request.user_id, request.otp)
    except SQLAlchemyError as e:
        logger.error(f"Database error during OTP verification: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return Envelope(success=True, message="Account verified")


@router.post("/login", response_model=Envelope[SessionOut])
async def login(
    request: LoginRequest,
    response: Response,
    service: AccountService = Depends(get_account_service),
):
    """Issue a session for valid credentials."""
    try:
        issued = await service.login(request.email, request.password)
    except SQLAlchemyError as e:
        logger.error(f"Database error during login: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return _session_envelope(issued, response, "Login successful")


@session_router.post("/refresh", response_model=Envelope[SessionOut])
async def refresh(
    response: Response,
    request: RefreshRequest | None = None,
    refresh_token: str | None = Cookie(None),
    service: AccountService = Depends(get_account_service),
):
    """Exchange a refresh credential for a new token pair."""
    credential = (request.refresh_token if request else None) or refresh_token
    try:
        issued = await service.refresh(credential)
    except SQLAlchemyError as e:
        logger.error(f"Database error during refresh: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return _session_envelope(issued, response, "Token refreshed")


@session_router.get("/me", response_model=Envelope[SubjectOut])
async def me(subject: Subject = Depends(get_current_subject)):
    """Return the authenticated subject."""
    return Envelope(
        success=True,
        data=SubjectOut(id=subject.id, email=subject.email, is_admin=subject.is_admin),
    )
