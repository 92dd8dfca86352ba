"""API routes for job applications and their moderation."""

import logging

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from sqlalchemy.exc import SQLAlchemyError

from jobdesk.models.application import ApplicationStatus
from jobdesk.schemas.application import (
    ApplicationForm,
    ApplicationOut,
    ApplicationPageOut,
    PaginationOut,
    RejectRequest,
)
from jobdesk.schemas.common import Envelope
from jobdesk.services.ledger import ApplicationFilter, Pagination
from jobdesk.services.session_guard import Subject, get_current_subject
from jobdesk.services.workflow import ApplicationWorkflow, get_application_workflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.post(
    "/apply",
    response_model=Envelope[ApplicationOut],
    status_code=status.HTTP_201_CREATED,
)
async def apply_to_job(
    job_id: str | None = Form(None, alias="jobId"),
    job_title: str | None = Form(None, alias="jobTitle"),
    job_company: str | None = Form(None, alias="jobCompany"),
    applicant_name: str | None = Form(None, alias="applicantName"),
    applicant_email: str | None = Form(None, alias="applicantEmail"),
    cover_letter: str | None = Form(None, alias="coverLetter"),
    resume: UploadFile | None = File(None),
    subject: Subject = Depends(get_current_subject),
    workflow: ApplicationWorkflow = Depends(get_application_workflow),
):
    """Submit an application with a resume upload."""
    form = ApplicationForm(
        job_id=job_id,
        job_title=job_title,
        job_company=job_company,
        applicant_name=applicant_name,
        applicant_email=applicant_email,
        cover_letter=cover_letter,
    )
    try:
        application = await workflow.submit(subject, form, resume)
    except SQLAlchemyError as e:
        logger.error(f"Database error submitting application for job {job_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")

    return Envelope(
        success=True,
        message="Application submitted successfully",
        data=ApplicationOut.model_validate(application),
    )


@router.get("/my-applications", response_model=Envelope[list[ApplicationOut]])
async def my_applications(
    subject: Subject = Depends(get_current_subject),
    workflow: ApplicationWorkflow = Depends(get_application_workflow),
):
    """List the caller's applications, newest first."""
    try:
        applications = await workflow.list_own(subject)
    except SQLAlchemyError as e:
        logger.error(f"Database error listing applications: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return Envelope(
        success=True,
        data=[ApplicationOut.model_validate(a) for a in applications],
    )


@router.get("/all-applications", response_model=ApplicationPageOut)
async def all_applications(
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    job_id: str | None = Query(default=None, alias="jobId"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    subject: Subject = Depends(get_current_subject),
    workflow: ApplicationWorkflow = Depends(get_application_workflow),
):
    """List applications for moderation (admin only)."""
    try:
        result = await workflow.list_all(
            subject,
            ApplicationFilter(status=status_filter, job_id=job_id),
            Pagination(page=page, limit=limit),
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error listing all applications: {e}")
        raise HTTPException(status_code=500, detail="Database error")

    return ApplicationPageOut(
        data=[ApplicationOut.model_validate(a) for a in result.items],
        pagination=PaginationOut(
            total=result.total,
            page=result.page,
            limit=result.limit,
            pages=result.pages,
        ),
    )


@router.patch("/approve/{application_id}", response_model=Envelope[ApplicationOut])
async def approve_application(
    application_id: int,
    subject: Subject = Depends(get_current_subject),
    workflow: ApplicationWorkflow = Depends(get_application_workflow),
):
    """Accept a pending application (admin only)."""
    try:
        application = await workflow.approve(subject, application_id)
    except SQLAlchemyError as e:
        logger.error(f"Database error approving application {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return Envelope(
        success=True,
        message="Application approved successfully",
        data=ApplicationOut.model_validate(application),
    )


@router.patch("/reject/{application_id}", response_model=Envelope[ApplicationOut])
async def reject_application(
    application_id: int,
    request: RejectRequest | None = None,
    subject: Subject = Depends(get_current_subject),
    workflow: ApplicationWorkflow = Depends(get_application_workflow),
):
    """Reject a pending application with an optional reason (admin only)."""
    try:
        application = await workflow.reject(
            subject, application_id, reason=request.reason if request else None
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error rejecting application {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")
    return Envelope(
        success=True,
        message="Application rejected successfully",
        data=ApplicationOut.model_validate(application),
    )
