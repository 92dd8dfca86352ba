"""Use-case layer for job applications and their moderation."""

import asyncio
import logging

from jobdesk.core.config import settings
from jobdesk.core.exceptions import (
    SubmissionTimeoutError,
    ValidationError,
)
from jobdesk.models.application import ApplicationStatus, JobApplication
from jobdesk.schemas.application import ApplicationForm
from jobdesk.services.ledger import (
    ApplicationFilter,
    ApplicationLedger,
    ApplicationPage,
    NewApplication,
    Pagination,
)
from jobdesk.services.resume_storage import ResumeStorage
from jobdesk.services.session_guard import Role, Subject, requires_role
from jobdesk.utils.validators import (
    UploadedFile,
    UploadValidator,
    validate_application_form,
)

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Application rejected"


class ApplicationWorkflow:
    """Submit, list and moderate job applications.

    Moderation only moves an application out of ``pending``; approving or
    rejecting one that is already accepted or rejected raises
    ApplicationStateConflictError.
    """

    def __init__(
        self,
        ledger: ApplicationLedger,
        storage: ResumeStorage,
        validator: UploadValidator | None = None,
        timeout_seconds: float | None = None,
    ):
        self.ledger = ledger
        self.storage = storage
        self.validator = validator or UploadValidator()
        self.timeout_seconds = timeout_seconds or settings.submission_timeout_seconds

    async def submit(
        self,
        subject: Subject,
        form: ApplicationForm,
        upload: UploadedFile | None,
        timeout_seconds: float | None = None,
    ) -> JobApplication:
        """Create a pending application for ``subject``.

        The deadline covers upload validation and storage. The insert runs
        outside it, so a committed record always keeps its resume. A file
        whose insert fails is removed; an interrupted write is cleaned up by
        the storage itself.
        """
        validation = validate_application_form(form)
        if not validation.is_valid:
            raise ValidationError(validation.error)

        deadline = timeout_seconds or self.timeout_seconds
        try:
            async with asyncio.timeout(deadline):
                resume = await self.validator.validate(upload)
                locator = await self.storage.save(resume)
        except TimeoutError as e:
            logger.error(
                f"Submission by user {subject.id} for job {form.job_id} "
                f"exceeded {deadline}s"
            )
            raise SubmissionTimeoutError() from e

        try:
            application = await self.ledger.try_create(
                NewApplication(
                    applicant_id=subject.id,
                    job_id=form.job_id.strip(),
                    job_title=form.job_title.strip(),
                    job_company=form.job_company.strip(),
                    applicant_name=form.applicant_name.strip(),
                    applicant_email=form.applicant_email.strip(),
                    cover_letter=(form.cover_letter or "").strip(),
                    resume_locator=locator,
                    resume_file_name=resume.filename,
                )
            )
        except Exception:
            # Duplicate or failed insert: no record references the file
            await self._discard(locator)
            raise

        for warning in validation.warnings:
            logger.debug(f"Application {application.id}: {warning}")
        return application

    async def _discard(self, locator: str) -> None:
        await asyncio.shield(self.storage.delete(locator))

    async def list_own(self, subject: Subject) -> list[JobApplication]:
        return await self.ledger.list_by_applicant(subject.id)

    @requires_role(Role.ADMIN)
    async def list_all(
        self,
        subject: Subject,
        filters: ApplicationFilter | None = None,
        pagination: Pagination | None = None,
    ) -> ApplicationPage:
        return await self.ledger.list_all(filters, pagination)

    @requires_role(Role.ADMIN)
    async def approve(self, subject: Subject, application_id: int) -> JobApplication:
        logger.info(f"Moderator {subject.id} approving application {application_id}")
        return await self.ledger.transition(
            application_id,
            ApplicationStatus.ACCEPTED,
            expected_status=ApplicationStatus.PENDING,
        )

    @requires_role(Role.ADMIN)
    async def reject(
        self,
        subject: Subject,
        application_id: int,
        reason: str | None = None,
    ) -> JobApplication:
        logger.info(f"Moderator {subject.id} rejecting application {application_id}")
        return await self.ledger.transition(
            application_id,
            ApplicationStatus.REJECTED,
            reason=(reason or "").strip() or DEFAULT_REJECTION_REASON,
            expected_status=ApplicationStatus.PENDING,
        )


def get_application_workflow() -> ApplicationWorkflow:
    """FastAPI dependency for the application workflow."""
    return ApplicationWorkflow(ApplicationLedger(), ResumeStorage())
