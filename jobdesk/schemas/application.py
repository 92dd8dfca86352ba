"""Schemas for job application requests and responses."""

from datetime import datetime

from pydantic import Field

from jobdesk.schemas.common import CamelModel


class ApplicationForm(CamelModel):
    """Form fields submitted alongside the resume upload.

    Presence of the required fields is checked by the workflow so that a
    missing field is reported as a validation error with one message.
    """

    job_id: str | None = None
    job_title: str | None = None
    job_company: str | None = None
    applicant_name: str | None = None
    applicant_email: str | None = None
    cover_letter: str | None = None


class ApplicationOut(CamelModel):
    """Stored job application."""

    id: int
    applicant_id: str
    job_id: str
    job_title: str
    job_company: str
    applicant_name: str
    applicant_email: str
    cover_letter: str = ""
    resume_locator: str
    resume_file_name: str
    status: str
    rejection_reason: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaginationOut(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class ApplicationPageOut(CamelModel):
    """Envelope body for the moderator listing."""

    success: bool = True
    message: str | None = None
    data: list[ApplicationOut] = Field(default_factory=list)
    pagination: PaginationOut


class RejectRequest(CamelModel):
    reason: str | None = Field(default=None, max_length=2000)
