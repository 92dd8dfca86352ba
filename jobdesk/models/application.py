"""Job application model."""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from jobdesk.core.storage import Base


def _utc_now() -> datetime:
    """Return current UTC time as timezone-naive datetime for DB storage."""
    return datetime.now(UTC).replace(tzinfo=None)


class ApplicationStatus(str, Enum):
    """Moderation states. ``pending`` is initial, the others are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class JobApplication(Base):
    """One applicant's submission for one job."""

    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint(
            "applicant_id", "job_id", name="uq_job_application_applicant_job"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    applicant_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    job_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    job_title: Mapped[str] = mapped_column(String(500), nullable=False)
    job_company: Mapped[str] = mapped_column(String(500), nullable=False)
    applicant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    applicant_email: Mapped[str] = mapped_column(String(255), nullable=False)
    cover_letter: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Set once at creation
    resume_locator: Mapped[str] = mapped_column(String(1024), nullable=False)
    resume_file_name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApplicationStatus.PENDING.value,
        index=True,
    )
    rejection_reason: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now, nullable=False
    )
