"""Persistence-backed ledger of job applications."""

import logging
import math
from dataclasses import asdict, dataclass, field

from sqlalchemy import func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from jobdesk.core.exceptions import (
    ApplicationStateConflictError,
    DuplicateApplicationError,
    NotFoundError,
)
from jobdesk.core.storage import async_session
from jobdesk.models.application import ApplicationStatus, JobApplication

logger = logging.getLogger(__name__)

UNIQUE_KEY = ("applicant_id", "job_id")
UNIQUE_CONSTRAINT = "uq_job_application_applicant_job"
TRANSITION_TARGETS = frozenset({ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED})


@dataclass
class NewApplication:
    """Field values for a record about to be created."""

    applicant_id: str
    job_id: str
    job_title: str
    job_company: str
    applicant_name: str
    applicant_email: str
    resume_locator: str
    resume_file_name: str
    cover_letter: str = ""


@dataclass
class ApplicationFilter:
    status: ApplicationStatus | None = None
    job_id: str | None = None


@dataclass
class Pagination:
    page: int = 1
    limit: int = 10

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= self.limit <= 100:
            raise ValueError("limit must be between 1 and 100")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class ApplicationPage:
    items: list[JobApplication] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


class ApplicationLedger:
    """Stores applications and guards their uniqueness and status.

    One application per ``(applicant_id, job_id)`` is enforced by the
    ``uq_job_application_applicant_job`` constraint, never by a prior lookup.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self.session_factory = session_factory or async_session

    async def try_create(self, application: NewApplication) -> JobApplication:
        """Insert the record unless one exists for the same applicant and job."""
        values = asdict(application)
        values["status"] = ApplicationStatus.PENDING.value
        values["rejection_reason"] = ""

        async with self.session_factory() as session:
            dialect = session.get_bind().dialect.name
            if dialect in ("sqlite", "postgresql"):
                created = await self._insert_unless_exists(session, dialect, values)
            else:
                created = await self._insert_or_translate(session, values)
            await session.commit()

        if created is None:
            logger.info(
                f"Duplicate application rejected: applicant {application.applicant_id}, "
                f"job {application.job_id}"
            )
            raise DuplicateApplicationError(application.applicant_id, application.job_id)

        logger.info(
            f"Application {created.id} created for job {created.job_id} "
            f"by applicant {created.applicant_id}"
        )
        return created

    @staticmethod
    async def _insert_unless_exists(
        session: AsyncSession, dialect: str, values: dict
    ) -> JobApplication | None:
        dialect_insert = sqlite_insert if dialect == "sqlite" else postgresql_insert
        stmt = (
            dialect_insert(JobApplication)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(UNIQUE_KEY))
            .returning(JobApplication)
        )
        result = await session.scalars(stmt)
        return result.one_or_none()

    @staticmethod
    async def _insert_or_translate(
        session: AsyncSession, values: dict
    ) -> JobApplication | None:
        try:
            result = await session.scalars(
                insert(JobApplication).values(**values).returning(JobApplication)
            )
            return result.one()
        except IntegrityError as e:
            await session.rollback()
            if UNIQUE_CONSTRAINT in str(e.orig):
                return None
            raise

    async def list_by_applicant(self, applicant_id: str) -> list[JobApplication]:
        """Return an applicant's applications, most recent first."""
        async with self.session_factory() as session:
            result = await session.scalars(
                select(JobApplication)
                .where(JobApplication.applicant_id == applicant_id)
                .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
            )
            return list(result.all())

    async def list_all(
        self,
        filters: ApplicationFilter | None = None,
        pagination: Pagination | None = None,
    ) -> ApplicationPage:
        """Return one page of applications matching ``filters`` and the total."""
        filters = filters or ApplicationFilter()
        pagination = pagination or Pagination()

        conditions = []
        if filters.status is not None:
            conditions.append(JobApplication.status == ApplicationStatus(filters.status).value)
        if filters.job_id:
            conditions.append(JobApplication.job_id == filters.job_id)

        async with self.session_factory() as session:
            total = await session.scalar(
                select(func.count()).select_from(JobApplication).where(*conditions)
            )
            result = await session.scalars(
                select(JobApplication)
                .where(*conditions)
                .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
                .offset(pagination.offset)
                .limit(pagination.limit)
            )
            items = list(result.all())

        return ApplicationPage(
            items=items,
            total=int(total or 0),
            page=pagination.page,
            limit=pagination.limit,
        )

    async def transition(
        self,
        application_id: int,
        target_status: ApplicationStatus,
        reason: str | None = None,
        expected_status: ApplicationStatus | None = None,
    ) -> JobApplication:
        """Move an application to ``accepted`` or ``rejected``.

        The ledger itself permits any source state. When ``expected_status``
        is given the update only applies if the stored status still matches,
        checked in the same UPDATE statement.
        """
        target = ApplicationStatus(target_status)
        if target not in TRANSITION_TARGETS:
            raise ValueError(f"Cannot transition to {target.value}")

        values = {"status": target.value}
        if reason is not None:
            values["rejection_reason"] = reason

        stmt = update(JobApplication).where(JobApplication.id == application_id)
        if expected_status is not None:
            stmt = stmt.where(
                JobApplication.status == ApplicationStatus(expected_status).value
            )
        stmt = stmt.values(**values).returning(JobApplication)

        async with self.session_factory() as session:
            result = await session.scalars(
                stmt, execution_options={"synchronize_session": False}
            )
            updated = result.one_or_none()
            if updated is None:
                current_status = await session.scalar(
                    select(JobApplication.status).where(JobApplication.id == application_id)
                )
                await session.rollback()
                if current_status is None:
                    raise NotFoundError("Application not found")
                raise ApplicationStateConflictError(application_id, current_status)
            await session.commit()

        logger.info(f"Application {application_id} moved to {target.value}")
        return updated
