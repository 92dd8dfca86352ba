"""Validation logic for applications and resume uploads."""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Protocol

from jobdesk.core.config import settings
from jobdesk.core.exceptions import (
    FileTooLargeError,
    MissingFileError,
    UnsupportedFileTypeError,
)
from jobdesk.schemas.application import ApplicationForm

REQUIRED_FORM_FIELDS = (
    "job_id",
    "job_title",
    "job_company",
    "applicant_name",
    "applicant_email",
)


@dataclass
class ValidationResult:
    """Result of validation process."""

    is_valid: bool
    error: str | None = None
    warnings: list[str] = field(default_factory=list)


def validate_application_form(form: ApplicationForm) -> ValidationResult:
    """Check that every required application field is present and non-blank."""
    missing = [
        name
        for name in REQUIRED_FORM_FIELDS
        if not (getattr(form, name) or "").strip()
    ]
    if missing:
        return ValidationResult(
            is_valid=False,
            error=f"Missing required fields: {', '.join(missing)}",
        )

    warnings = []
    if form.cover_letter and len(form.cover_letter.strip()) < 50:
        warnings.append("Cover letter is very short")

    return ValidationResult(is_valid=True, warnings=warnings)


class UploadedFile(Protocol):
    """The part of ``fastapi.UploadFile`` the validator relies on."""

    filename: str | None
    size: int | None

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class ValidatedUpload:
    """An upload that passed the policy checks, held in memory."""

    filename: str
    extension: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class UploadValidator:
    """Enforces the resume extension allow-list and size ceiling.

    The stream is read in chunks and the limit is checked on every chunk,
    so nothing oversized ever reaches resume storage.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        allowed_extensions: list[str] | None = None,
        max_bytes: int | None = None,
    ):
        extensions = allowed_extensions or settings.allowed_resume_extensions
        self.allowed_extensions = frozenset(ext.lower() for ext in extensions)
        self.max_bytes = max_bytes or settings.max_resume_size_bytes

    def check_extension(self, filename: str) -> str:
        """Return the lower-cased extension or raise UnsupportedFileTypeError."""
        extension = PurePath(filename).suffix.lower()
        if extension not in self.allowed_extensions:
            raise UnsupportedFileTypeError(extension)
        return extension

    def check_size(self, size: int) -> None:
        if size > self.max_bytes:
            raise FileTooLargeError(self.max_bytes)

    async def validate(self, upload: UploadedFile | None) -> ValidatedUpload:
        """Validate an upload and return its content."""
        if upload is None or not upload.filename:
            raise MissingFileError()

        extension = self.check_extension(upload.filename)

        # Reject early when the transfer announced its length
        if upload.size is not None:
            self.check_size(upload.size)

        chunks: list[bytes] = []
        total = 0
        while True:
            chunk = await upload.read(self.CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            self.check_size(total)
            chunks.append(chunk)

        if total == 0:
            raise MissingFileError("Uploaded resume file is empty")

        return ValidatedUpload(
            filename=PurePath(upload.filename).name,
            extension=extension,
            content=b"".join(chunks),
        )
