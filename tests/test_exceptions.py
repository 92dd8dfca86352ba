"""Tests for custom exceptions."""

from fastapi import status

from jobdesk.core.exceptions import (
    ApplicationError,
    ApplicationStateConflictError,
    DuplicateApplicationError,
    FileTooLargeError,
    ForbiddenError,
    MissingFileError,
    NotFoundError,
    SubmissionTimeoutError,
    UnauthenticatedError,
    UnsupportedFileTypeError,
    UploadError,
    ValidationError,
)


class TestApplicationError:
    """Tests for ApplicationError base exception."""

    def test_create_error(self):
        error = ApplicationError("Test error message")
        assert error.message == "Test error message"
        assert str(error) == "Test error message"

    def test_default_status(self):
        assert ApplicationError("x").status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


class TestAuthErrors:
    """Tests for authentication and authorization errors."""

    def test_unauthenticated(self):
        error = UnauthenticatedError()
        assert error.status_code == 401
        assert error.message == "Invalid or expired token"
        assert error.headers == {"WWW-Authenticate": "Bearer"}

    def test_forbidden(self):
        error = ForbiddenError()
        assert error.status_code == 403
        assert error.message == "Access denied. Admin only"


class TestUploadErrors:
    """Tests for resume upload errors."""

    def test_all_are_bad_requests(self):
        for error in (
            MissingFileError(),
            UnsupportedFileTypeError(".exe"),
            FileTooLargeError(5 * 1024 * 1024),
        ):
            assert isinstance(error, UploadError)
            assert error.status_code == 400

    def test_unsupported_type_keeps_extension(self):
        error = UnsupportedFileTypeError(".exe")
        assert error.extension == ".exe"
        assert error.message == "Only PDF, DOC, and DOCX files allowed"

    def test_too_large_message(self):
        assert FileTooLargeError(5 * 1024 * 1024).message == (
            "File too large. Maximum size is 5 MB"
        )


class TestApplicationErrors:
    """Tests for ledger and workflow errors."""

    def test_duplicate(self):
        error = DuplicateApplicationError(applicant_id="user-1", job_id="job-1")
        assert error.applicant_id == "user-1"
        assert error.job_id == "job-1"
        assert error.status_code == 400
        assert error.message == "You have already applied for this job"

    def test_state_conflict(self):
        error = ApplicationStateConflictError(7, "accepted")
        assert error.status_code == 409
        assert error.message == "Application already accepted"

    def test_other_statuses(self):
        assert ValidationError("bad").status_code == 400
        assert NotFoundError().status_code == 404
        assert SubmissionTimeoutError().status_code == 504
