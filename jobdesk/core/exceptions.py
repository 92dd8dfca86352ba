"""Custom exceptions for the application."""

from fastapi import status


class ApplicationError(Exception):
    """Base exception for application errors.

    ``status_code`` is the HTTP status the API reports for the error; the
    message is what the end user sees.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InternalError(ApplicationError):
    """Raised for unexpected failures."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class UnauthenticatedError(ApplicationError):
    """Raised when a request carries no usable session token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class ForbiddenError(ApplicationError):
    """Raised when an authenticated subject lacks the required role."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied. Admin only"):
        super().__init__(message)


class ValidationError(ApplicationError):
    """Raised when a required field is missing or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST


class UploadError(ApplicationError):
    """Base class for rejected resume uploads."""

    status_code = status.HTTP_400_BAD_REQUEST


class MissingFileError(UploadError):
    """Raised when a required upload is absent."""

    def __init__(
        self,
        message: str = "Resume file is required. Please upload a PDF, DOC, or DOCX file.",
    ):
        super().__init__(message)


class UnsupportedFileTypeError(UploadError):
    """Raised when the uploaded file extension is not allowed."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__("Only PDF, DOC, and DOCX files allowed")


class FileTooLargeError(UploadError):
    """Raised when the uploaded file exceeds the size ceiling."""

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB")


class DuplicateApplicationError(ApplicationError):
    """Raised when attempting to apply to an already applied job."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, applicant_id: str, job_id: str):
        self.applicant_id = applicant_id
        self.job_id = job_id
        super().__init__("You have already applied for this job")


class NotFoundError(ApplicationError):
    """Raised when a requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ApplicationStateConflictError(ApplicationError):
    """Raised when moderating an application that is no longer pending."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, application_id: int, current_status: str):
        self.application_id = application_id
        self.current_status = current_status
        super().__init__(f"Application already {current_status}")


class SubmissionTimeoutError(ApplicationError):
    """Raised when a submission does not finish within its deadline."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT

    def __init__(self, message: str = "Application submission timed out"):
        super().__init__(message)


class AccountExistsError(ApplicationError):
    """Raised when registering an email that already has a verified account."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class InvalidCredentialsError(ApplicationError):
    """Raised when login credentials do not match."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class AccountNotVerifiedError(ApplicationError):
    """Raised when an unverified account tries to log in."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Please verify your account first"):
        super().__init__(message)


class InvalidOtpError(ApplicationError):
    """Raised when a one-time code is wrong, expired or exhausted."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Invalid or expired OTP"):
        super().__init__(message)
