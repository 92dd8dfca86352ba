"""Utility functions and classes."""

from jobdesk.utils.validators import (
    UploadValidator,
    ValidatedUpload,
    ValidationResult,
    validate_application_form,
)

__all__ = [
    "UploadValidator",
    "ValidatedUpload",
    "ValidationResult",
    "validate_application_form",
]
