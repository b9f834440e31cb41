# pdf_mailer/schemas/__init__.py
from .submission import (
    SubmissionCreate,
    FieldError,
    SubmissionErrorResponse,
    SubmissionSuccessResponse,
    SubmissionFailureResponse,
    validate_submission,
)

__all__ = [
    "SubmissionCreate",
    "FieldError",
    "SubmissionErrorResponse",
    "SubmissionSuccessResponse",
    "SubmissionFailureResponse",
    "validate_submission",
]
