"""
Submission pipeline exceptions.

Each downstream step of the submission workflow fails with its own type so
the endpoint can tell client errors apart from server-side failures.
"""
from typing import Dict, List


class SubmissionError(Exception):
    """Base exception for all submission workflow errors."""
    pass


class SubmissionValidationError(SubmissionError):
    """
    Raised when the submitted form fails field validation.

    Carries the ordered list of field errors; no side effect has happened
    when this is raised.
    """
    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        fields = ", ".join(error["field"] for error in errors)
        super().__init__(f"Invalid submission fields: {fields}")


class StorageError(SubmissionError):
    """Raised when the submission could not be written to the database."""
    pass


class RenderError(SubmissionError):
    """Raised when the headless browser fails to produce the PDF."""
    pass


class MailError(SubmissionError):
    """Raised when the confirmation email could not be delivered."""
    pass


class TemplateSyntaxError(SubmissionError):
    """
    Raised when a template has unbalanced conditional blocks.

    ``position`` is the character offset of the offending marker.
    """
    def __init__(self, message: str, position: int = None, template_name: str = None):
        self.position = position
        self.template_name = template_name
        super().__init__(message)
