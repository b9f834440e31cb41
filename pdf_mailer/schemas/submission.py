# pdf_mailer/schemas/submission.py

import html
from datetime import datetime
from typing import Any, Dict, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from pdf_mailer.exceptions import SubmissionValidationError

REQUIRED_MESSAGES = {
    "firstName": "First name is required.",
    "lastName": "Last name is required.",
    "email": "Valid email is required.",
    "phone": "Phone number is required.",
    "customId": "Custom ID must be text.",
    "submissionDate": "Submission date must be a valid ISO 8601 date.",
}

FIELD_ALIASES = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "phone": "phone",
    "custom_id": "customId",
    "submission_date": "submissionDate",
}


HTML_EXTRA_ESCAPES = str.maketrans({"/": "&#x2F;", "\\": "&#x5C;", "`": "&#96;"})


def escape_html(text: str) -> str:
    """Escape like html.escape, plus slash, backslash and backtick."""
    return html.escape(text).translate(HTML_EXTRA_ESCAPES)


def _fail(field: str):
    return PydanticCustomError("invalid_field", REQUIRED_MESSAGES[field])


def _as_text(value: Any, field: str) -> Optional[str]:
    """Coerce a raw JSON value to text; numbers are accepted, other types are not."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise _fail(field)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    raise _fail(field)


def _clean_required(value: Any, field: str) -> str:
    text = _as_text(value, field)
    if text is None or not text.strip():
        raise _fail(field)
    return escape_html(text.strip())


class SubmissionCreate(BaseModel):
    """A normalized form submission, built from the raw request body."""

    # only the camelCase request names are accepted
    model_config = ConfigDict(validate_default=True, extra="ignore")

    first_name: str = Field(None, alias="firstName")
    last_name: str = Field(None, alias="lastName")
    email: str = Field(None, alias="email")
    phone: str = Field(None, alias="phone")
    custom_id: Optional[str] = Field(None, alias="customId")
    submission_date: Optional[datetime] = Field(None, alias="submissionDate")

    @field_validator("first_name", mode="before")
    @classmethod
    def clean_first_name(cls, v):
        return _clean_required(v, "firstName")

    @field_validator("last_name", mode="before")
    @classmethod
    def clean_last_name(cls, v):
        return _clean_required(v, "lastName")

    @field_validator("phone", mode="before")
    @classmethod
    def clean_phone(cls, v):
        return _clean_required(v, "phone")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        text = _as_text(v, "email")
        if text is None or not text.strip():
            raise _fail("email")
        try:
            result = validate_email(text.strip(), check_deliverability=False)
        except EmailNotValidError:
            raise _fail("email")
        return result.normalized.lower()

    @field_validator("custom_id", mode="before")
    @classmethod
    def clean_custom_id(cls, v):
        text = _as_text(v, "customId")
        if text is None:
            return None
        return escape_html(text.strip())

    @field_validator("submission_date", mode="before")
    @classmethod
    def parse_submission_date(cls, v):
        if v is None:
            return None
        if not isinstance(v, str):
            raise _fail("submissionDate")
        if not v.strip():
            return None
        try:
            return datetime.fromisoformat(v.strip())
        except ValueError:
            raise _fail("submissionDate")


class FieldError(BaseModel):
    field: str
    msg: str


class SubmissionErrorResponse(BaseModel):
    errors: List[FieldError]


class SubmissionSuccessResponse(BaseModel):
    message: str


class SubmissionFailureResponse(BaseModel):
    message: str
    error: str


def field_errors_from(exc: ValidationError) -> List[Dict[str, str]]:
    """Flatten a pydantic ValidationError into ``{"field", "msg"}`` entries."""
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        if not loc:
            errors.append({"field": "body", "msg": "Request body must be a JSON object."})
            continue
        name = str(loc[0])
        field = FIELD_ALIASES.get(name, name)
        errors.append({"field": field, "msg": REQUIRED_MESSAGES.get(field, error.get("msg", "Invalid value"))})
    return errors


def validate_submission(payload: Any) -> SubmissionCreate:
    """Validate the raw request body.

    Returns the normalized submission, or raises SubmissionValidationError
    carrying every field error in form order.
    """
    if not isinstance(payload, dict):
        raise SubmissionValidationError([{"field": "body", "msg": "Request body must be a JSON object."}])
    try:
        return SubmissionCreate.model_validate(payload)
    except ValidationError as exc:
        raise SubmissionValidationError(field_errors_from(exc))
