# pdf_mailer/services/submission_service.py
"""
Submission workflow: validate, store, render, notify.

The steps run strictly in order. A failing step ends the run in the FAILED
state and nothing after it runs; earlier side effects (a stored row) are not
undone.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

from pdf_mailer.exceptions import (
    MailError,
    RenderError,
    StorageError,
    SubmissionError,
    SubmissionValidationError,
)
from pdf_mailer.schemas.submission import SubmissionCreate, validate_submission
from pdf_mailer.services.email_service import (
    EmailAttachment,
    Notifier,
    attachment_filename,
    confirmation_subject,
)
from pdf_mailer.services.pdf_service import DocumentRenderer
from pdf_mailer.services.store import SubmissionStore
from pdf_mailer.utils.templating import TemplateLibrary

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SubmissionState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    STORED = "stored"
    RENDERED = "rendered"
    NOTIFIED = "notified"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SubmissionOutcome:
    state: SubmissionState
    # last state reached before the failure
    last_state: SubmissionState
    error: Optional[SubmissionError] = None
    record_id: Optional[str] = None
    pdf_filename: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state == SubmissionState.COMPLETED


def format_timestamp(value: Optional[datetime]) -> str:
    """Format like ``1/5/2024, 3:04:05 PM``; empty string for no value."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone()
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value.minute:02d}:{value.second:02d} {meridiem}"


def build_template_context(submission: SubmissionCreate, system_timestamp: datetime, brand_name: str) -> Dict[str, str]:
    return {
        "firstName": submission.first_name,
        "lastName": submission.last_name,
        "email": submission.email,
        "phone": submission.phone,
        "customId": submission.custom_id or "",
        "submissionDate": format_timestamp(submission.submission_date),
        "systemTimestamp": format_timestamp(system_timestamp),
        "brandName": brand_name or "Our Company",
    }


async def _run_step(error_type: Type[SubmissionError], step: Callable[[], Awaitable[T]]) -> T:
    try:
        return await step()
    except error_type:
        raise
    except Exception as e:
        raise error_type(str(e) or e.__class__.__name__) from e


class SubmissionService:
    def __init__(
        self,
        templates: TemplateLibrary,
        renderer: DocumentRenderer,
        notifier: Notifier,
        store: Optional[SubmissionStore] = None,
        brand_name: str = "Our Company",
    ):
        self.templates = templates
        self.renderer = renderer
        self.notifier = notifier
        self.store = store
        self.brand_name = brand_name

    async def submit(self, payload: Any, received_at: Optional[datetime] = None) -> SubmissionOutcome:
        system_timestamp = received_at or datetime.now().astimezone()
        try:
            submission = validate_submission(payload)
        except SubmissionValidationError as e:
            logger.info(f"Submission rejected: {e}")
            return SubmissionOutcome(state=SubmissionState.FAILED, last_state=SubmissionState.RECEIVED, error=e)
        return await self.process(submission, system_timestamp)

    async def process(self, submission: SubmissionCreate, system_timestamp: datetime) -> SubmissionOutcome:
        state = SubmissionState.VALIDATED
        record_id = None
        filename = attachment_filename(submission.first_name, submission.last_name)
        context = build_template_context(submission, system_timestamp, self.brand_name)

        try:
            # 1. (Optional) Save to database
            if self.store is not None:
                record = await _run_step(StorageError, lambda: self.store.save(submission, system_timestamp))
                record_id = str(record.id)
                state = SubmissionState.STORED
            else:
                logger.info("Database logging skipped (DATABASE_URL not set).")

            # 2. Generate PDF in memory
            async def render_documents() -> Tuple[bytes, str]:
                pdf_bytes = await self.renderer.render(self.templates.render_pdf_html(context))
                return pdf_bytes, self.templates.render_email_html(context)

            pdf_bytes, email_html = await _run_step(RenderError, render_documents)
            state = SubmissionState.RENDERED

            # 3. Send email with the PDF attached
            await _run_step(MailError, lambda: self.notifier.send(
                submission.email,
                confirmation_subject(submission.first_name, submission.last_name),
                email_html,
                EmailAttachment(filename=filename, content=pdf_bytes),
            ))
            state = SubmissionState.NOTIFIED
        except SubmissionError as e:
            logger.error(f"Error processing submission for {submission.email} after {state.value}: {e}")
            return SubmissionOutcome(
                state=SubmissionState.FAILED,
                last_state=state,
                error=e,
                record_id=record_id,
            )

        logger.info(f"Submission for {submission.email} completed")
        return SubmissionOutcome(
            state=SubmissionState.COMPLETED,
            last_state=state,
            record_id=record_id,
            pdf_filename=filename,
        )
