import asyncio
from datetime import datetime

from conftest import VALID_PAYLOAD, FakeNotifier, FakeRenderer, FakeStore
from pdf_mailer.exceptions import (
    MailError,
    RenderError,
    StorageError,
    SubmissionValidationError,
    TemplateSyntaxError,
)
from pdf_mailer.schemas.submission import validate_submission
from pdf_mailer.services.submission_service import (
    SubmissionState,
    build_template_context,
    format_timestamp,
)


def test_successful_run_reaches_completed(make_service):
    store = FakeStore()
    service = make_service(store=store)

    outcome = asyncio.run(service.submit(VALID_PAYLOAD))

    assert outcome.ok
    assert outcome.state == SubmissionState.COMPLETED
    assert outcome.last_state == SubmissionState.NOTIFIED
    assert outcome.error is None
    assert outcome.record_id is not None
    assert outcome.pdf_filename == "submission_Ana_Li.pdf"


def test_validation_failure_stops_at_received(make_service):
    renderer = FakeRenderer()
    service = make_service(renderer=renderer)

    outcome = asyncio.run(service.submit({"firstName": "Ana"}))

    assert outcome.state == SubmissionState.FAILED
    assert outcome.last_state == SubmissionState.RECEIVED
    assert isinstance(outcome.error, SubmissionValidationError)
    assert renderer.calls == []


def test_storage_failure_short_circuits(make_service):
    renderer = FakeRenderer()
    notifier = FakeNotifier()
    service = make_service(store=FakeStore(error=StorageError("db down")), renderer=renderer, notifier=notifier)

    outcome = asyncio.run(service.submit(VALID_PAYLOAD))

    assert outcome.state == SubmissionState.FAILED
    assert outcome.last_state == SubmissionState.VALIDATED
    assert isinstance(outcome.error, StorageError)
    assert renderer.calls == []
    assert notifier.calls == []


def test_stored_row_is_kept_when_mail_fails(make_service):
    store = FakeStore()
    service = make_service(store=store, notifier=FakeNotifier(error=MailError("relay refused")))

    outcome = asyncio.run(service.submit(VALID_PAYLOAD))

    assert outcome.state == SubmissionState.FAILED
    assert outcome.last_state == SubmissionState.RENDERED
    assert isinstance(outcome.error, MailError)
    assert outcome.record_id is not None
    assert len(store.calls) == 1


def test_unexpected_renderer_exception_is_reported_as_render_error(make_service):
    notifier = FakeNotifier()
    service = make_service(renderer=FakeRenderer(error=RuntimeError("browser crashed")), notifier=notifier)

    outcome = asyncio.run(service.submit(VALID_PAYLOAD))

    assert isinstance(outcome.error, RenderError)
    assert str(outcome.error) == "browser crashed"
    assert isinstance(outcome.error.__cause__, RuntimeError)
    assert notifier.calls == []


def test_unexpected_store_exception_is_reported_as_storage_error(make_service):
    service = make_service(store=FakeStore(error=ConnectionRefusedError()))

    outcome = asyncio.run(service.submit(VALID_PAYLOAD))

    assert isinstance(outcome.error, StorageError)
    assert str(outcome.error) == "ConnectionRefusedError"


def test_template_error_during_request_is_a_render_error(make_service, monkeypatch):
    renderer = FakeRenderer()
    service = make_service(renderer=renderer)

    def broken(context):
        raise TemplateSyntaxError("{{/if}} has no matching {{#if}}", position=0)

    monkeypatch.setattr(service.templates, "render_pdf_html", broken)

    outcome = asyncio.run(service.submit(VALID_PAYLOAD))

    assert isinstance(outcome.error, RenderError)
    assert renderer.calls == []


def test_receipt_time_is_passed_to_store(make_service):
    store = FakeStore()
    service = make_service(store=store)
    received_at = datetime(2024, 3, 1, 9, 15, 0)

    asyncio.run(service.submit(VALID_PAYLOAD, received_at=received_at))

    assert store.calls[0][1] == received_at


def test_template_context_fills_absent_values_with_empty_strings():
    submission = validate_submission(VALID_PAYLOAD)

    context = build_template_context(submission, datetime(2024, 1, 5, 15, 4, 5), "Acme Forms")

    assert context == {
        "firstName": "Ana",
        "lastName": "Li",
        "email": "ana@example.com",
        "phone": "555-0100",
        "customId": "",
        "submissionDate": "",
        "systemTimestamp": "1/5/2024, 3:04:05 PM",
        "brandName": "Acme Forms",
    }


def test_template_context_falls_back_to_default_brand():
    submission = validate_submission(VALID_PAYLOAD)
    context = build_template_context(submission, datetime(2024, 1, 5), "")
    assert context["brandName"] == "Our Company"


def test_format_timestamp_uses_twelve_hour_clock():
    assert format_timestamp(datetime(2024, 1, 5, 0, 0, 0)) == "1/5/2024, 12:00:00 AM"
    assert format_timestamp(datetime(2024, 12, 25, 12, 30, 9)) == "12/25/2024, 12:30:09 PM"
    assert format_timestamp(None) == ""
