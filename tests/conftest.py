import uuid

import pytest
from fastapi.testclient import TestClient

from pdf_mailer.config import Settings
from pdf_mailer.main import create_app, resolve_templates_dir
from pdf_mailer.services.submission_service import SubmissionService
from pdf_mailer.utils.templating import TemplateLibrary

VALID_PAYLOAD = {
    "firstName": "Ana",
    "lastName": "Li",
    "email": "ana@example.com",
    "phone": "555-0100",
}


class FakeRenderer:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def render(self, html_content):
        self.calls.append(html_content)
        if self.error is not None:
            raise self.error
        return b"%PDF-1.4 fake"


class FakeNotifier:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def send(self, recipient, subject, html_body, attachment):
        self.calls.append(
            {"recipient": recipient, "subject": subject, "html": html_body, "attachment": attachment}
        )
        if self.error is not None:
            raise self.error


class FakeRecord:
    def __init__(self):
        self.id = uuid.uuid4()


class FakeStore:
    def __init__(self, error=None, healthy=True):
        self.error = error
        self.healthy = healthy
        self.calls = []

    async def save(self, submission, system_timestamp):
        self.calls.append((submission, system_timestamp))
        if self.error is not None:
            raise self.error
        return FakeRecord()

    def ping(self):
        return self.healthy


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="",
        MAIL_HOST="smtp.example.com",
        MAIL_FROM_NAME="Acme Forms",
        MAIL_FROM_ADDRESS="no-reply@example.com",
    )


@pytest.fixture
def templates():
    return TemplateLibrary.from_directory(resolve_templates_dir("templates"))


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_service(templates):
    def _make(store=None, renderer=None, notifier=None):
        return SubmissionService(
            templates=templates,
            renderer=renderer or FakeRenderer(),
            notifier=notifier or FakeNotifier(),
            store=store,
            brand_name="Acme Forms",
        )
    return _make


@pytest.fixture
def make_client(settings, make_service):
    def _make(store=None, renderer=None, notifier=None):
        service = make_service(store=store, renderer=renderer, notifier=notifier)
        return TestClient(create_app(settings, submission_service=service))
    return _make
