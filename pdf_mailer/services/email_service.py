from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional
import logging

from fastapi import UploadFile
from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from pydantic import ValidationError
from starlette.datastructures import Headers

from pdf_mailer.config import Settings
from pdf_mailer.exceptions import MailError

logger = logging.getLogger(__name__)

SSL_PORT = 465


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    mime_type: str = "application/pdf"


def confirmation_subject(first_name: str, last_name: str) -> str:
    return f"Your Submission Confirmation - {first_name} {last_name}"


def attachment_filename(first_name: str, last_name: str) -> str:
    return f"submission_{first_name}_{last_name}.pdf"


class Notifier:
    """Sends the confirmation email through SMTP.

    The sender identity comes from settings only. With MAIL_SSL_FALLBACK the
    message is retried once over implicit TLS on port 465 when the primary
    connection fails.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._mailers: Optional[List[FastMail]] = None

    def _connection_config(self, port: int) -> ConnectionConfig:
        use_ssl = port == SSL_PORT
        return ConnectionConfig(
            MAIL_USERNAME=self.settings.MAIL_USER,
            MAIL_PASSWORD=self.settings.MAIL_PASS,
            MAIL_FROM=self.settings.MAIL_FROM_ADDRESS,
            MAIL_FROM_NAME=self.settings.brand_name,
            MAIL_PORT=port,
            MAIL_SERVER=self.settings.MAIL_HOST,
            MAIL_STARTTLS=not use_ssl,
            MAIL_SSL_TLS=use_ssl,
            USE_CREDENTIALS=bool(self.settings.MAIL_USER),
            VALIDATE_CERTS=True,
            SUPPRESS_SEND=1 if self.settings.MAIL_SUPPRESS_SEND else 0,
            TIMEOUT=self.settings.MAIL_TIMEOUT,
        )

    def mailers(self) -> List[FastMail]:
        if self._mailers is None:
            try:
                ports = [self.settings.MAIL_PORT]
                if self.settings.MAIL_SSL_FALLBACK and self.settings.MAIL_PORT != SSL_PORT:
                    ports.append(SSL_PORT)
                self._mailers = [FastMail(self._connection_config(port)) for port in ports]
            except ValidationError as e:
                raise MailError(f"Mail transport is not configured: {e}") from e
        return self._mailers

    @staticmethod
    def _build_message(recipient: str, subject: str, html_body: str, attachment: EmailAttachment) -> MessageSchema:
        maintype, _, subtype = attachment.mime_type.partition("/")
        upload = UploadFile(
            file=BytesIO(attachment.content),
            filename=attachment.filename,
            headers=Headers({"content-type": attachment.mime_type}),
        )
        return MessageSchema(
            subject=subject,
            recipients=[recipient],
            body=html_body,
            subtype="html",
            attachments=[{"file": upload, "mime_type": maintype, "mime_subtype": subtype}],
        )

    async def send(self, recipient: str, subject: str, html_body: str, attachment: EmailAttachment) -> None:
        last_error = None
        for mailer in self.mailers():
            port = mailer.config.MAIL_PORT
            try:
                # a fresh message per attempt; the attachment stream is consumed on send
                await mailer.send_message(self._build_message(recipient, subject, html_body, attachment))
                logger.info(f"{subject} email sent to {recipient} via port {port}")
                return
            except Exception as e:
                logger.warning(f"Failed to send {subject} via port {port}: {str(e)}")
                last_error = e

        logger.error(f"Failed to send {subject} email to {recipient}: {str(last_error)}")
        raise MailError(f"Email delivery failed: {last_error}") from last_error
