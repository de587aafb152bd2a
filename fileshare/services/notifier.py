"""Share a file by emailing its download link, or hand the link back when email is not configured."""

from __future__ import annotations

import enum
import html
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fileshare.core.config import Settings
    from fileshare.models import FileRecord

logger = logging.getLogger(__name__)


class ShareOutcome(str, enum.Enum):
    SENT_VIA_EMAIL = "sent_via_email"
    RETURNED_LINK = "returned_link"


class EmailDeliveryError(Exception):
    """Raised when SMTP delivery fails. Not downgraded to returning the link."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class ShareResult:
    outcome: ShareOutcome
    download_link: str


def format_size_kb(size: int) -> str:
    return f"{size / 1024:.2f} KB"


def build_share_message(
    record: FileRecord,
    recipient: str,
    note: str | None,
    requester_username: str,
    download_link: str,
    sender: str,
) -> MIMEMultipart:
    """Plain-text and HTML message announcing the shared file."""
    subject = f"File shared: {record.original_name}"
    size = format_size_kb(record.size)

    text_lines = [
        f"User {requester_username} has shared a file with you.",
        f"File: {record.original_name}",
        f"Size: {size}",
    ]
    if note:
        text_lines.append(f"Message: {note}")
    text_lines += [
        f"Download: {download_link}",
        "This link requires authentication to access.",
    ]

    note_html = f"<p><strong>Message:</strong> {html.escape(note)}</p>" if note else ""
    html_body = (
        "<h3>File Shared with You</h3>"
        f"<p>User {html.escape(requester_username)} has shared a file with you.</p>"
        f"<p><strong>File:</strong> {html.escape(record.original_name)}</p>"
        f"<p><strong>Size:</strong> {size}</p>"
        f"{note_html}"
        f'<p><a href="{html.escape(download_link, quote=True)}">Click here to download</a></p>'
        "<p><small>This link requires authentication to access.</small></p>"
    )

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = recipient
    msg.attach(MIMEText("\n".join(text_lines), "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


def _send(msg: MIMEMultipart, username: str, password: str, settings: Settings) -> None:
    with smtplib.SMTP(
        settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SEC
    ) as server:
        if settings.SMTP_USE_TLS:
            server.starttls()
        server.login(username, password)
        server.send_message(msg)


def share_file(
    record: FileRecord,
    recipient: str,
    note: str | None,
    requester_username: str,
    download_link: str,
    settings: Settings,
) -> ShareResult:
    """
    Email the download link when SMTP credentials are configured.

    Without credentials nothing is sent and the link is returned for the caller
    to hand over directly. Raises EmailDeliveryError when sending fails.
    """
    if not settings.email_configured:
        logger.info("Email not configured; returning link for file id=%s", record.id)
        return ShareResult(ShareOutcome.RETURNED_LINK, download_link)

    sender = settings.EMAIL_FROM or settings.EMAIL_USER
    msg = build_share_message(
        record, recipient, note, requester_username, download_link, sender
    )
    try:
        _send(msg, settings.EMAIL_USER, settings.EMAIL_PASS.get_secret_value(), settings)
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Sending file id=%s to %s failed", record.id, recipient)
        raise EmailDeliveryError("Email delivery failed") from e
    logger.info("Shared file id=%s by email (requested by %s)", record.id, requester_username)
    return ShareResult(ShareOutcome.SENT_VIA_EMAIL, download_link)
