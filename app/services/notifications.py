"""Best-effort transactional email.

Messages are sent over SMTP when ``SMTP_HOST``/``SMTP_USER``/``SMTP_PASS``
are configured and only logged otherwise.  Callers schedule
:func:`send_quietly` as a background task so a delivery failure never
affects the response of the request that triggered it.
"""

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

_STATUS_COLORS = {
    "New": "#3b82f6",
    "Contacted": "#f59e0b",
    "Viewing": "#8b5cf6",
    "Negotiation": "#06b6d4",
    "Won": "#22c55e",
    "Lost": "#ef4444",
}
_DEFAULT_STATUS_COLOR = "#94a3b8"
_SMTP_TIMEOUT = 10  # seconds


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str


def _layout(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head>"
        "<body style=\"font-family: Arial, sans-serif; color: #18181b;\">"
        f"{body}"
        "<p style=\"color: #a1a1aa; font-size: 12px;\">Estate Portal CRM</p>"
        "</body></html>"
    )


def _status_badge(status: str) -> str:
    color = _STATUS_COLORS.get(status, _DEFAULT_STATUS_COLOR)
    return (
        f"<span style=\"background: {color}; color: white; padding: 4px 12px; "
        f"border-radius: 12px; font-weight: 600;\">{escape(status)}</span>"
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def property_deleted_email(to: str, name: str, property_title: str) -> EmailMessage:
    body = (
        "<h2>Property Deleted</h2>"
        f"<p>Hi <strong>{escape(name)}</strong>,</p>"
        "<p>This is a confirmation that the following property has been "
        "permanently removed from your portfolio:</p>"
        f"<p><strong>{escape(property_title)}</strong></p>"
        "<p>Lead records linked to this property are preserved for your reference.</p>"
    )
    return EmailMessage(
        to=to,
        subject=f"Property Deleted: {property_title}",
        html=_layout("Property Deleted", body),
    )


def lead_status_change_email(
    to: str,
    broker_name: str,
    lead_name: str,
    old_status: str,
    new_status: str,
    property_title: Optional[str] = None,
) -> EmailMessage:
    body = (
        "<h2>Lead Status Updated</h2>"
        f"<p>Hi <strong>{escape(broker_name)}</strong>,</p>"
        f"<p>The status of your lead <strong>{escape(lead_name)}</strong> has been updated:</p>"
        f"<p>{_status_badge(old_status)} &rarr; {_status_badge(new_status)}</p>"
    )
    if property_title:
        body += f"<p>Property: <strong>{escape(property_title)}</strong></p>"
    return EmailMessage(
        to=to,
        subject=f"Lead {lead_name}: {old_status} → {new_status}",
        html=_layout("Lead Status Update", body),
    )


def account_disabled_email(to: str, name: str, note: Optional[str] = None) -> EmailMessage:
    body = (
        "<h2>Notice: Your Account Has Been Disabled</h2>"
        f"<p>Hi <strong>{escape(name)}</strong>,</p>"
        "<p>Your account has been disabled by an administrator.</p>"
    )
    if note:
        body += f"<p><strong>Administrator Note:</strong><br/>{escape(note)}</p>"
    body += (
        "<p>If you believe this was a mistake, please contact support or "
        "your administrator.</p>"
    )
    return EmailMessage(
        to=to,
        subject="Notice: Account Disabled",
        html=_layout("Account Disabled", body),
    )


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class EmailNotifier:
    """SMTP sender configured from settings."""

    def __init__(
        self,
        host: str = "",
        port: int = 587,
        user: str = "",
        password: str = "",
        sender: str = "",
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user or "noreply@example.com"

    @classmethod
    def from_settings(cls) -> "EmailNotifier":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            sender=settings.SMTP_FROM,
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    def send(self, message: EmailMessage) -> bool:
        """Deliver *message*; returns ``False`` when SMTP is not configured."""
        if not self.configured:
            logger.info(
                "SMTP not configured. Would send to %s: %s",
                message.to,
                message.subject,
            )
            return False

        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = self.sender
        mime["To"] = message.to
        mime.attach(MIMEText(message.html, "html"))

        if self.port == 465:
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=_SMTP_TIMEOUT)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=_SMTP_TIMEOUT)
        with server:
            if self.port != 465:
                server.starttls()
            server.login(self.user, self.password)
            server.sendmail(self.sender, [message.to], mime.as_string())
        logger.info("Email sent to %s: %s", message.to, message.subject)
        return True


def send_quietly(notifier: EmailNotifier, message: EmailMessage) -> None:
    """Send *message*, logging instead of raising on failure."""
    try:
        notifier.send(message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error("Failed to send email '%s' to %s: %s", message.subject, message.to, exc)
