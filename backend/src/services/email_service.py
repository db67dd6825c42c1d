"""Notification emails for new contact form submissions.

Two interchangeable providers are supported (Resend and ZeptoMail), selected
by the ``EMAIL_PROVIDER`` setting. Sending is best-effort: every failure is
logged and reported as ``False``, never raised and never retried.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from models.email import EmailMessage
from models.submission import Submission
from utils.config import Settings
from utils.sanitize import escape_html

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 10

HTML_STYLE = (
    "body{font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',sans-serif;"
    "line-height:1.6;color:#111827;background:#f9fafb}"
    ".wrapper{max-width:600px;margin:0 auto;padding:24px}"
    ".banner{background:#1e3a8a;color:#fff;padding:20px 24px;border-radius:10px 10px 0 0}"
    ".banner h1{margin:0;font-size:20px}"
    ".body{background:#fff;padding:24px;border:1px solid #e5e7eb;border-top:none}"
    ".label{font-size:12px;text-transform:uppercase;letter-spacing:.05em;color:#6b7280}"
    ".value{font-size:16px;margin:2px 0 16px}"
    ".message{background:#f3f4f6;padding:16px;border-radius:8px}"
    ".meta{background:#eef2ff;padding:16px 24px;border-radius:0 0 10px 10px;"
    "font-size:12px;color:#4b5563}"
    "a{color:#1d4ed8}"
)


def build_message(
    submission: Submission, submission_id: str, settings: Settings
) -> EmailMessage:
    """Render the subject, plain-text and HTML bodies for a submission."""
    subject = f"{settings.email_subject_prefix} New contact from {submission.name}"
    source = settings.site_domain or settings.site_name

    text_body = "\n".join(
        [
            f"New contact form submission from {settings.site_name}",
            "",
            "---",
            f"Name: {submission.name}",
            f"Email: {submission.email}",
            "---",
            "",
            "Message:",
            submission.message,
            "",
            "---",
            "Metadata:",
            f"- Submission ID: {submission_id}",
            f"- Timestamp: {submission.timestamp}",
            f"- IP: {submission.ip}",
            f"- Country: {submission.country}",
            "",
            "---",
            f"This email was sent from {source}",
        ]
    )

    email = escape_html(submission.email)
    html_body = (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<style>{HTML_STYLE}</style></head><body><div class=\"wrapper\">"
        "<div class=\"banner\"><h1>New Contact Form Submission</h1></div>"
        "<div class=\"body\">"
        "<div class=\"label\">From</div>"
        f"<div class=\"value\">{escape_html(submission.name)}</div>"
        "<div class=\"label\">Email</div>"
        f"<div class=\"value\"><a href=\"mailto:{email}\">{email}</a></div>"
        "<div class=\"label\">Message</div>"
        f"<div class=\"message\">{escape_html(submission.message)}</div>"
        "</div><div class=\"meta\">"
        f"<div><strong>ID:</strong> {escape_html(submission_id)}</div>"
        f"<div><strong>Time:</strong> {escape_html(submission.timestamp)}</div>"
        f"<div><strong>Location:</strong> {escape_html(submission.country)}</div>"
        f"<div><strong>IP:</strong> {escape_html(submission.ip)}</div>"
        "</div></div></body></html>"
    )

    return EmailMessage(subject=subject, text_body=text_body, html_body=html_body)


class EmailProvider(ABC):
    """An email delivery backend."""

    name = "provider"
    endpoint = ""

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    def build_headers(self) -> dict[str, str]:
        """Return provider-specific auth headers."""

    @abstractmethod
    def build_payload(self, message: EmailMessage) -> dict[str, Any]:
        """Return the provider-specific JSON body."""

    def send(self, message: EmailMessage) -> bool:
        """POST the message once. True only on a 2xx response.

        Raises:
            requests.exceptions.RequestException: On transport errors
        """
        headers = {"Content-Type": "application/json", **self.build_headers()}
        response = requests.post(
            self.endpoint,
            json=self.build_payload(message),
            headers=headers,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )

        if response.ok:
            return True

        logger.error(
            "%s error: status=%d body=%s", self.name, response.status_code, response.text
        )
        return False


class ResendProvider(EmailProvider):
    """https://resend.com, bearer-token auth."""

    name = "Resend"
    endpoint = "https://api.resend.com/emails"

    def build_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.settings.resend_api_key}"}

    def build_payload(self, message: EmailMessage) -> dict[str, Any]:
        return {
            "from": f"{self.settings.from_name} <{self.settings.from_email}>",
            "to": [self.settings.notify_email],
            "subject": message.subject,
            "text": message.text_body,
            "html": message.html_body,
        }


class ZeptoMailProvider(EmailProvider):
    """https://www.zoho.com/zeptomail, Zoho-enczapikey auth."""

    name = "ZeptoMail"
    endpoint = "https://api.zeptomail.com/v1.1/email/"

    def build_headers(self) -> dict[str, str]:
        return {"Authorization": f"Zoho-enczapikey {self.settings.zeptomail_api_key}"}

    def build_payload(self, message: EmailMessage) -> dict[str, Any]:
        return {
            "from": {
                "address": self.settings.from_email,
                "name": self.settings.from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": self.settings.notify_email,
                        "name": "Notification",
                    }
                }
            ],
            "subject": message.subject,
            "textbody": message.text_body,
            "htmlbody": message.html_body,
        }


EMAIL_PROVIDERS: dict[str, type[EmailProvider]] = {
    "resend": ResendProvider,
    "zeptomail": ZeptoMailProvider,
}


def get_email_provider(settings: Settings) -> EmailProvider:
    """Pick the configured provider. Unknown names fall back to Resend."""
    provider_name = (settings.email_provider or "resend").lower()
    provider_cls = EMAIL_PROVIDERS.get(provider_name, ResendProvider)
    return provider_cls(settings)


class EmailDispatcher:
    """Sends submission notifications through the configured provider."""

    def __init__(self, settings: Settings, provider: EmailProvider | None = None):
        """Initialize the dispatcher.

        Args:
            settings: Request settings (sender, recipient, provider keys)
            provider: Optional provider override (for testing)
        """
        self.settings = settings
        self.provider = provider or get_email_provider(settings)

    def dispatch(self, submission: Submission, submission_id: str) -> bool:
        """Send the notification for a stored submission.

        Returns:
            True if the provider accepted the message, False otherwise
        """
        try:
            message = build_message(submission, submission_id, self.settings)
            sent = self.provider.send(message)
        except Exception as e:
            logger.error(
                f"{self.provider.name} email send error for {submission_id}: {e}",
                exc_info=True,
            )
            return False

        if sent:
            logger.info(f"Notification sent via {self.provider.name} for {submission_id}")
        return sent
