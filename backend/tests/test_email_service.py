"""Tests for the notification email service."""

from dataclasses import replace
from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from models.email import EmailMessage
from models.submission import Submission
from services.email_service import (
    EmailDispatcher,
    ResendProvider,
    ZeptoMailProvider,
    build_message,
    get_email_provider,
)

SUBMISSION_ID = "1700000000000-abc1234"


def _response(status_code: int, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    return response


@pytest.fixture
def message():
    return EmailMessage(subject="Subject", text_body="Text", html_body="<p>Html</p>")


class TestBuildMessage:
    """Tests for build_message."""

    def test_subject(self, sample_submission, settings):
        message = build_message(sample_submission, SUBMISSION_ID, settings)
        assert message.subject == "[Example] New contact from Ana Lima"

    def test_text_body_field_order(self, sample_submission, settings):
        text = build_message(sample_submission, SUBMISSION_ID, settings).text_body
        lines = text.split("\n")

        assert lines[0] == "New contact form submission from Example Site"
        order = [
            "Name: Ana Lima",
            "Email: ana@example.org",
            "Message:",
            f"- Submission ID: {SUBMISSION_ID}",
            "- Timestamp: 2026-01-20T08:00:00+00:00",
            "- IP: 203.0.113.7",
            "- Country: PT",
            "This email was sent from example.com",
        ]
        positions = [lines.index(line) for line in order]
        assert positions == sorted(positions)

    def test_text_body_is_not_escaped(self, settings):
        submission = Submission.create(
            name="Tom & Jerry", email="t@j.com", message="Quote \"this\""
        )
        text = build_message(submission, SUBMISSION_ID, settings).text_body
        assert "Name: Tom & Jerry" in text
        assert 'Quote "this"' in text

    def test_html_body_escapes_fields(self, settings):
        submission = Submission.create(
            name="Tom & Jerry", email="t@j.com", message="Line 1\nIt's \"line 2\""
        )
        html = build_message(submission, SUBMISSION_ID, settings).html_body

        assert html.startswith("<!DOCTYPE html>")
        assert "Tom &amp; Jerry" in html
        assert "Line 1<br>It&#039;s &quot;line 2&quot;" in html
        assert 'href="mailto:t@j.com"' in html
        assert SUBMISSION_ID in html

    def test_footer_falls_back_to_site_name(self, sample_submission, settings):
        settings = replace(settings, site_domain=None)
        text = build_message(sample_submission, SUBMISSION_ID, settings).text_body
        assert text.endswith("This email was sent from Example Site")


class TestGetEmailProvider:
    """Tests for the provider factory."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("resend", ResendProvider),
            ("zeptomail", ZeptoMailProvider),
            ("ZeptoMail", ZeptoMailProvider),
            ("sendgrid", ResendProvider),
            ("", ResendProvider),
        ],
    )
    def test_selects_provider(self, settings, name, expected):
        provider = get_email_provider(replace(settings, email_provider=name))
        assert type(provider) is expected


class TestResendProvider:
    """Tests for ResendProvider."""

    @patch("services.email_service.requests.post")
    def test_request_shape(self, mock_post, settings, message):
        mock_post.return_value = _response(200)

        assert ResendProvider(settings).send(message) is True

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.resend.com/emails"
        assert kwargs["headers"]["Authorization"] == "Bearer re_test_key"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["json"] == {
            "from": "Example Site <noreply@example.com>",
            "to": ["owner@example.com"],
            "subject": "Subject",
            "text": "Text",
            "html": "<p>Html</p>",
        }
        assert kwargs["timeout"] > 0

    @patch("services.email_service.requests.post")
    def test_error_status_returns_false(self, mock_post, settings, message):
        mock_post.return_value = _response(422, '{"message": "invalid from"}')
        assert ResendProvider(settings).send(message) is False


class TestZeptoMailProvider:
    """Tests for ZeptoMailProvider."""

    @patch("services.email_service.requests.post")
    def test_request_shape(self, mock_post, settings, message):
        mock_post.return_value = _response(201)

        assert ZeptoMailProvider(settings).send(message) is True

        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.zeptomail.com/v1.1/email/"
        assert kwargs["headers"]["Authorization"] == "Zoho-enczapikey zepto_test_key"
        assert kwargs["json"] == {
            "from": {"address": "noreply@example.com", "name": "Example Site"},
            "to": [
                {
                    "email_address": {
                        "address": "owner@example.com",
                        "name": "Notification",
                    }
                }
            ],
            "subject": "Subject",
            "textbody": "Text",
            "htmlbody": "<p>Html</p>",
        }

    @patch("services.email_service.requests.post")
    def test_error_status_returns_false(self, mock_post, settings, message):
        mock_post.return_value = _response(500, "boom")
        assert ZeptoMailProvider(settings).send(message) is False


class TestEmailDispatcher:
    """Tests for EmailDispatcher.dispatch."""

    def test_uses_configured_provider(self, settings):
        dispatcher = EmailDispatcher(replace(settings, email_provider="zeptomail"))
        assert isinstance(dispatcher.provider, ZeptoMailProvider)

    def test_success(self, settings, sample_submission):
        provider = MagicMock()
        provider.send.return_value = True
        dispatcher = EmailDispatcher(settings, provider=provider)

        assert dispatcher.dispatch(sample_submission, SUBMISSION_ID) is True
        sent = provider.send.call_args.args[0]
        assert sent.subject == "[Example] New contact from Ana Lima"

    def test_provider_failure(self, settings, sample_submission):
        provider = MagicMock()
        provider.send.return_value = False
        dispatcher = EmailDispatcher(settings, provider=provider)

        assert dispatcher.dispatch(sample_submission, SUBMISSION_ID) is False

    @patch("services.email_service.requests.post")
    def test_transport_error_is_swallowed(self, mock_post, settings, sample_submission):
        mock_post.side_effect = requests.exceptions.ConnectionError("unreachable")
        dispatcher = EmailDispatcher(settings)

        assert dispatcher.dispatch(sample_submission, SUBMISSION_ID) is False
        assert mock_post.call_count == 1

    def test_unexpected_exception_is_swallowed(self, settings, sample_submission):
        provider = MagicMock()
        provider.send.side_effect = ValueError("bad payload")
        dispatcher = EmailDispatcher(settings, provider=provider)

        assert dispatcher.dispatch(sample_submission, SUBMISSION_ID) is False
