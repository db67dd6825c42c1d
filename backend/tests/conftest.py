"""Pytest configuration and shared fixtures."""

from unittest.mock import Mock

import pytest

from models.submission import Submission
from utils.config import Settings


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore for tests. Records the TTL of each put."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.fail_on_put: set[str] = set()

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        if key in self.fail_on_put:
            raise RuntimeError(f"put failed for {key}")
        self.data[key] = value
        self.ttls[key] = ttl_seconds


@pytest.fixture
def kv_store():
    """Create an empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def settings():
    """Create test settings for the Resend provider."""
    return Settings(
        allowed_origins=("https://example.com", "https://www.example.com"),
        email_provider="resend",
        resend_api_key="re_test_key",
        zeptomail_api_key="zepto_test_key",
        from_name="Example Site",
        from_email="noreply@example.com",
        notify_email="owner@example.com",
        submissions_table="contact-form-submissions-test",
        site_name="Example Site",
        site_domain="example.com",
        email_subject_prefix="[Example]",
    )


@pytest.fixture
def sample_submission():
    """Create a sample submission for testing."""
    return Submission(
        name="Ana Lima",
        email="ana@example.org",
        message="Hello there,\nI'd like a quote.",
        timestamp="2026-01-20T08:00:00+00:00",
        ip="203.0.113.7",
        country="PT",
        userAgent="Mozilla/5.0",
    )


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table for testing."""
    mock_table = Mock()
    mock_table.put_item.return_value = {}
    mock_table.get_item.return_value = {}
    return mock_table
