"""Utility functions for the Contact Form API."""

from .config import Settings, get_settings
from .kv_store import DynamoDBKeyValueStore, KeyValueStore
from .sanitize import escape_html, is_valid_email, sanitize

__all__ = [
    "Settings",
    "get_settings",
    "KeyValueStore",
    "DynamoDBKeyValueStore",
    "sanitize",
    "escape_html",
    "is_valid_email",
]
