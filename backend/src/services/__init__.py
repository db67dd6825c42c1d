"""Services for the Contact Form API backend."""

from .email_service import EmailDispatcher, EmailProvider, get_email_provider
from .submission_store import SubmissionStore

__all__ = [
    "SubmissionStore",
    "EmailDispatcher",
    "EmailProvider",
    "get_email_provider",
]
