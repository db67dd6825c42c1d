"""Data models for the Contact Form API."""

from .email import EmailMessage
from .submission import StoredSubmission, Submission, SubmissionPage

__all__ = [
    "Submission",
    "StoredSubmission",
    "SubmissionPage",
    "EmailMessage",
]
