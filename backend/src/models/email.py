"""Notification email models."""

from pydantic import BaseModel


class EmailMessage(BaseModel):
    """A rendered notification ready to hand to a provider."""

    subject: str
    text_body: str
    html_body: str
