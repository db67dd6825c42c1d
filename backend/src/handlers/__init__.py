"""Lambda handlers for the Contact Form API."""

from .api_handler import api_handler

__all__ = ["api_handler"]
