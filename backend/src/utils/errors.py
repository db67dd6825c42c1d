"""API error types rendered as ``{"error": message}`` responses."""


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class BadRequestError(ApiError):
    """Malformed JSON, missing fields, or invalid values."""

    status_code = 400
    message = "Bad request"


class UnauthorizedError(ApiError):
    """Missing or invalid access key."""

    status_code = 401
    message = "Unauthorized"


class NotFoundError(ApiError):
    """No route matches the request."""

    status_code = 404
    message = "Not found"


class InternalError(ApiError):
    """Unexpected failure. The message is generic; details stay in the logs."""

    status_code = 500
    message = "Internal server error"
