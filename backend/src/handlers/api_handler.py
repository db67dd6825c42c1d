"""Main FastAPI application handler for Lambda deployment."""

import hmac
import logging
import re
import time
from datetime import UTC, datetime
from typing import Any

import boto3
from fastapi import Depends, FastAPI, Query, Request, Response, status
from fastapi.responses import JSONResponse
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException

from models.submission import Submission
from services.email_service import EmailDispatcher
from services.submission_store import MAX_PAGE_SIZE, SubmissionStore
from utils.config import Settings, get_settings
from utils.errors import (
    ApiError,
    BadRequestError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from utils.kv_store import DynamoDBKeyValueStore
from utils.sanitize import is_valid_email

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Initialize FastAPI app. Docs routes are disabled so every unknown path is a
# plain 404.
app = FastAPI(
    title="Contact Form API",
    description="Accepts contact form submissions and notifies by email",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

CORS_ALLOW_METHODS = "GET, POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"
DEFAULT_PAGE_SIZE = 50
MIN_ACCESS_KEY_LENGTH = 16
LEADING_INT_PATTERN = re.compile(r"\s*([+-]?\d+)")

REQUIRED_FIELDS_ERROR = "Missing required fields: name, email, message"


def cors_headers(request: Request, settings: Settings) -> dict[str, str]:
    """CORS headers for this request.

    The request origin is echoed back only if it is allow-listed; otherwise
    the first allowed origin is used, or ``*`` if none are configured.
    """
    origin = request.headers.get("origin", "")
    allowed = settings.allowed_origins
    if origin and origin in allowed:
        allow_origin = origin
    elif allowed:
        allow_origin = allowed[0]
    else:
        allow_origin = "*"

    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


@app.middleware("http")
async def log_requests(request, call_next):
    """Log all API requests with timing for CloudWatch monitoring."""
    start = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000

    path = request.url.path
    if duration_ms > 1000:
        logger.warning(
            "[SLOW] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 500:
        logger.error(
            "[ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )
    elif response.status_code >= 400:
        logger.info(
            "[CLIENT_ERROR] %s %s %.0fms status=%d",
            request.method,
            path,
            duration_ms,
            response.status_code,
        )

    return response


@app.middleware("http")
async def add_cors_headers(request, call_next):
    """Answer preflight requests and attach CORS headers to every response."""
    headers = cors_headers(request, get_settings())

    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)

    response = await call_next(request)
    for name, value in headers.items():
        response.headers[name] = value
    return response


# Lazy-initialized AWS resources, re-created after a SnapStart restore
_dynamodb = None


def reset_services():
    """Reset lazy-initialized AWS resources. Useful for testing."""
    global _dynamodb
    _dynamodb = None
    boto3.DEFAULT_SESSION = None


def get_dynamodb(region: str):
    """Get or create DynamoDB resource (lazy init for SnapStart)."""
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource("dynamodb", region_name=region)
    return _dynamodb


def get_submission_store(settings: Settings) -> SubmissionStore:
    """Build the submission store for the configured table."""
    table = get_dynamodb(settings.aws_region).Table(settings.submissions_table)
    return SubmissionStore(DynamoDBKeyValueStore(table))


def get_email_dispatcher(settings: Settings) -> EmailDispatcher:
    """Build the email dispatcher for the configured provider."""
    return EmailDispatcher(settings)


# MARK: - Request helpers


def get_client_ip(request: Request) -> str | None:
    """Originating client IP from edge or proxy headers."""
    ip = request.headers.get("cf-connecting-ip")
    if ip:
        return ip
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # First hop is the client
        return forwarded.split(",")[0].strip() or None
    return None


def get_client_country(request: Request) -> str | None:
    """Viewer country as reported by Cloudflare or CloudFront."""
    return request.headers.get("cf-ipcountry") or request.headers.get(
        "cloudfront-viewer-country"
    )


def parse_contact_payload(body: Any) -> tuple[Any, Any, Any]:
    """Pull name, email and message out of a decoded JSON body.

    Raises:
        BadRequestError: If a field is missing or the email is malformed
    """
    if not isinstance(body, dict):
        raise BadRequestError(REQUIRED_FIELDS_ERROR)

    name = body.get("name")
    email = body.get("email")
    message = body.get("message")
    if not name or not email or not message:
        raise BadRequestError(REQUIRED_FIELDS_ERROR)

    if not is_valid_email(email):
        raise BadRequestError("Invalid email format")

    return name, email, message


def parse_limit(raw: str | None) -> int:
    """Page size from the ``limit`` query parameter, capped at 100.

    Only the leading integer is read, so ``5.5`` is 5 and ``10abc`` is 10.
    Values with no leading integer fall back to the default.
    """
    match = LEADING_INT_PATTERN.match(raw or "")
    if not match:
        return DEFAULT_PAGE_SIZE
    return max(0, min(int(match.group(1)), MAX_PAGE_SIZE))


def require_access_key(key: str | None, settings: Settings) -> None:
    """Check the ``key`` query parameter.

    Any key of 16+ characters is accepted unless SUBMISSIONS_API_KEY is set,
    in which case it must match exactly.

    Raises:
        UnauthorizedError: If the key is missing, too short or wrong
    """
    if not key or len(key) < MIN_ACCESS_KEY_LENGTH:
        raise UnauthorizedError()

    expected = settings.submissions_api_key
    if expected and not hmac.compare_digest(key.encode(), expected.encode()):
        raise UnauthorizedError()


# MARK: - Health Check


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


# MARK: - Contact Endpoints


@app.post("/contact")
async def submit_contact_form(
    request: Request,
    settings: Settings = Depends(get_settings),  # noqa: B008
):
    """Store a contact form submission and send a notification email.

    The email is best-effort: a failed send still returns 200 with
    ``emailSent: false``.
    """
    try:
        body = await request.json()
    except Exception as e:
        logger.info(f"Invalid JSON in contact submission: {e}")
        raise BadRequestError("Invalid JSON in request body")

    name, email, message = parse_contact_payload(body)

    try:
        submission = Submission.create(
            name=name,
            email=email,
            message=message,
            ip=get_client_ip(request),
            country=get_client_country(request),
            user_agent=request.headers.get("user-agent"),
        )
        submission_id = get_submission_store(settings).record_submission(submission)
        email_sent = get_email_dispatcher(settings).dispatch(submission, submission_id)
    except Exception:
        logger.exception("Contact form error")
        raise InternalError()

    return {
        "success": True,
        "message": "Contact form submitted successfully",
        "id": submission_id,
        "emailSent": email_sent,
    }


@app.get("/submissions")
async def list_submissions(
    key: str | None = Query(None),
    limit: str | None = Query(None),
    settings: Settings = Depends(get_settings),  # noqa: B008
):
    """List the most recent submissions (newest first)."""
    require_access_key(key, settings)
    page_size = parse_limit(limit)

    try:
        page = get_submission_store(settings).list_submissions(page_size)
    except Exception:
        logger.exception("Get submissions error")
        raise InternalError()

    submissions = [item.to_dict() for item in page.items]
    return {
        "count": len(submissions),
        "total": page.total_count,
        "submissions": submissions,
    }


# MARK: - Error Handlers


@app.exception_handler(ApiError)
async def api_error_handler(request, exc: ApiError):
    """Render API errors as ``{"error": message}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Unknown paths and unsupported methods are both plain 404s."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        error = NotFoundError()
        return JSONResponse(status_code=error.status_code, content={"error": error.message})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request, exc: Exception):
    """Last-resort 500. Runs outside the CORS middleware, so headers are set here."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}", exc_info=exc
    )
    error = InternalError()
    return JSONResponse(
        status_code=error.status_code,
        content={"error": error.message},
        headers=cors_headers(request, get_settings()),
    )


# MARK: - Lambda Handler

# Create the Lambda handler
api_handler = Mangum(app, lifespan="off")


# For local development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
