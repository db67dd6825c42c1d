"""Contact form submission models."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from utils.sanitize import sanitize

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
MESSAGE_MAX_LENGTH = 5000
USER_AGENT_MAX_LENGTH = 200
UNKNOWN = "unknown"


class Submission(BaseModel):
    """A stored contact form submission. Immutable once written."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., max_length=NAME_MAX_LENGTH)
    email: str = Field(..., max_length=EMAIL_MAX_LENGTH)
    message: str = Field(..., max_length=MESSAGE_MAX_LENGTH)
    timestamp: str = Field(..., description="ISO timestamp when submitted")
    ip: str = Field(default=UNKNOWN, description="Originating client IP")
    country: str = Field(default=UNKNOWN, description="Country code from the edge")
    user_agent: str = Field(
        default=UNKNOWN, alias="userAgent", max_length=USER_AGENT_MAX_LENGTH
    )

    @classmethod
    def create(
        cls,
        name: str,
        email: str,
        message: str,
        ip: str | None = None,
        country: str | None = None,
        user_agent: str | None = None,
    ) -> "Submission":
        """Build a submission from raw form input and request metadata.

        Text fields are sanitized and truncated; missing metadata becomes
        ``"unknown"``.
        """
        return cls(
            name=sanitize(name)[:NAME_MAX_LENGTH],
            email=sanitize(email)[:EMAIL_MAX_LENGTH],
            message=sanitize(message)[:MESSAGE_MAX_LENGTH],
            timestamp=datetime.now(UTC).isoformat(),
            ip=ip or UNKNOWN,
            country=country or UNKNOWN,
            user_agent=(user_agent or UNKNOWN)[:USER_AGENT_MAX_LENGTH],
        )

    def to_record(self) -> dict:
        """Serialize for storage and API output (camelCase keys)."""
        return self.model_dump(by_alias=True)


class StoredSubmission(BaseModel):
    """A submission paired with its id, as returned by listings."""

    id: str
    submission: Submission

    def to_dict(self) -> dict:
        """Flatten to ``{"id": ..., **fields}``."""
        return {"id": self.id, **self.submission.to_record()}


class SubmissionPage(BaseModel):
    """One page of the most recent submissions."""

    items: list[StoredSubmission] = Field(default_factory=list)
    total_count: int = Field(0, description="Length of the index, not of items")
