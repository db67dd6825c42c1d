"""Runtime configuration for the Contact Form API.

Settings are read from the environment on every invocation and handed to the
services explicitly, so tests can build a ``Settings`` directly instead of
patching module globals.
"""

import os
from dataclasses import dataclass, field


def _split_origins(raw: str | None) -> tuple[str, ...]:
    """Parse a comma-separated origin list, dropping blanks."""
    if not raw:
        return ()
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for a single request."""

    allowed_origins: tuple[str, ...] = ()
    email_provider: str = "resend"
    resend_api_key: str | None = field(default=None, repr=False)
    zeptomail_api_key: str | None = field(default=None, repr=False)
    from_name: str = "Contact Form"
    from_email: str | None = None
    notify_email: str | None = None
    submissions_table: str = "contact-form-submissions-dev"
    submissions_api_key: str | None = field(default=None, repr=False)
    site_name: str = "Contact Form"
    site_domain: str | None = None
    email_subject_prefix: str = "[Contact]"
    aws_region: str = "us-west-2"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            allowed_origins=_split_origins(env.get("ALLOWED_ORIGINS")),
            email_provider=(env.get("EMAIL_PROVIDER") or "resend").strip().lower(),
            resend_api_key=env.get("RESEND_API_KEY"),
            zeptomail_api_key=env.get("ZEPTOMAIL_API_KEY"),
            from_name=env.get("FROM_NAME", "Contact Form"),
            from_email=env.get("FROM_EMAIL"),
            notify_email=env.get("NOTIFY_EMAIL"),
            submissions_table=env.get(
                "SUBMISSIONS_TABLE", "contact-form-submissions-dev"
            ),
            submissions_api_key=env.get("SUBMISSIONS_API_KEY") or None,
            site_name=env.get("SITE_NAME", "Contact Form"),
            site_domain=env.get("SITE_DOMAIN"),
            email_subject_prefix=env.get("EMAIL_SUBJECT_PREFIX", "[Contact]"),
            aws_region=env.get("AWS_DEFAULT_REGION", "us-west-2"),
        )


def get_settings() -> Settings:
    """Read settings from the current process environment."""
    return Settings.from_env()
