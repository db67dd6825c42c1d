#!/usr/bin/env python3
"""
API Health Check Script - Verifies a deployed Contact Form API stage.
Checks the health endpoint plus the validation and auth error paths, without
storing a real submission.

Usage: python3 scripts/check_api_health.py --url https://example.execute-api.us-west-2.amazonaws.com/prod
       CONTACT_API_URL=... python3 scripts/check_api_health.py
       CONTACT_API_PROD_URL=... python3 scripts/check_api_health.py --env prod
"""

import argparse
import json
import os
import sys
import urllib.error
import urllib.request
from typing import Any

USER_AGENT = "ContactFormAPI-HealthCheck/1.0"

# Stage name -> environment variable holding that stage's base URL
STAGE_URL_ENV_VARS = {
    "staging": "CONTACT_API_STAGING_URL",
    "prod": "CONTACT_API_PROD_URL",
}


def request_json(
    url: str, payload: dict[str, Any] | None = None, timeout: int = 10
) -> tuple[int, dict[str, Any]]:
    """Send a GET (or a JSON POST when payload is given) and decode the reply.

    HTTP error statuses are returned rather than raised.
    """
    data = None
    headers = {"User-Agent": USER_AGENT}
    if payload is not None:
        data = json.dumps(payload).encode()
        headers["Content-Type"] = "application/json"

    req = urllib.request.Request(url, data=data, headers=headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return response.status, json.loads(response.read().decode())
    except urllib.error.HTTPError as e:
        return e.code, json.loads(e.read().decode() or "{}")


def check_health(base_url: str) -> tuple[bool, str]:
    """Check /health reports ok with a timestamp."""
    try:
        code, data = request_json(f"{base_url}/health")
    except urllib.error.URLError as e:
        return False, f"Request failed: {e}"
    except json.JSONDecodeError as e:
        return False, f"Invalid JSON: {e}"

    if code != 200:
        return False, f"ERROR: status {code}"
    if data.get("status") != "ok":
        return False, f"ERROR: status field is {data.get('status')!r}"
    if "timestamp" not in data:
        return False, "ERROR: Missing 'timestamp' key"
    return True, f"OK ({data['timestamp']})"


def check_contact_validation(base_url: str) -> tuple[bool, str]:
    """Check /contact rejects a malformed email without storing anything."""
    payload = {"name": "Health Check", "email": "not-an-email", "message": "ping"}
    try:
        code, data = request_json(f"{base_url}/contact", payload=payload)
    except Exception as e:
        return False, f"FAILED: {e}"

    if code != 400:
        return False, f"ERROR: expected 400, got {code}"
    if data.get("error") != "Invalid email format":
        return False, f"ERROR: unexpected error body {data}"
    return True, "OK - invalid email rejected"


def check_submissions_auth(base_url: str) -> tuple[bool, str]:
    """Check /submissions refuses a short key."""
    try:
        code, data = request_json(f"{base_url}/submissions?key=short")
    except Exception as e:
        return False, f"FAILED: {e}"

    if code != 401:
        return False, f"ERROR: expected 401, got {code}"
    return True, "OK - short key rejected"


CHECKS = [
    ("Health", check_health),
    ("Contact validation", check_contact_validation),
    ("Submissions auth", check_submissions_auth),
]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check a deployed Contact Form API")
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--url",
        help="Base URL of the API stage (default: $CONTACT_API_URL)",
    )
    target.add_argument(
        "--env",
        choices=sorted(STAGE_URL_ENV_VARS),
        help="Named stage whose URL is read from $CONTACT_API_STAGING_URL "
        "or $CONTACT_API_PROD_URL",
    )
    args = parser.parse_args(argv)

    if args.env:
        env_var = STAGE_URL_ENV_VARS[args.env]
        url = os.environ.get(env_var)
        if not url:
            parser.error(f"{env_var} is not set for --env {args.env}")
    else:
        url = args.url or os.environ.get("CONTACT_API_URL")
        if not url:
            parser.error("--url, --env or CONTACT_API_URL is required")
    base_url = url.rstrip("/")

    print("=" * 60)
    print("Contact Form API Health Check")
    print("=" * 60)
    print(f"\n{base_url}")
    print("-" * 40)

    all_passed = True
    for label, check in CHECKS:
        ok, msg = check(base_url)
        status = "✓" if ok else "✗"
        print(f"  {status} {label}: {msg}")
        all_passed = all_passed and ok

    print("\n" + "=" * 60)
    if all_passed:
        print("✓ All checks passed")
        return 0
    else:
        print("✗ Some checks failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
