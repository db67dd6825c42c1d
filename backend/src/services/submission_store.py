"""Submission persistence over a key-value store."""

import json
import logging
import random
import string
import time

from models.submission import StoredSubmission, Submission, SubmissionPage
from utils.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

SUBMISSION_KEY_PREFIX = "submission:"
INDEX_KEY = "submissions:list"
SUBMISSION_TTL_SECONDS = 60 * 60 * 24 * 90  # 90 days
MAX_INDEX_LENGTH = 1000
MAX_PAGE_SIZE = 100

_ID_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 7


def generate_submission_id(now_ms: int | None = None) -> str:
    """Return ``<epoch millis>-<7 base36 chars>``.

    Unique enough for a low-volume form; not a cryptographic identifier.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(random.choices(_ID_SUFFIX_ALPHABET, k=_ID_SUFFIX_LENGTH))
    return f"{now_ms}-{suffix}"


def submission_key(submission_id: str) -> str:
    return f"{SUBMISSION_KEY_PREFIX}{submission_id}"


class SubmissionStore:
    """Append-only submission records plus a capped, most-recent-first index.

    The index is read, modified and written back without isolation, so two
    concurrent submissions can drop one index entry. The records themselves
    are never lost.
    """

    def __init__(self, kv: KeyValueStore, id_factory=generate_submission_id):
        self.kv = kv
        self.id_factory = id_factory

    def record_submission(self, submission: Submission) -> str:
        """Persist a submission and prepend its id to the index.

        Returns:
            The generated submission id

        Raises:
            Exception: If the submission record itself cannot be written
        """
        submission_id = self.id_factory()

        self.kv.put(
            submission_key(submission_id),
            json.dumps(submission.to_record()),
            ttl_seconds=SUBMISSION_TTL_SECONDS,
        )

        # The record is already durable; a failed index write only hides it
        # from listings.
        try:
            self._prepend_to_index(submission_id)
        except Exception:
            logger.warning(
                "Failed to add submission %s to index", submission_id, exc_info=True
            )

        return submission_id

    def get_submission(self, submission_id: str) -> Submission | None:
        """Look up a single submission by id. Expired records read as None."""
        raw = self.kv.get(submission_key(submission_id))
        if raw is None:
            return None
        return Submission(**json.loads(raw))

    def list_submissions(self, limit: int) -> SubmissionPage:
        """Return up to ``min(limit, 100)`` of the most recent submissions.

        Ids whose records are missing or expired are skipped silently, so a
        page can hold fewer items than requested. ``total_count`` is the
        length of the index.
        """
        submission_ids = self._read_index()
        page_size = max(0, min(limit, MAX_PAGE_SIZE))

        items = []
        for submission_id in submission_ids[:page_size]:
            submission = self.get_submission(submission_id)
            if submission is not None:
                items.append(StoredSubmission(id=submission_id, submission=submission))

        return SubmissionPage(items=items, total_count=len(submission_ids))

    def _read_index(self) -> list[str]:
        raw = self.kv.get(INDEX_KEY)
        if not raw:
            return []
        return json.loads(raw)

    def _prepend_to_index(self, submission_id: str) -> None:
        submission_ids = self._read_index()
        submission_ids.insert(0, submission_id)
        del submission_ids[MAX_INDEX_LENGTH:]
        self.kv.put(INDEX_KEY, json.dumps(submission_ids))
