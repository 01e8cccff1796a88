"""Terminal outcomes for one external credential verification attempt."""

from __future__ import annotations

from enum import StrEnum


class VerificationOutcome(StrEnum):
    """Outcomes a credential verifier can resolve to."""

    NOT_FOUND = "not_found"
    QUERY_ERROR = "query_error"
    HASH_MALFORMED = "hash_malformed"
    MISMATCH = "mismatch"
    INTERNAL_ERROR = "internal_error"
    SUCCESS = "success"

    @property
    def is_success(self) -> bool:
        return self is VerificationOutcome.SUCCESS
