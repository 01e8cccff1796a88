"""Normalization of externally stored password hash encodings."""

from __future__ import annotations

LEGACY_BCRYPT_TAG = "bcrypt$$"
CANONICAL_DELIMITER = "$"


def normalize_stored_hash(raw_hash: str) -> str:
    """Rewrite a legacy `bcrypt$$` tagged hash into modular crypt format.

    Only the known storage prefix is rewritten; version, cost, salt and digest
    are kept untouched. Anything else is returned as-is and left for the
    verification primitive to reject.
    """

    if raw_hash.startswith(LEGACY_BCRYPT_TAG):
        return CANONICAL_DELIMITER + raw_hash[len(LEGACY_BCRYPT_TAG) :]
    return raw_hash
