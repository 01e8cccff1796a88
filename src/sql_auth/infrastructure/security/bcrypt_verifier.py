"""Bcrypt adapter recomputing digests from stored hashes."""

from __future__ import annotations

import re

import bcrypt

from sql_auth.application.ports.password_verifier_port import (
    HashComputationError,
    PasswordVerifierPort,
)

_MODULAR_CRYPT_BCRYPT = re.compile(r"^\$2[abxy]\$\d{2}\$[./A-Za-z0-9]{53}$")


class BcryptPasswordVerifier(PasswordVerifierPort):
    """Recompute bcrypt hashes using the salt and cost of a stored hash."""

    def compute_hash(self, *, password: str, stored_hash: str) -> str:
        if not _MODULAR_CRYPT_BCRYPT.fullmatch(stored_hash):
            raise HashComputationError("stored hash is not in bcrypt modular crypt format")
        try:
            computed = bcrypt.hashpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
        except (TypeError, ValueError) as error:
            raise HashComputationError(f"unusable bcrypt hash: {error}") from error
        return computed.decode("utf-8")
