"""Port for recomputing a password hash from a stored encoded hash."""

from __future__ import annotations

from typing import Protocol


class HashComputationError(ValueError):
    """Raised when a stored hash cannot be used to recompute a digest."""


class PasswordVerifierPort(Protocol):
    """Adaptive hash recomputation contract."""

    def compute_hash(self, *, password: str, stored_hash: str) -> str:
        """Hash `password` with the scheme, cost and salt embedded in `stored_hash`."""
