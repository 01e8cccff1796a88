"""Port for the host-owned pending login object."""

from __future__ import annotations

from typing import Protocol


class PendingLoginPort(Protocol):
    """Hold/release/success contract exposed by the host per login attempt."""

    @property
    def account(self) -> str:
        """Account name supplied for this attempt."""

    @property
    def password(self) -> str:
        """Plaintext password supplied for this attempt."""

    def hold(self, owner: object) -> None:
        """Keep the attempt open on behalf of `owner`."""

    def release(self, owner: object) -> None:
        """Drop one hold of `owner`."""

    def success(self, owner: object) -> None:
        """Mark the attempt successful on behalf of `owner`."""
