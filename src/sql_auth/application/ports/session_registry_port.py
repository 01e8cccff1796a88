"""Port for resolving live user sessions and notifying them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class UserSession:
    """Live connection of one user to the host."""

    session_id: str
    nickname: str
    ip_address: str


class SessionRegistryPort(Protocol):
    """Lookup of live sessions by identifier."""

    def get(self, session_id: str) -> UserSession | None:
        """Return the session if it is still connected."""


class NoticeSenderPort(Protocol):
    """User-facing notice delivery contract."""

    async def send_notice(self, *, session: UserSession, text: str) -> None:
        """Send one notice line to a live session."""
