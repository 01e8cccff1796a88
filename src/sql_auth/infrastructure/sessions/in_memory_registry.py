"""In-process registry of live user sessions."""

from __future__ import annotations

import logging

from sql_auth.application.ports.session_registry_port import (
    NoticeSenderPort,
    SessionRegistryPort,
    UserSession,
)

logger = logging.getLogger(__name__)


class InMemorySessionRegistry(SessionRegistryPort):
    """Sessions keyed by id; disconnecting simply removes the entry."""

    def __init__(self) -> None:
        self._sessions: dict[str, UserSession] = {}

    def connect(self, session: UserSession) -> None:
        self._sessions[session.session_id] = session

    def disconnect(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def get(self, session_id: str) -> UserSession | None:
        return self._sessions.get(session_id)


class LoggingNoticeSender(NoticeSenderPort):
    """Notice sender that writes notices to the process log."""

    async def send_notice(self, *, session: UserSession, text: str) -> None:
        logger.info(
            "notice_sent session_id=%s nick=%s text=%s",
            session.session_id,
            session.nickname,
            text,
        )
