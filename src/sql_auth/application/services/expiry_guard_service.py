"""Expiry check hook protecting grouped nicknames."""

from __future__ import annotations

import logging

from sql_auth.application.ports.account_repository_port import AccountRepositoryPort
from sql_auth.domain.auth.alias_group import allows_nick_expiry

logger = logging.getLogger(__name__)


class ExpiryGuardService:
    """Answer the host's "may this nickname expire" question."""

    def __init__(self, *, accounts: AccountRepositoryPort) -> None:
        self._accounts = accounts

    async def allow_expiry(self, *, nickname: str) -> bool:
        group = await self._accounts.get_alias_group(nickname=nickname)
        if group is None:
            return True
        allowed = allows_nick_expiry(nickname=nickname, group=group)
        if not allowed:
            logger.info(
                "nick_expiry_suppressed nick=%s aliases=%s",
                nickname,
                len(group.aliases),
            )
        return allowed
