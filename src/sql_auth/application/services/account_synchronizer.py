"""Local account materialization after successful external authentication."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace

from sql_auth.application.ports.account_repository_port import (
    AccountRecord,
    AccountRepositoryPort,
)
from sql_auth.application.ports.session_registry_port import (
    NoticeSenderPort,
    SessionRegistryPort,
    UserSession,
)

AccountRegisteredHook = Callable[[AccountRecord, UserSession | None], Awaitable[None]]
logger = logging.getLogger(__name__)


class AccountSynchronizer:
    """Ensure a local account exists and carries the external email."""

    def __init__(
        self,
        *,
        accounts: AccountRepositoryPort,
        sessions: SessionRegistryPort,
        notices: NoticeSenderPort,
        on_registered: Sequence[AccountRegisteredHook] = (),
    ) -> None:
        self._accounts = accounts
        self._sessions = sessions
        self._notices = notices
        self._on_registered = tuple(on_registered)

    async def sync(
        self,
        *,
        account_name: str,
        session_id: str | None,
        external_email: str,
    ) -> AccountRecord:
        """Create the account on first login and refresh its email."""

        account = await self._accounts.get_by_nickname(nickname=account_name)
        if account is None:
            registration = await self._accounts.create_account(nickname=account_name)
            account = registration.account
            if registration.created:
                logger.info(
                    "account_registered account_id=%s nick=%s",
                    account.account_id,
                    account.display_nick,
                )
                await self._announce_registration(account=account, session_id=session_id)

        if external_email and external_email != account.email:
            changed = await self._accounts.set_email(
                account_id=account.account_id,
                email=external_email,
            )
            if changed:
                logger.info("account_email_updated account_id=%s", account.account_id)
                await self._notify(session_id=session_id, text=f"E-mail set to {external_email}.")
            account = replace(account, email=external_email)

        return account

    async def _announce_registration(
        self,
        *,
        account: AccountRecord,
        session_id: str | None,
    ) -> None:
        session = self._live_session(session_id)
        for hook in self._on_registered:
            try:
                await hook(account, session)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "account_registered_hook_failed account_id=%s hook=%r",
                    account.account_id,
                    hook,
                )
        await self._notify(
            session_id=session_id,
            text=f"Your account {account.display_nick} has been confirmed.",
        )

    async def _notify(self, *, session_id: str | None, text: str) -> None:
        session = self._live_session(session_id)
        if session is None:
            return
        await self._notices.send_notice(session=session, text=text)

    def _live_session(self, session_id: str | None) -> UserSession | None:
        if session_id is None:
            return None
        return self._sessions.get(session_id)

