"""SQLAlchemy adapter for local account persistence."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, cast
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sql_auth.application.ports.account_repository_port import (
    AccountRecord,
    AccountRegistration,
    AccountRepositoryPort,
)
from sql_auth.domain.auth.alias_group import AliasGroup
from sql_auth.infrastructure.db.metadata import accounts, nick_aliases

logger = logging.getLogger(__name__)


class NicknameTakenError(ValueError):
    """Raised when a nickname is already bound to an account."""

    def __init__(self, *, nickname: str) -> None:
        super().__init__(f"nickname already registered: {nickname}")
        self.nickname = nickname


class SqlAlchemyAccountRepository(AccountRepositoryPort):
    """Account repository backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_nickname(self, *, nickname: str) -> AccountRecord | None:
        """Return the account any alias named `nickname` belongs to."""

        statement = (
            sa.select(
                accounts.c.id,
                accounts.c.display_nick,
                accounts.c.email,
                accounts.c.created_at,
                accounts.c.updated_at,
            )
            .select_from(accounts.join(nick_aliases, nick_aliases.c.account_id == accounts.c.id))
            .where(_nick_matches(nickname))
            .limit(1)
        )

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_account_record(row)

    async def create_account(self, *, nickname: str) -> AccountRegistration:
        """Create account core and primary alias, or return the existing one."""

        account_id = uuid4()
        async with self._session_factory() as session:
            try:
                await session.execute(
                    sa.insert(accounts).values(id=account_id, display_nick=nickname, email="")
                )
                await session.execute(
                    sa.insert(nick_aliases).values(nick=nickname, account_id=account_id)
                )
                await session.commit()
            except IntegrityError:
                await session.rollback()
                existing = await self.get_by_nickname(nickname=nickname)
                if existing is None:
                    raise
                logger.info(
                    "account_create_duplicate_ignored nick=%s account_id=%s",
                    nickname,
                    existing.account_id,
                )
                return AccountRegistration(account=existing, created=False)

        created = await self.get_by_nickname(nickname=nickname)
        if created is None:  # pragma: no cover - row committed above.
            raise LookupError(f"account vanished after insert: {nickname}")
        return AccountRegistration(account=created, created=True)

    async def set_email(self, *, account_id: UUID, email: str) -> bool:
        """Store `email` when it differs from the current value."""

        statement = (
            sa.update(accounts)
            .where(accounts.c.id == account_id, accounts.c.email != email)
            .values(email=email, updated_at=sa.func.current_timestamp())
        )

        async with self._session_factory() as session:
            result = cast(CursorResult[Any], await session.execute(statement))
            await session.commit()

        return int(result.rowcount or 0) == 1

    async def add_alias(self, *, account_id: UUID, nickname: str) -> None:
        """Group one more nickname under an existing account."""

        async with self._session_factory() as session:
            try:
                await session.execute(
                    sa.insert(nick_aliases).values(nick=nickname, account_id=account_id)
                )
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                raise NicknameTakenError(nickname=nickname) from error

    async def get_alias_group(self, *, nickname: str) -> AliasGroup | None:
        """Return the alias group containing `nickname`."""

        account = await self.get_by_nickname(nickname=nickname)
        if account is None:
            return None

        statement = (
            sa.select(nick_aliases.c.nick)
            .where(nick_aliases.c.account_id == account.account_id)
            .order_by(nick_aliases.c.created_at, nick_aliases.c.nick)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)

        return AliasGroup(
            account_id=account.account_id,
            display_nick=account.display_nick,
            aliases=tuple(cast(str, nick) for nick in result.scalars().all()),
        )


def _nick_matches(nickname: str) -> sa.ColumnElement[bool]:
    return sa.func.lower(nick_aliases.c.nick) == nickname.lower()


def _to_account_record(row: sa.RowMapping) -> AccountRecord:
    raw_account_id = row["id"]
    account_id = raw_account_id if isinstance(raw_account_id, UUID) else UUID(str(raw_account_id))
    return AccountRecord(
        account_id=account_id,
        display_nick=cast(str, row["display_nick"]),
        email=cast(str, row["email"] or ""),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )
