"""Port for local account persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from sql_auth.domain.auth.alias_group import AliasGroup


@dataclass(frozen=True)
class AccountRecord:
    """Local account core persistence model."""

    account_id: UUID
    display_nick: str
    email: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AccountRegistration:
    """Result of an idempotent account creation."""

    account: AccountRecord
    created: bool


class AccountRepositoryPort(Protocol):
    """Account repository contract."""

    async def get_by_nickname(self, *, nickname: str) -> AccountRecord | None:
        """Return the account any alias named `nickname` belongs to."""

    async def create_account(self, *, nickname: str) -> AccountRegistration:
        """Create account core and primary alias, or return the existing one."""

    async def set_email(self, *, account_id: UUID, email: str) -> bool:
        """Store `email` when it differs from the current value."""

    async def add_alias(self, *, account_id: UUID, nickname: str) -> None:
        """Group one more nickname under an existing account."""

    async def get_alias_group(self, *, nickname: str) -> AliasGroup | None:
        """Return the alias group containing `nickname`."""
