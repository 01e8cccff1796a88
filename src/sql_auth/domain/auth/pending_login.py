"""Host-side pending login attempt with owner hold tracking."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from enum import StrEnum

logger = logging.getLogger(__name__)


class LoginOutcome(StrEnum):
    """Lifecycle states of one pending login."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class LoginHoldError(RuntimeError):
    """Raised when an owner releases a hold it does not have."""

    def __init__(self, *, account: str, owner: object) -> None:
        super().__init__(f"login for {account!r} is not held by {owner!r}")
        self.account = account
        self.owner = owner


class PendingLogin:
    """One in-flight login attempt awaiting external verification.

    Owners hold the attempt while they work on it. When the last hold is
    released the attempt finalizes: it succeeds if any owner reported success
    and fails otherwise. The plaintext password is dropped on finalization.
    """

    def __init__(self, *, account: str, password: str) -> None:
        self._account = account
        self._password: str | None = password
        self._holds: Counter[int] = Counter()
        self._succeeded_by: set[int] = set()
        self._outcome = LoginOutcome.PENDING
        self._finished = asyncio.Event()

    @property
    def account(self) -> str:
        return self._account

    @property
    def password(self) -> str:
        return self._password or ""

    @property
    def outcome(self) -> LoginOutcome:
        return self._outcome

    @property
    def is_held(self) -> bool:
        return sum(self._holds.values()) > 0

    def hold(self, owner: object) -> None:
        """Keep the attempt open on behalf of `owner`."""

        if self._outcome is not LoginOutcome.PENDING:
            raise RuntimeError(f"login for {self._account!r} already finalized")
        self._holds[id(owner)] += 1

    def success(self, owner: object) -> None:
        """Record that `owner` accepted the supplied credentials."""

        if self._holds[id(owner)] <= 0:
            raise LoginHoldError(account=self._account, owner=owner)
        self._succeeded_by.add(id(owner))

    def release(self, owner: object) -> None:
        """Drop one hold of `owner`, finalizing once no holds remain."""

        key = id(owner)
        if self._holds[key] <= 0:
            raise LoginHoldError(account=self._account, owner=owner)
        self._holds[key] -= 1
        if self._holds[key] == 0:
            del self._holds[key]
        if not self.is_held:
            self._finalize()

    async def wait(self) -> LoginOutcome:
        """Block until the attempt finalizes and return its outcome."""

        await self._finished.wait()
        return self._outcome

    def _finalize(self) -> None:
        self._outcome = LoginOutcome.SUCCESS if self._succeeded_by else LoginOutcome.FAILURE
        self._password = None
        self._finished.set()
        logger.info("pending_login_finalized account=%s outcome=%s", self._account, self._outcome)
