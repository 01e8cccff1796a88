"""Nickname alias groups and the expiry rule protecting them."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AliasGroup:
    """All nicknames grouped under one account core."""

    account_id: UUID
    display_nick: str
    aliases: tuple[str, ...]


def allows_nick_expiry(*, nickname: str, group: AliasGroup) -> bool:
    """Return whether `nickname` may expire without orphaning its group.

    The display nick of a group that still has other aliases must stay, or the
    remaining aliases would point at an account nobody can authenticate to.
    Nicknames compare without case, matching how aliases are looked up.
    """

    is_display_nick = nickname.lower() == group.display_nick.lower()
    return not (is_display_nick and len(group.aliases) > 1)
