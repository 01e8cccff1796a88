"""Blocking of account-management commands while external auth is active."""

from __future__ import annotations

from dataclasses import dataclass

REGISTRATION_COMMANDS = frozenset({"nickserv/register", "nickserv/group"})
EMAIL_COMMANDS = frozenset({"nickserv/set/email"})


@dataclass(frozen=True)
class GateDecision:
    """Whether a command may run, and the reply sent when it may not."""

    proceed: bool
    reply: str | None = None


class CommandGate:
    """Stop commands that would diverge local accounts from the external store."""

    def __init__(self, *, disable_reason: str = "", disable_email_reason: str = "") -> None:
        self._disable_reason = disable_reason
        self._disable_email_reason = disable_email_reason

    def check(self, command_name: str) -> GateDecision:
        """Return the decision for one command about to execute."""

        if self._disable_reason and command_name in REGISTRATION_COMMANDS:
            return GateDecision(proceed=False, reply=self._disable_reason)
        if self._disable_email_reason and command_name in EMAIL_COMMANDS:
            return GateDecision(proceed=False, reply=self._disable_email_reason)
        return GateDecision(proceed=True)
