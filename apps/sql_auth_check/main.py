"""sql-auth-check entrypoint and runtime wiring."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sql_auth.application.ports.session_registry_port import NoticeSenderPort
from sql_auth.application.services.account_synchronizer import (
    AccountRegisteredHook,
    AccountSynchronizer,
)
from sql_auth.application.services.authentication_gateway import AuthenticationGateway
from sql_auth.application.services.command_gate import CommandGate
from sql_auth.application.services.expiry_guard_service import ExpiryGuardService
from sql_auth.config.settings import Settings, load_settings
from sql_auth.domain.auth.pending_login import LoginOutcome, PendingLogin
from sql_auth.infrastructure.db.account_repository import SqlAlchemyAccountRepository
from sql_auth.infrastructure.db.external_query_executor import SqlAlchemyQueryExecutor
from sql_auth.infrastructure.db.session import create_external_engine, create_session_factory
from sql_auth.infrastructure.logging import configure_logging
from sql_auth.infrastructure.security.bcrypt_verifier import BcryptPasswordVerifier
from sql_auth.infrastructure.sessions.in_memory_registry import (
    InMemorySessionRegistry,
    LoggingNoticeSender,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SqlAuthRuntime:
    """Composed services the host wires into its login and command hooks."""

    gateway: AuthenticationGateway
    query_executor: SqlAlchemyQueryExecutor | None
    command_gate: CommandGate
    expiry_guard: ExpiryGuardService
    sessions: InMemorySessionRegistry


def build_query_executor(settings: Settings) -> SqlAlchemyQueryExecutor | None:
    """Return the external lookup executor, or None when no store is configured."""

    if settings.sql_auth_database_url is None:
        return None
    return SqlAlchemyQueryExecutor(create_external_engine(settings.sql_auth_database_url))


def build_command_gate(settings: Settings) -> CommandGate:
    """Build the command gate from the configured policy strings."""

    return CommandGate(
        disable_reason=settings.sql_auth_disable_reason,
        disable_email_reason=settings.sql_auth_disable_email_reason,
    )


def build_sql_auth_runtime(
    *,
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    query_executor: SqlAlchemyQueryExecutor | None = None,
    notices: NoticeSenderPort | None = None,
    on_registered: Sequence[AccountRegisteredHook] = (),
) -> SqlAuthRuntime:
    """Build gateway, gate and expiry guard over shared repositories."""

    accounts = SqlAlchemyAccountRepository(session_factory)
    sessions = InMemorySessionRegistry()
    executor = query_executor if query_executor is not None else build_query_executor(settings)
    synchronizer = AccountSynchronizer(
        accounts=accounts,
        sessions=sessions,
        notices=notices or LoggingNoticeSender(),
        on_registered=on_registered,
    )
    gateway = AuthenticationGateway(
        query_template=settings.sql_auth_query,
        query_executor=executor,
        sessions=sessions,
        password_verifier=BcryptPasswordVerifier(),
        account_synchronizer=synchronizer,
    )
    return SqlAuthRuntime(
        gateway=gateway,
        query_executor=executor,
        command_gate=build_command_gate(settings),
        expiry_guard=ExpiryGuardService(accounts=accounts),
        sessions=sessions,
    )


async def check_credentials(
    *,
    runtime: SqlAuthRuntime,
    account: str,
    password: str,
) -> LoginOutcome:
    """Run one login attempt without a session and wait for its outcome."""

    pending_login = PendingLogin(account=account, password=password)
    runtime.gateway.authenticate(session_id=None, pending_login=pending_login)
    if runtime.query_executor is None:
        return pending_login.outcome
    await runtime.query_executor.drain()
    return await pending_login.wait()


async def _run_check(account: str, password: str) -> int:
    settings = load_settings()
    configure_logging(level=settings.log_level)
    runtime = build_sql_auth_runtime(
        settings=settings,
        session_factory=create_session_factory(settings.database_url),
    )
    outcome = await check_credentials(runtime=runtime, account=account, password=password)
    logger.info("sql_auth_check_finished account=%s outcome=%s", account, outcome)
    print(outcome.value)
    return 0 if outcome is LoginOutcome.SUCCESS else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Check one account's credentials against the external store."""

    parser = argparse.ArgumentParser(prog="sql-auth-check", description=main.__doc__)
    parser.add_argument("account")
    args = parser.parse_args(argv)
    password = getpass.getpass(f"Password for {args.account}: ")
    return asyncio.run(_run_check(args.account, password))


if __name__ == "__main__":
    raise SystemExit(main())
