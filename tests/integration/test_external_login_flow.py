from __future__ import annotations

from pathlib import Path

import bcrypt
import pytest
import sqlalchemy as sa
from alembic.config import Config

from alembic import command
from apps.sql_auth_check.main import build_sql_auth_runtime, check_credentials
from sql_auth.application.ports.session_registry_port import UserSession
from sql_auth.config.settings import Settings
from sql_auth.domain.auth.pending_login import LoginOutcome, PendingLogin
from sql_auth.infrastructure.db.account_repository import SqlAlchemyAccountRepository
from sql_auth.infrastructure.db.external_query_executor import SqlAlchemyQueryExecutor
from sql_auth.infrastructure.db.session import create_external_engine, create_session_factory


class RecordingNotices:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send_notice(self, *, session: UserSession, text: str) -> None:
        self.sent.append((session.session_id, text))


def _local_database(tmp_path: Path) -> str:
    db_path = tmp_path / "local.db"
    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", f"sqlite+pysqlite:///{db_path}")
    command.upgrade(alembic_config, "head")
    return f"sqlite+aiosqlite:///{db_path}"


def _external_database(tmp_path: Path, rows: list[dict[str, str | None]]) -> str:
    db_path = tmp_path / "external.db"
    engine = sa.create_engine(f"sqlite+pysqlite:///{db_path}")
    with engine.begin() as connection:
        connection.execute(
            sa.text("CREATE TABLE users (name TEXT PRIMARY KEY, password TEXT, email TEXT)")
        )
        for row in rows:
            connection.execute(
                sa.text(
                    "INSERT INTO users (name, password, email) "
                    "VALUES (:name, :password, :email)"
                ),
                row,
            )
    return f"sqlite+aiosqlite:///{db_path}"


def _legacy_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=4, prefix=b"2a")
    return "bcrypt$" + bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _settings(local_url: str, external_url: str | None, query: str | None = None) -> Settings:
    values: dict[str, str] = {"DATABASE_URL": local_url}
    if external_url is not None:
        values["SQL_AUTH_DATABASE_URL"] = external_url
    if query is not None:
        values["SQL_AUTH_QUERY"] = query
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


def _runtime(settings: Settings, notices: RecordingNotices | None = None):
    executor = None
    if settings.sql_auth_database_url is not None:
        executor = SqlAlchemyQueryExecutor(create_external_engine(settings.sql_auth_database_url))
    return build_sql_auth_runtime(
        settings=settings,
        session_factory=create_session_factory(settings.database_url),
        query_executor=executor,
        notices=notices,
    )


@pytest.mark.asyncio
async def test_first_successful_login_materializes_local_account(tmp_path: Path) -> None:
    local_url = _local_database(tmp_path)
    external_url = _external_database(
        tmp_path,
        [{"name": "alice", "password": _legacy_hash("wonderland"), "email": "alice@example.org"}],
    )
    notices = RecordingNotices()
    runtime = _runtime(_settings(local_url, external_url), notices)
    runtime.sessions.connect(UserSession(session_id="s-1", nickname="alice", ip_address="::1"))

    login = PendingLogin(account="alice", password="wonderland")
    runtime.gateway.authenticate(session_id="s-1", pending_login=login)
    assert runtime.query_executor is not None
    await runtime.query_executor.drain()

    assert await login.wait() is LoginOutcome.SUCCESS
    account = await SqlAlchemyAccountRepository(
        create_session_factory(local_url)
    ).get_by_nickname(nickname="alice")
    assert account is not None
    assert account.email == "alice@example.org"
    assert notices.sent == [
        ("s-1", "Your account alice has been confirmed."),
        ("s-1", "E-mail set to alice@example.org."),
    ]


@pytest.mark.asyncio
async def test_wrong_password_fails_without_local_account(tmp_path: Path) -> None:
    local_url = _local_database(tmp_path)
    external_url = _external_database(
        tmp_path,
        [{"name": "alice", "password": _legacy_hash("wonderland"), "email": None}],
    )
    runtime = _runtime(_settings(local_url, external_url))

    outcome = await check_credentials(runtime=runtime, account="alice", password="looking-glass")

    assert outcome is LoginOutcome.FAILURE
    accounts = SqlAlchemyAccountRepository(create_session_factory(local_url))
    assert await accounts.get_by_nickname(nickname="alice") is None


@pytest.mark.asyncio
async def test_unknown_account_fails(tmp_path: Path) -> None:
    local_url = _local_database(tmp_path)
    external_url = _external_database(tmp_path, [])
    runtime = _runtime(_settings(local_url, external_url))

    outcome = await check_credentials(runtime=runtime, account="bob", password="pw")

    assert outcome is LoginOutcome.FAILURE


@pytest.mark.asyncio
async def test_broken_query_is_reported_as_failure(tmp_path: Path) -> None:
    local_url = _local_database(tmp_path)
    external_url = _external_database(tmp_path, [])
    runtime = _runtime(
        _settings(local_url, external_url, query="SELECT password FROM missing_table WHERE n = :a")
    )

    outcome = await check_credentials(runtime=runtime, account="alice", password="pw")

    assert outcome is LoginOutcome.FAILURE


@pytest.mark.asyncio
async def test_unconfigured_store_leaves_login_pending(tmp_path: Path) -> None:
    local_url = _local_database(tmp_path)
    runtime = _runtime(_settings(local_url, None))

    outcome = await check_credentials(runtime=runtime, account="alice", password="pw")

    assert runtime.query_executor is None
    assert outcome is LoginOutcome.PENDING
