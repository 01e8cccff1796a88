"""Entry point the host calls for every login attempt."""

from __future__ import annotations

import logging

from sql_auth.application.ports.password_verifier_port import PasswordVerifierPort
from sql_auth.application.ports.pending_login_port import PendingLoginPort
from sql_auth.application.ports.query_executor_port import LookupQuery, QueryExecutorPort
from sql_auth.application.ports.session_registry_port import SessionRegistryPort
from sql_auth.application.services.account_synchronizer import AccountSynchronizer
from sql_auth.application.services.credential_verifier import CredentialVerifier

logger = logging.getLogger(__name__)


class AuthenticationGateway:
    """Dispatch one bound external lookup per login attempt."""

    def __init__(
        self,
        *,
        query_template: str,
        query_executor: QueryExecutorPort | None,
        sessions: SessionRegistryPort,
        password_verifier: PasswordVerifierPort,
        account_synchronizer: AccountSynchronizer,
    ) -> None:
        self._query_template = query_template
        self._query_executor = query_executor
        self._sessions = sessions
        self._password_verifier = password_verifier
        self._account_synchronizer = account_synchronizer

    def authenticate(
        self,
        *,
        session_id: str | None,
        pending_login: PendingLoginPort,
    ) -> None:
        """Start verification and return before the lookup completes.

        When no external store is configured nothing is dispatched and the
        pending login is left untouched for the host to expire.
        """

        if self._query_executor is None:
            logger.error(
                "sql_auth_engine_unavailable account=%s",
                pending_login.account,
            )
            return

        query = self.build_query(session_id=session_id, pending_login=pending_login)
        verifier = CredentialVerifier(
            owner=self,
            session_id=session_id,
            password=pending_login.password,
            pending_login=pending_login,
            password_verifier=self._password_verifier,
            account_synchronizer=self._account_synchronizer,
        )
        self._query_executor.run(verifier, query)
        logger.info("sql_auth_checking account=%s", pending_login.account)

    def build_query(
        self,
        *,
        session_id: str | None,
        pending_login: PendingLoginPort,
    ) -> LookupQuery:
        """Bind account, password and caller identity to the configured template."""

        session = self._sessions.get(session_id) if session_id is not None else None
        return LookupQuery(
            template=self._query_template,
            params={
                "a": pending_login.account,
                "p": pending_login.password,
                "n": session.nickname if session is not None else "",
                "i": session.ip_address if session is not None else "",
            },
        )
