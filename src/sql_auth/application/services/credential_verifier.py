"""Completion sink that turns one external lookup into a login outcome."""

from __future__ import annotations

import hmac
import logging

from sql_auth.application.ports.password_verifier_port import (
    HashComputationError,
    PasswordVerifierPort,
)
from sql_auth.application.ports.pending_login_port import PendingLoginPort
from sql_auth.application.ports.query_executor_port import (
    LookupResult,
    MissingColumnError,
    QueryError,
)
from sql_auth.application.services.account_synchronizer import AccountSynchronizer
from sql_auth.domain.auth.hash_codec import normalize_stored_hash
from sql_auth.domain.auth.verification_outcome import VerificationOutcome

logger = logging.getLogger(__name__)


class VerifierAlreadyResolvedError(RuntimeError):
    """Raised when a lookup completion is delivered to a resolved verifier."""

    def __init__(self, *, account: str) -> None:
        super().__init__(f"verifier for {account!r} already received its lookup result")
        self.account = account


class CredentialVerifier:
    """Own one pending login from lookup dispatch until its outcome is reported.

    The pending login is held from construction and released exactly once,
    when the first completion callback finishes. Success is reported only after
    the stored hash matched and the local account was synchronized.
    """

    def __init__(
        self,
        *,
        owner: object,
        session_id: str | None,
        password: str,
        pending_login: PendingLoginPort,
        password_verifier: PasswordVerifierPort,
        account_synchronizer: AccountSynchronizer,
    ) -> None:
        self._owner = owner
        self._session_id = session_id
        self._password = password
        self._pending_login = pending_login
        self._password_verifier = password_verifier
        self._account_synchronizer = account_synchronizer
        self._claimed = False
        self._outcome: VerificationOutcome | None = None
        pending_login.hold(owner)

    @property
    def outcome(self) -> VerificationOutcome | None:
        return self._outcome

    async def on_result(self, result: LookupResult) -> VerificationOutcome:
        """Verify the supplied password against the first returned row."""

        self._claim()
        outcome = VerificationOutcome.INTERNAL_ERROR
        try:
            outcome = await self._verify(result)
        except Exception:  # noqa: BLE001
            logger.exception(
                "sql_auth_verification_crashed account=%s",
                self._pending_login.account,
            )
        finally:
            self._resolve(outcome)
        return outcome

    async def on_error(self, error: QueryError) -> VerificationOutcome:
        """Fail the attempt after the executor could not run the lookup."""

        self._claim()
        logger.error(
            "sql_auth_query_failed account=%s query=%r error=%s",
            self._pending_login.account,
            error.query.template,
            error.message,
        )
        self._resolve(VerificationOutcome.QUERY_ERROR)
        return VerificationOutcome.QUERY_ERROR

    async def _verify(self, result: LookupResult) -> VerificationOutcome:
        account = self._pending_login.account
        if result.row_count == 0:
            logger.info("sql_auth_account_not_found account=%s", account)
            return VerificationOutcome.NOT_FOUND

        logger.info("sql_auth_account_found account=%s", account)
        stored_hash, email = _extract_credentials(result, account=account)
        normalized_hash = normalize_stored_hash(stored_hash)

        try:
            computed_hash = self._password_verifier.compute_hash(
                password=self._password,
                stored_hash=normalized_hash,
            )
        except HashComputationError as error:
            logger.warning("sql_auth_hash_malformed account=%s error=%s", account, error)
            return VerificationOutcome.HASH_MALFORMED

        if not hmac.compare_digest(computed_hash.encode("utf-8"), normalized_hash.encode("utf-8")):
            logger.info("sql_auth_password_mismatch account=%s", account)
            return VerificationOutcome.MISMATCH

        await self._account_synchronizer.sync(
            account_name=account,
            session_id=self._session_id,
            external_email=email,
        )

        logger.info("sql_auth_logged_in account=%s", account)
        return VerificationOutcome.SUCCESS

    def _claim(self) -> None:
        if self._claimed:
            raise VerifierAlreadyResolvedError(account=self._pending_login.account)
        self._claimed = True

    def _resolve(self, outcome: VerificationOutcome) -> None:
        self._outcome = outcome
        self._password = ""
        try:
            if outcome.is_success:
                self._pending_login.success(self._owner)
        finally:
            self._pending_login.release(self._owner)


def _extract_credentials(result: LookupResult, *, account: str) -> tuple[str, str]:
    try:
        stored_hash = _as_text(result.value(0, "password"))
    except (LookupError, TypeError, ValueError) as error:
        logger.warning("sql_auth_row_unreadable account=%s error=%s", account, error)
        return "", ""

    try:
        email = _as_text(result.value(0, "email"))
    except MissingColumnError:
        email = ""
    except (LookupError, TypeError, ValueError) as error:
        logger.warning("sql_auth_row_unreadable account=%s error=%s", account, error)
        return "", ""
    return stored_hash, email


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)
