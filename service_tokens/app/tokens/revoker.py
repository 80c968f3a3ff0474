"""
Session revocation.

Revocation keys off the access session identifier only. Refresh sessions
expire on their own schedule and are not touched here.
"""

from typing import Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..sessions.store import SessionStore
from .claims import AccessClaims, BaseClaimSet
from .errors import MissingClaimError, SessionNotFoundError, StoreUnavailableError


class TokenRevoker:
    """Deletes access session records and reports who owned them."""

    def __init__(self, store: SessionStore, metrics: Optional[MetricsCollector] = None):
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("tokens.revoker")

    async def revoke(self, claims: BaseClaimSet) -> int:
        """
        Delete the session behind a decoded access claim set.

        Returns:
            Principal id that owned the session

        Raises:
            MissingClaimError: ``claims`` is not an access claim set
            SessionNotFoundError: already revoked or expired
            StoreUnavailableError: store could not be reached
        """
        if not isinstance(claims, AccessClaims):
            raise MissingClaimError(
                "No access_uuid claim in token",
                details={"fields": ["access_uuid"]},
            )

        try:
            if self.metrics:
                with self.metrics.time_operation("session_store_duration_seconds", operation="delete"):
                    stored = await self.store.delete(claims.access_uuid)
            else:
                stored = await self.store.delete(claims.access_uuid)
        except StoreUnavailableError as e:
            self.logger.error("Session revocation failed", access_uuid=claims.access_uuid, error=e.message)
            self._record("error")
            raise

        if stored is None:
            self.logger.warning("Session already gone", access_uuid=claims.access_uuid, user_id=claims.user_id)
            self._record("session_not_found")
            raise SessionNotFoundError(
                "Session not found",
                details={"session_id": claims.access_uuid},
            )

        try:
            user_id = int(stored)
        except ValueError as e:
            self.logger.error("Corrupt session record", access_uuid=claims.access_uuid)
            self._record("error")
            raise StoreUnavailableError("Corrupt session record") from e

        self.logger.info("Session revoked", access_uuid=claims.access_uuid, user_id=user_id)
        self._record("revoked")
        return user_id

    def _record(self, status: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("token_revocations_total", status=status)
