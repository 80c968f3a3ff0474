"""
Token issuance.

Builds an access/refresh claim pair for a principal, signs each half with its
own secret and records one session per half in the store. Both tokens are
signed before anything is written, so a signing failure never leaves an
orphaned session behind.
"""

import time
import uuid
from datetime import timedelta
from typing import Callable, Optional, Tuple

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..sessions.store import SessionStore
from .claims import AccessClaims, RefreshClaims, TokenPair, BaseClaimSet
from .errors import SigningFailureError, StoreUnavailableError
from .signer import TokenSigner

MIN_TOKEN_TTL = timedelta(seconds=2)


class TokenIssuer:
    """Issues token pairs and persists their session records."""

    def __init__(
        self,
        signer: TokenSigner,
        store: SessionStore,
        access_secret: str,
        access_ttl: timedelta,
        refresh_secret: str,
        refresh_ttl: timedelta,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], float] = time.time,
    ):
        for name, ttl in (("access_ttl", access_ttl), ("refresh_ttl", refresh_ttl)):
            if ttl < MIN_TOKEN_TTL:
                raise ValueError(f"{name} must be at least {MIN_TOKEN_TTL.total_seconds():.0f}s")

        self.signer = signer
        self.store = store
        self.access_secret = access_secret
        self.access_ttl = access_ttl
        self.refresh_secret = refresh_secret
        self.refresh_ttl = refresh_ttl
        self.metrics = metrics
        self.clock = clock
        self.logger = get_logger("tokens.issuer")

    async def issue(self, user_id: int) -> TokenPair:
        """
        Issue a token pair for ``user_id``.

        Raises:
            ValueError: ``user_id`` is not a non-negative integer
            SigningFailureError: either token could not be signed; nothing was stored
            StoreUnavailableError: a session record could not be written
        """
        if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id < 0:
            raise ValueError(f"user_id must be a non-negative integer, got {user_id!r}")

        now = self.clock()

        access_claims = AccessClaims(
            access_uuid=str(uuid.uuid4()),
            user_id=user_id,
            exp=int(now + self.access_ttl.total_seconds()),
        )
        refresh_claims = RefreshClaims(
            refresh_uuid=str(uuid.uuid4()),
            user_id=user_id,
            exp=int(now + self.refresh_ttl.total_seconds()),
        )

        try:
            access_token = self.signer.sign(access_claims.to_payload(), self.access_secret)
            refresh_token = self.signer.sign(refresh_claims.to_payload(), self.refresh_secret)
        except SigningFailureError as e:
            self.logger.error("Token signing failed", user_id=user_id, error=e.message)
            self._record("signing_failure")
            raise

        try:
            for claims in (access_claims, refresh_claims):
                await self._persist(claims)
        except StoreUnavailableError as e:
            self.logger.error("Session persistence failed", user_id=user_id, error=e.message)
            self._record("store_unavailable")
            raise

        self.logger.info(
            "Token pair issued",
            user_id=user_id,
            access_uuid=access_claims.access_uuid,
            refresh_uuid=refresh_claims.refresh_uuid,
        )
        self._record("issued")

        return TokenPair(
            user_id=user_id,
            access_token=access_token,
            access_uuid=access_claims.access_uuid,
            access_expires=access_claims.exp,
            refresh_token=refresh_token,
            refresh_uuid=refresh_claims.refresh_uuid,
            refresh_expires=refresh_claims.exp,
        )

    async def _persist(self, claims: BaseClaimSet) -> None:
        # Measured at write time; the record must not outlive exp
        key, value, ttl = session_record(claims, self.clock())
        if ttl <= timedelta(0):
            raise StoreUnavailableError(
                "Session store too slow to record session before token expiry",
                details={"session_id": key},
            )
        if self.metrics:
            with self.metrics.time_operation("session_store_duration_seconds", operation="set"):
                await self.store.set(key, value, ttl)
        else:
            await self.store.set(key, value, ttl)

    def _record(self, status: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("tokens_issued_total", status=status)


def session_record(claims: BaseClaimSet, now: float) -> Tuple[str, str, timedelta]:
    """Store key, value and lifetime for a claim set; lifetime ends at ``exp``."""
    return claims.session_id, str(claims.user_id), timedelta(seconds=claims.exp - now)
