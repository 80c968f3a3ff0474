"""
Token validation.

A token is accepted only when its signature and expiry check out for the
requested role AND its session record is still present in the store. The
store lookup is what makes early revocation possible.
"""

from typing import Dict, Optional, Union

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..sessions.store import SessionStore
from .claims import ClaimSet, Role, parse_claims
from .errors import SessionNotFoundError, StoreUnavailableError, TokenAuthenticationError
from .signer import TokenSigner


class TokenValidator:
    """Validates signed tokens against their role secret and the session store."""

    def __init__(
        self,
        signer: TokenSigner,
        store: SessionStore,
        access_secret: str,
        refresh_secret: str,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.signer = signer
        self.store = store
        self._secrets: Dict[Role, str] = {
            Role.ACCESS: access_secret,
            Role.REFRESH: refresh_secret,
        }
        self.metrics = metrics
        self.logger = get_logger("tokens.validator")

    async def validate(self, token: str, role: Union[Role, str] = Role.ACCESS) -> ClaimSet:
        """
        Validate ``token`` for ``role`` and return its claims.

        Raises:
            MalformedCredentialError, BadSignatureError, TokenExpiredError,
            MissingClaimError, SessionNotFoundError: token rejected
            StoreUnavailableError: validity could not be determined
        """
        role = Role(role)
        try:
            payload = self.signer.verify(token, self._secrets[role])
            claims = parse_claims(payload, role)
            await self._require_session(claims)
        except TokenAuthenticationError as e:
            self.logger.warning("Token rejected", role=role.value, reason=e.reason, error=e.message)
            self._record(role, e.reason)
            raise
        except StoreUnavailableError as e:
            self.logger.error("Session lookup failed", role=role.value, error=e.message)
            self._record(role, e.reason)
            raise

        self._record(role, "valid")
        return claims

    async def _require_session(self, claims: ClaimSet) -> None:
        if self.metrics:
            with self.metrics.time_operation("session_store_duration_seconds", operation="get"):
                stored = await self.store.get(claims.session_id)
        else:
            stored = await self.store.get(claims.session_id)

        if stored is None:
            raise SessionNotFoundError(
                "Session not found",
                details={"session_id": claims.session_id},
            )

    def _record(self, role: Role, status: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("token_validations_total", role=role.value, status=status)
