"""
Token service for issuing, validating and revoking session-backed tokens.
"""

from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import Depends
from pydantic import BaseModel, Field

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import AuthenticationError
from shared.logging import set_user_context
from .domain.auth_middleware import BearerAuthenticator, encode_credential
from .sessions.redis_store import RedisSessionStore
from .sessions.store import SessionStore
from .tokens.claims import AccessClaims, Role
from .tokens.errors import SessionNotFoundError, StoreUnavailableError, TokenAuthenticationError
from .tokens.issuer import TokenIssuer
from .tokens.revoker import TokenRevoker
from .tokens.signer import HS256Signer, TokenSigner
from .tokens.validator import TokenValidator


class TokenIssueRequest(BaseModel):
    """Request model for token issuance."""
    user_id: int = Field(..., ge=0, description="Already-authenticated principal")


class TokenIssueResponse(BaseModel):
    """Response model for token issuance."""
    access_token: str
    refresh_token: str
    access_expires: int
    refresh_expires: int
    token_type: str = "Bearer"


class TokenVerificationRequest(BaseModel):
    """Request model for token verification."""
    token: str
    role: Role = Role.ACCESS


class TokenService(BaseService):
    """Token service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        store: Optional[SessionStore] = None,
        signer: Optional[TokenSigner] = None,
    ):
        super().__init__("tokens", 8010, config=config)

        if store is None:
            store = RedisSessionStore(
                self.config.redis_url,
                socket_timeout=self.config.redis_socket_timeout,
            )
        self.store = store
        self.signer = signer if signer is not None else HS256Signer()

        access_secret = self.config.access_token_secret.get_secret_value()
        refresh_secret = self.config.refresh_token_secret.get_secret_value()

        self.issuer = TokenIssuer(
            self.signer,
            self.store,
            access_secret=access_secret,
            access_ttl=timedelta(seconds=self.config.access_token_ttl_seconds),
            refresh_secret=refresh_secret,
            refresh_ttl=timedelta(seconds=self.config.refresh_token_ttl_seconds),
            metrics=self.metrics,
        )
        self.validator = TokenValidator(
            self.signer,
            self.store,
            access_secret=access_secret,
            refresh_secret=refresh_secret,
            metrics=self.metrics,
        )
        self.revoker = TokenRevoker(self.store, metrics=self.metrics)
        self.authenticator = BearerAuthenticator(self.validator)

        self.app.state.token_service = self
        self._setup_token_routes()

    def _setup_token_routes(self):
        """Set up token-specific routes."""
        authenticated = Depends(self.authenticator)

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "tokens",
                "message": "Session-backed token service",
                "version": "1.0.0"
            }

        @self.app.post("/auth/tokens", response_model=TokenIssueResponse)
        async def issue_tokens(request: TokenIssueRequest):
            """Issue an access/refresh pair for a principal authenticated upstream."""
            set_user_context(request.user_id)
            pair = await self.issuer.issue(request.user_id)
            return TokenIssueResponse(
                access_token=encode_credential(pair.access_token),
                refresh_token=encode_credential(pair.refresh_token),
                access_expires=pair.access_expires,
                refresh_expires=pair.refresh_expires,
            )

        @self.app.post("/auth/verify")
        async def verify_token(request: TokenVerificationRequest):
            """Validate a raw signed token for a role."""
            try:
                claims = await self.validator.validate(request.token, request.role)
            except TokenAuthenticationError as e:
                raise AuthenticationError("Unauthorized") from e

            return {
                "valid": True,
                "role": request.role.value,
                "claims": claims.to_payload(),
            }

        @self.app.get("/auth/me")
        async def me(claims: AccessClaims = authenticated):
            """Claims of the presented access token."""
            return {"claims": claims.to_payload()}

        @self.app.post("/auth/logout")
        async def logout(claims: AccessClaims = authenticated):
            """Revoke the presented access session."""
            try:
                user_id = await self.revoker.revoke(claims)
            except SessionNotFoundError:
                # Lost a race with another revoke; the session is gone either way
                return {"revoked": False}

            return {"revoked": True, "user_id": user_id}

    async def startup(self) -> None:
        if isinstance(self.store, RedisSessionStore):
            try:
                await self.store.start()
            except StoreUnavailableError as e:
                self.logger.error("Session store unavailable at startup", error=e.message)

    async def shutdown(self) -> None:
        await self.store.close()

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Check token service dependencies."""
        return {"session_store": "ok" if await self.store.ping() else "error"}


def create_app(
    config: Optional[ServiceConfig] = None,
    store: Optional[SessionStore] = None,
):
    """Create FastAPI application."""
    service = TokenService(config=config, store=store)
    return service.app


if __name__ == "__main__":
    service = TokenService()
    service.run()
