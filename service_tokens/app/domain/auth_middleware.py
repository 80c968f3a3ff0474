"""
Authentication gate for protected routes.

Extracts ``Authorization: Bearer <base64(token)>``, validates the token for
the access role and hands the claims to the route. Every rejection collapses
to one generic ``AuthenticationError``; the specific reason is logged only.
Store outages pass through untouched so they surface as 503, not 401.
"""

import base64
import binascii
import re
from typing import Optional

from fastapi import Request

from shared.errors import AuthenticationError
from shared.logging import get_logger, set_user_context
from ..tokens.claims import AccessClaims, Role
from ..tokens.errors import MalformedCredentialError, TokenAuthenticationError
from ..tokens.validator import TokenValidator

BEARER_PATTERN = re.compile(r"Bearer (\S+)")


def encode_credential(token: str) -> str:
    """Wrap a signed token in the standard-base64 form clients send back."""
    return base64.b64encode(token.encode("utf-8")).decode("ascii")


def decode_credential(credential: str) -> str:
    """Inverse of ``encode_credential``."""
    try:
        return base64.b64decode(credential, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise MalformedCredentialError("Credential is not valid base64") from e


def extract_bearer(authorization: Optional[str]) -> str:
    """Return the credential part of a Bearer header, decoded to the signed token."""
    if not authorization:
        raise MalformedCredentialError("Missing Authorization header")

    match = BEARER_PATTERN.fullmatch(authorization)
    if match is None:
        raise MalformedCredentialError("Invalid authorization header format")

    return decode_credential(match.group(1))


class BearerAuthenticator:
    """FastAPI dependency guarding routes with access tokens."""

    def __init__(self, validator: TokenValidator):
        self.validator = validator
        self.logger = get_logger("tokens.auth_middleware")

    async def __call__(self, request: Request) -> AccessClaims:
        return await self.authenticate(request)

    async def authenticate(self, request: Request) -> AccessClaims:
        """
        Authenticate the request and attach its claims to ``request.state.claims``.

        Raises:
            AuthenticationError: any extraction, decoding or validation failure
            StoreUnavailableError: session store unreachable
        """
        try:
            token = extract_bearer(request.headers.get("Authorization"))
        except MalformedCredentialError as e:
            self.logger.warning("Bearer extraction failed", reason=e.reason, error=e.message)
            raise AuthenticationError("Unauthorized") from e

        try:
            claims = await self.validator.validate(token, Role.ACCESS)
        except TokenAuthenticationError as e:
            raise AuthenticationError("Unauthorized") from e

        request.state.claims = claims
        set_user_context(claims.user_id)
        return claims
