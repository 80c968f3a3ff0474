"""
Token package.

Turns a principal id into a signed access/refresh pair, checks presented
tokens against their role secret and the session store, and revokes access
sessions. Signing goes through ``TokenSigner`` (HS256 via PyJWT) and state
goes through ``SessionStore``; both are injected.
"""

from .claims import AccessClaims, RefreshClaims, ClaimSet, Role, TokenPair, parse_claims
from .errors import (
    BadSignatureError,
    MalformedCredentialError,
    MissingClaimError,
    SessionNotFoundError,
    SigningFailureError,
    StoreUnavailableError,
    TokenAuthenticationError,
    TokenExpiredError,
)
from .issuer import TokenIssuer
from .revoker import TokenRevoker
from .signer import HS256Signer, TokenSigner
from .validator import TokenValidator

__all__ = [
    # Claims
    "AccessClaims",
    "RefreshClaims",
    "ClaimSet",
    "Role",
    "TokenPair",
    "parse_claims",
    # Operations
    "TokenIssuer",
    "TokenValidator",
    "TokenRevoker",
    "TokenSigner",
    "HS256Signer",
    # Exceptions
    "TokenAuthenticationError",
    "MalformedCredentialError",
    "BadSignatureError",
    "TokenExpiredError",
    "MissingClaimError",
    "SessionNotFoundError",
    "StoreUnavailableError",
    "SigningFailureError",
]
