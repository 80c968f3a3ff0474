"""
Error kinds raised by token issuance, validation and revocation.

The five authentication failures share the public ``AUTHENTICATION_ERROR``
code; ``reason`` tells them apart in logs and metrics only. Store outages and
signing failures are service faults, never reported as "unauthorized".
"""

from typing import Any, Dict, Optional

from shared.errors import AuthenticationError, ExternalServiceError, ServiceError


class TokenAuthenticationError(AuthenticationError):
    """Base class for every reason a credential is rejected."""

    reason = "unauthorized"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class MalformedCredentialError(TokenAuthenticationError):
    """Bearer header shape, base64 or token structure could not be parsed."""

    reason = "malformed_credential"


class BadSignatureError(TokenAuthenticationError):
    """MAC mismatch or a signing algorithm other than the expected one."""

    reason = "bad_signature"


class TokenExpiredError(TokenAuthenticationError):
    """Current time is at or past the claim expiry."""

    reason = "expired"


class MissingClaimError(TokenAuthenticationError):
    """Expected claim absent or of the wrong type."""

    reason = "missing_claim"


class SessionNotFoundError(TokenAuthenticationError):
    """Session record revoked, evicted or never written."""

    reason = "session_not_found"


class StoreUnavailableError(ExternalServiceError):
    """Transport or timeout failure talking to the session store."""

    reason = "store_unavailable"

    def __init__(self, message: str = "Session store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("session-store", message, details)


class SigningFailureError(ServiceError):
    """Token could not be signed at issuance time."""

    reason = "signing_failure"

    def __init__(self, message: str = "Token signing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
