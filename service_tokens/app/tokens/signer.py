"""
Signing capability for claim sets.

The issuer and validator only talk to ``TokenSigner``; ``HS256Signer`` is the
production implementation on top of PyJWT. Every PyJWT exception is
translated into one of the token error kinds here so nothing library-specific
leaks past this module.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

import jwt

from .errors import (
    BadSignatureError,
    MalformedCredentialError,
    MissingClaimError,
    SigningFailureError,
    TokenExpiredError,
)


class TokenSigner(ABC):
    """Produces and checks compact signed encodings of claim payloads."""

    algorithm: str

    @abstractmethod
    def sign(self, payload: Dict[str, Any], secret: str) -> str:
        """
        Sign a flat claim payload.

        Raises:
            SigningFailureError: the payload could not be encoded or signed
        """

    @abstractmethod
    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """
        Verify signature and expiry, returning the decoded payload.

        Raises:
            MalformedCredentialError: token is not a well-formed signed structure
            BadSignatureError: MAC mismatch or unexpected algorithm
            TokenExpiredError: ``exp`` is at or before now
            MissingClaimError: ``exp`` absent or not an integer
        """


class HS256Signer(TokenSigner):
    """HMAC-SHA256 signer. Any other algorithm in a token header is rejected."""

    algorithm = "HS256"

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    def sign(self, payload: Dict[str, Any], secret: str) -> str:
        try:
            return jwt.encode(payload, secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise SigningFailureError(f"Failed to sign token: {e}") from e

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={
                    "require": ["exp"],
                    "verify_signature": True,
                    # exp is checked below against the injected clock
                    "verify_exp": False,
                },
            )
        except jwt.MissingRequiredClaimError as e:
            raise MissingClaimError(f"Token missing claim: {e.claim}", details={"fields": [e.claim]}) from e
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise BadSignatureError(f"Invalid token signature: {e}") from e
        except jwt.DecodeError as e:
            # Checked after InvalidSignatureError, which subclasses DecodeError
            raise MalformedCredentialError(f"Malformed token: {e}") from e
        except jwt.InvalidTokenError as e:
            raise BadSignatureError(f"Invalid token: {e}") from e

        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, int):
            raise MissingClaimError("Expiration Time claim (exp) must be an integer", details={"fields": ["exp"]})
        if exp <= self.clock():
            raise TokenExpiredError("Token expired")

        return payload
