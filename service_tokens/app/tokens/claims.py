"""
Claim sets carried inside signed tokens.

Access and refresh claim sets are separate types; each names its session
identifier field differently (``access_uuid`` / ``refresh_uuid``) and a
payload may carry only one of them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Type, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

from .errors import MissingClaimError


class Role(str, Enum):
    """Token role."""
    ACCESS = "access"
    REFRESH = "refresh"

    @property
    def session_field(self) -> str:
        """Name of the session identifier claim for this role."""
        return f"{self.value}_uuid"


class BaseClaimSet(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    role: ClassVar[Role]

    user_id: StrictInt = Field(..., ge=0)
    exp: StrictInt

    @model_validator(mode="before")
    @classmethod
    def _reject_foreign_session_field(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            for other in Role:
                if other is not cls.role and other.session_field in data:
                    raise ValueError(f"{cls.role.value} claims must not carry {other.session_field}")
        return data

    @property
    def session_id(self) -> str:
        return getattr(self, self.role.session_field)

    def to_payload(self) -> Dict[str, Any]:
        """Flat payload in wire order: session identifier, user_id, exp."""
        return {
            self.role.session_field: self.session_id,
            "user_id": self.user_id,
            "exp": self.exp,
        }


class AccessClaims(BaseClaimSet):
    """Claims of an access token."""

    role: ClassVar[Role] = Role.ACCESS

    access_uuid: StrictStr = Field(..., min_length=1)


class RefreshClaims(BaseClaimSet):
    """Claims of a refresh token."""

    role: ClassVar[Role] = Role.REFRESH

    refresh_uuid: StrictStr = Field(..., min_length=1)


ClaimSet = Union[AccessClaims, RefreshClaims]

CLAIM_TYPES: Dict[Role, Type[BaseClaimSet]] = {
    Role.ACCESS: AccessClaims,
    Role.REFRESH: RefreshClaims,
}


def parse_claims(payload: Mapping[str, Any], role: Role) -> ClaimSet:
    """Build the typed claim set for ``role`` from a decoded payload.

    Raises:
        MissingClaimError: a required field is absent, has the wrong type,
            or the payload belongs to the other role.
    """
    try:
        return CLAIM_TYPES[Role(role)].model_validate(dict(payload))
    except ValidationError as e:
        fields = sorted({".".join(str(part) for part in err["loc"]) or "__root__" for err in e.errors()})
        raise MissingClaimError(
            f"Invalid {Role(role).value} claims",
            details={"fields": fields},
        ) from e


@dataclass(frozen=True)
class TokenPair:
    """Result of one issuance: an access and a refresh token for the same principal."""

    user_id: int

    access_token: str
    access_uuid: str
    access_expires: int

    refresh_token: str
    refresh_uuid: str
    refresh_expires: int
