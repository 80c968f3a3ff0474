"""
Shared configuration management for the session token service.
"""

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="TOKENS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Session store
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_socket_timeout: float = Field(default=5.0, gt=0)

    # Access tokens
    access_token_secret: SecretStr = Field(..., min_length=32)
    access_token_ttl_seconds: int = Field(default=900, ge=2)

    # Refresh tokens
    refresh_token_secret: SecretStr = Field(..., min_length=32)
    refresh_token_ttl_seconds: int = Field(default=604800, ge=2)

    @model_validator(mode="after")
    def _secrets_must_differ(self) -> "BaseConfig":
        if self.access_token_secret.get_secret_value() == self.refresh_token_secret.get_secret_value():
            raise ValueError("access_token_secret and refresh_token_secret must differ")
        return self


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
