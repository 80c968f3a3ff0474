"""
Tests for token service configuration.
"""

import pytest
from pydantic import ValidationError

from shared.config import get_config

from conftest import ACCESS_SECRET, REFRESH_SECRET


class TestServiceConfig:
    """Test cases for ServiceConfig."""

    def test_defaults(self, config):
        assert config.env == "local"
        assert config.redis_url == "redis://localhost:6379/0"
        assert config.access_token_ttl_seconds == 900
        assert config.access_token_secret.get_secret_value() == ACCESS_SECRET

    def test_secrets_are_masked(self, config):
        assert ACCESS_SECRET not in repr(config)
        assert REFRESH_SECRET not in str(config.model_dump())

    def test_secrets_must_differ(self):
        with pytest.raises(ValidationError):
            get_config("tokens", 8010, access_token_secret=ACCESS_SECRET, refresh_token_secret=ACCESS_SECRET)

    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError):
            get_config("tokens", 8010, access_token_secret="too-short", refresh_token_secret=REFRESH_SECRET)

    @pytest.mark.parametrize("field", ["access_token_ttl_seconds", "refresh_token_ttl_seconds"])
    def test_ttl_lower_bound(self, field):
        with pytest.raises(ValidationError):
            get_config(
                "tokens",
                8010,
                access_token_secret=ACCESS_SECRET,
                refresh_token_secret=REFRESH_SECRET,
                **{field: 1},
            )

    def test_loads_from_environment(self, monkeypatch):
        monkeypatch.setenv("TOKENS_ACCESS_TOKEN_SECRET", ACCESS_SECRET)
        monkeypatch.setenv("TOKENS_REFRESH_TOKEN_SECRET", REFRESH_SECRET)
        monkeypatch.setenv("TOKENS_ACCESS_TOKEN_TTL_SECONDS", "60")
        monkeypatch.setenv("TOKENS_REDIS_URL", "redis://sessions:6379/2")

        config = get_config("tokens", 8010)

        assert config.access_token_ttl_seconds == 60
        assert config.redis_url == "redis://sessions:6379/2"
        assert config.refresh_token_secret.get_secret_value() == REFRESH_SECRET

    def test_missing_secret(self, monkeypatch):
        monkeypatch.delenv("TOKENS_ACCESS_TOKEN_SECRET", raising=False)
        monkeypatch.delenv("TOKENS_REFRESH_TOKEN_SECRET", raising=False)

        with pytest.raises(ValidationError):
            get_config("tokens", 8010, _env_file=None)
