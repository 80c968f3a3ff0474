"""
Shared fixtures for token service unit tests.
"""

from datetime import timedelta

import pytest

from service_tokens.app.sessions.store import InMemorySessionStore
from service_tokens.app.tokens.issuer import TokenIssuer
from service_tokens.app.tokens.revoker import TokenRevoker
from service_tokens.app.tokens.signer import HS256Signer
from service_tokens.app.tokens.validator import TokenValidator
from shared.config import get_config
from shared.metrics import MetricsCollector

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"


@pytest.fixture
def config():
    """Service config with test secrets."""
    return get_config(
        "tokens",
        8010,
        access_token_secret=ACCESS_SECRET,
        refresh_token_secret=REFRESH_SECRET,
        access_token_ttl_seconds=900,
        refresh_token_ttl_seconds=86400,
    )


@pytest.fixture
def signer():
    return HS256Signer()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def metrics():
    return MetricsCollector("tokens")


@pytest.fixture
def issuer(signer, store, metrics):
    return TokenIssuer(
        signer,
        store,
        access_secret=ACCESS_SECRET,
        access_ttl=timedelta(minutes=15),
        refresh_secret=REFRESH_SECRET,
        refresh_ttl=timedelta(days=1),
        metrics=metrics,
    )


@pytest.fixture
def validator(signer, store, metrics):
    return TokenValidator(
        signer,
        store,
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        metrics=metrics,
    )


@pytest.fixture
def revoker(store, metrics):
    return TokenRevoker(store, metrics=metrics)
