"""
Tests for the token service HTTP surface.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from service_tokens.app.domain.auth_middleware import decode_credential
from service_tokens.app.main import TokenService, create_app
from service_tokens.app.sessions.redis_store import RedisSessionStore
from service_tokens.app.sessions.store import InMemorySessionStore
from service_tokens.app.tokens.errors import (
    SessionNotFoundError,
    SigningFailureError,
    StoreUnavailableError,
)
from service_tokens.app.tokens.signer import HS256Signer


class TestTokenService:
    """Test cases for the token service endpoints."""

    @pytest.fixture
    def app(self, config):
        return create_app(config=config, store=InMemorySessionStore())

    @pytest.fixture
    def service(self, app):
        return app.state.token_service

    @pytest.fixture
    def client(self, app):
        return TestClient(app)

    @pytest.fixture
    def tokens(self, client):
        response = client.post("/auth/tokens", json={"user_id": 42})
        assert response.status_code == 200
        return response.json()

    def _bearer(self, credential: str) -> dict:
        return {"Authorization": f"Bearer {credential}"}

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "tokens"

    def test_issue_tokens(self, client, service):
        response = client.post("/auth/tokens", json={"user_id": 42})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "Bearer"
        assert data["access_expires"] < data["refresh_expires"]
        assert data["access_token"] != data["refresh_token"]
        assert len(service.store) == 2

    @pytest.mark.parametrize("body", [{}, {"user_id": -1}, {"user_id": "abc"}])
    def test_issue_rejects_bad_principal(self, client, body):
        response = client.post("/auth/tokens", json=body)

        assert response.status_code == 422

    def test_me(self, client, tokens):
        response = client.get("/auth/me", headers=self._bearer(tokens["access_token"]))

        assert response.status_code == 200
        claims = response.json()["claims"]
        assert claims["user_id"] == 42
        assert claims["exp"] == tokens["access_expires"]
        assert "access_uuid" in claims

    def test_me_rejects_refresh_token(self, client, tokens):
        response = client.get("/auth/me", headers=self._bearer(tokens["refresh_token"]))

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_me_without_header(self, client):
        response = client.get("/auth/me")

        assert response.status_code == 401

    def test_failure_bodies_are_indistinguishable(self, client, tokens):
        responses = [
            client.get("/auth/me"),
            client.get("/auth/me", headers={"Authorization": "Basic dXNlcjpwYXNz"}),
            client.get("/auth/me", headers=self._bearer("not*base64")),
            client.get("/auth/me", headers=self._bearer("YS5iLmM=")),
            client.get("/auth/me", headers=self._bearer(tokens["refresh_token"])),
        ]

        assert {r.status_code for r in responses} == {401}
        bodies = [r.json() for r in responses]
        assert all(body == bodies[0] for body in bodies)
        assert bodies[0]["message"] == "Unauthorized"
        assert bodies[0]["code"] == "AUTHENTICATION_ERROR"

    def test_verify(self, client, tokens):
        access_token = decode_credential(tokens["access_token"])
        refresh_token = decode_credential(tokens["refresh_token"])

        access = client.post("/auth/verify", json={"token": access_token})
        refresh = client.post("/auth/verify", json={"token": refresh_token, "role": "refresh"})
        crossed = client.post("/auth/verify", json={"token": refresh_token, "role": "access"})

        assert access.status_code == 200
        assert access.json()["claims"]["user_id"] == 42
        assert refresh.status_code == 200
        assert refresh.json()["role"] == "refresh"
        assert crossed.status_code == 401
        assert crossed.json()["message"] == "Unauthorized"

    def test_logout(self, client, tokens):
        headers = self._bearer(tokens["access_token"])

        response = client.post("/auth/logout", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"revoked": True, "user_id": 42}
        assert client.get("/auth/me", headers=headers).status_code == 401
        assert client.post("/auth/logout", headers=headers).status_code == 401

    def test_logout_lost_race(self, client, service, tokens):
        service.revoker.revoke = AsyncMock(side_effect=SessionNotFoundError("Session not found"))

        response = client.post("/auth/logout", headers=self._bearer(tokens["access_token"]))

        assert response.status_code == 200
        assert response.json() == {"revoked": False}

    def test_store_outage_is_503(self, client, service, tokens):
        service.store.get = AsyncMock(side_effect=StoreUnavailableError("Connection refused"))

        response = client.get("/auth/me", headers=self._bearer(tokens["access_token"]))

        assert response.status_code == 503
        assert response.json()["code"] == "EXTERNAL_SERVICE_ERROR"

    def test_issue_store_outage_is_503(self, client, service):
        service.store.set = AsyncMock(side_effect=StoreUnavailableError("Connection refused"))

        response = client.post("/auth/tokens", json={"user_id": 42})

        assert response.status_code == 503

    def test_signing_failure_is_500(self, client, service):
        service.signer.sign = MagicMock(side_effect=SigningFailureError("boom"))

        response = client.post("/auth/tokens", json={"user_id": 42})

        assert response.status_code == 500
        assert response.json()["code"] == "SERVICE_ERROR"
        assert len(service.store) == 0

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["dependencies"] == {"session_store": "ok"}

    def test_health_reports_store_outage(self, client, service):
        service.store.ping = AsyncMock(return_value=False)

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["dependencies"] == {"session_store": "error"}

    def test_metrics(self, client, tokens):
        client.get("/auth/me", headers=self._bearer(tokens["access_token"]))
        client.get("/auth/me", headers=self._bearer(tokens["refresh_token"]))

        response = client.get("/metrics")

        assert response.status_code == 200
        body = response.text
        assert 'tokens_issued_total{status="issued"} 1.0' in body
        assert 'token_validations_total{role="access",status="valid"} 1.0' in body
        assert 'token_validations_total{role="access",status="bad_signature"} 1.0' in body


class TestTokenServiceWiring:
    """Test cases for capability injection."""

    def test_injected_empty_store_is_used(self, config):
        store = InMemorySessionStore()
        signer = HS256Signer()

        service = TokenService(config=config, store=store, signer=signer)

        assert len(store) == 0
        assert service.store is store
        assert service.issuer.store is store
        assert service.validator.store is store
        assert service.revoker.store is store
        assert service.signer is signer

    def test_defaults_to_redis_store(self, config):
        service = TokenService(config=config)

        assert isinstance(service.store, RedisSessionStore)
        assert isinstance(service.signer, HS256Signer)

    def test_issue_through_injected_store(self, config):
        store = InMemorySessionStore()
        client = TestClient(create_app(config=config, store=store))

        response = client.post("/auth/tokens", json={"user_id": 7})

        assert response.status_code == 200
        assert len(store) == 2
