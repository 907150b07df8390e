"""Pytest configuration and shared fixtures."""

import time
import uuid
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from jose import jwk, jwt

from src.profiles.auth.dependencies import set_jwt_validator
from src.profiles.auth.jwks import JWKSCache
from src.profiles.auth.jwt_validator import JWTValidator
from src.profiles.main import app
from src.profiles.services.database import UserProfile, get_profile_store
from src.profiles.tests.constants import TEST_AUDIENCE, TEST_ISSUER, TEST_JWKS_URL, TEST_KID


def _generate_private_pem() -> bytes:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _public_jwk(private_pem: bytes, kid: str) -> dict[str, Any]:
    public_key = jwk.construct(private_pem, algorithm="RS256").public_key()
    return {**public_key.to_dict(), "kid": kid, "use": "sig"}


@pytest.fixture(scope="session")
def signing_key_pem() -> bytes:
    """Private key whose public half is published in the test key set."""
    return _generate_private_pem()


@pytest.fixture(scope="session")
def foreign_key_pem() -> bytes:
    """Private key that is never published."""
    return _generate_private_pem()


@pytest.fixture(scope="session")
def jwks_document(signing_key_pem: bytes) -> dict[str, Any]:
    """Key set as Cognito would serve it."""
    return {"keys": [_public_jwk(signing_key_pem, TEST_KID)]}


@pytest.fixture
def subject() -> str:
    """A fresh Cognito subject per test."""
    return str(uuid.uuid4())


@pytest.fixture
def make_token(signing_key_pem: bytes, subject: str) -> Callable[..., str]:
    """
    Build signed tokens.

    Claims default to a valid, unexpired ID token for ``subject``; keyword
    arguments override or (with None) remove claims.
    """

    def _make(
        key: bytes | str | None = None,
        algorithm: str = "RS256",
        kid: str | None = TEST_KID,
        **claim_overrides: Any,
    ) -> str:
        now = int(time.time())
        claims: dict[str, Any] = {
            "sub": subject,
            "email": "test@example.com",
            "iss": TEST_ISSUER,
            "aud": TEST_AUDIENCE,
            "token_use": "id",
            "iat": now,
            "exp": now + 3600,
        }
        for name, value in claim_overrides.items():
            if value is None:
                claims.pop(name, None)
            else:
                claims[name] = value

        headers = {"kid": kid} if kid is not None else {}
        return jwt.encode(
            claims,
            key if key is not None else signing_key_pem,
            algorithm=algorithm,
            headers=headers,
        )

    return _make


class KeySetServer:
    """httpx transport handler serving a key set and counting fetches."""

    def __init__(self, document: dict[str, Any]):
        self.document = document
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.document)

    @property
    def fetch_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def key_set_server(jwks_document: dict[str, Any]) -> KeySetServer:
    return KeySetServer(jwks_document)


@pytest.fixture
def jwks_cache(key_set_server: KeySetServer) -> JWKSCache:
    """JWKS cache backed by the in-memory key set server."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(key_set_server))
    return JWKSCache(TEST_JWKS_URL, http_client=http_client)


@pytest.fixture
def jwt_validator(jwks_cache: JWKSCache) -> JWTValidator:
    return JWTValidator(jwks_cache=jwks_cache, issuer=TEST_ISSUER, audience=TEST_AUDIENCE)


class InMemoryProfileStore:
    """ProfileStore stand-in with the same keep-existing upsert semantics."""

    def __init__(self) -> None:
        self.rows: dict[str, UserProfile] = {}
        self.calls: list[str] = []

    async def get_by_subject(self, subject: str) -> UserProfile | None:
        self.calls.append("get_by_subject")
        return self.rows.get(subject)

    async def upsert(
        self,
        subject: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> UserProfile:
        self.calls.append("upsert")
        existing = self.rows.get(subject)
        if existing is None:
            profile = UserProfile(
                id=uuid.uuid4(),
                cognito_sub=subject,
                first_name=first_name or None,
                last_name=last_name or None,
                created_at=datetime.now(),
            )
        else:
            profile = existing.model_copy(
                update={
                    "first_name": first_name or existing.first_name,
                    "last_name": last_name or existing.last_name,
                }
            )
        self.rows[subject] = profile
        return profile


@pytest.fixture
def profile_store() -> Iterator[InMemoryProfileStore]:
    """Install an in-memory profile store for the duration of a test."""
    store = InMemoryProfileStore()
    app.dependency_overrides[get_profile_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_profile_store, None)


@pytest.fixture
def installed_validator(jwt_validator: JWTValidator) -> Iterator[JWTValidator]:
    """Install a real validator backed by the test key set."""
    set_jwt_validator(jwt_validator)
    yield jwt_validator
    set_jwt_validator(None)


@pytest.fixture
def client() -> TestClient:
    """
    Provide FastAPI test client for API testing.

    The lifespan is not run, so no database or Cognito is contacted.

    Example:
        >>> def test_health(client):
        >>>     response = client.get("/health")
        >>>     assert response.status_code == 200
    """
    return TestClient(app)


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> dict[str, str]:
    """Authorization header carrying a valid token for ``subject``."""
    return {"Authorization": f"Bearer {make_token()}"}
