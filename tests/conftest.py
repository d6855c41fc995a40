from __future__ import annotations

import json
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from api.features.auth.providers import GoogleIdentityProvider
from api.shared.entities.registry import BaseEntity
from core.settings import (
    AppSettings,
    ConvaiSettings,
    GoogleSettings,
    PgDbSettings,
    SessionSettings,
    Settings,
)
from infra.convai_client import ConvaiClient
from infra.resources import DatabaseResource

CONVAI_BASE_URL = "https://convai.test/v1/convai"
FRONTEND_URL = "http://frontend.test/"
FAILURE_URL = "http://frontend.test/?login=failed"
GOOGLE_TOKEN_URL = "https://oauth.test/token"
GOOGLE_USERINFO_URL = "https://oauth.test/userinfo"


class ConvaiStub:
    """In-process stand-in for the Convai API, served through httpx.MockTransport."""

    def __init__(self):
        self.conversations: List[Dict[str, Any]] = []
        self.details: Dict[str, Dict[str, Any]] = {}
        self.fail_with: Optional[httpx.Response] = None
        self.raise_exc: Optional[Exception] = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.fail_with is not None:
            return self.fail_with

        path = request.url.path
        prefix = urlparse(CONVAI_BASE_URL).path
        if path == f"{prefix}/conversations":
            return httpx.Response(
                200,
                json={"conversations": self.conversations, "has_more": False, "next_cursor": None},
            )
        if path.startswith(f"{prefix}/conversations/"):
            conversation_id = path.rsplit("/", 1)[-1]
            if conversation_id not in self.details:
                return httpx.Response(404, json={"detail": "Conversation not found"})
            return httpx.Response(200, json=self.details[conversation_id])
        return httpx.Response(404, json={"detail": "Unknown path"})

    def client(self) -> ConvaiClient:
        return ConvaiClient(
            CONVAI_BASE_URL, "test-key", transport=httpx.MockTransport(self.handler)
        )


class GoogleStub:
    """Token and userinfo endpoints of an OAuth2 provider."""

    def __init__(self):
        self.claims: Dict[str, Any] = {
            "sub": "g-1",
            "email": "ada@example.com",
            "email_verified": True,
            "name": "Ada Lovelace",
        }
        self.token_status = 200
        self.token_requests: List[Dict[str, List[str]]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == GOOGLE_TOKEN_URL:
            self.token_requests.append(parse_qs(request.content.decode()))
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "access-123", "token_type": "Bearer"})
        if str(request.url) == GOOGLE_USERINFO_URL:
            if request.headers.get("Authorization") != "Bearer access-123":
                return httpx.Response(401, json={"error": "invalid_token"})
            return httpx.Response(200, content=json.dumps(self.claims))
        return httpx.Response(404)

    def provider(self) -> GoogleIdentityProvider:
        return GoogleIdentityProvider(
            client_id="client-id",
            client_secret="client-secret",
            redirect_uri="http://testserver/auth/callback",
            auth_url="https://oauth.test/auth",
            token_url=GOOGLE_TOKEN_URL,
            userinfo_url=GOOGLE_USERINFO_URL,
            transport=httpx.MockTransport(self.handler),
        )


def make_settings(database_url: str) -> Settings:
    return Settings(
        APP=AppSettings(
            ENVIRONMENT="test",
            JSON_LOGS=False,
            FRONTEND_URL=FRONTEND_URL,
            AUTH_FAILURE_URL=FAILURE_URL,
            CORS_ORIGINS=["http://frontend.test"],
        ),
        DATABASE=PgDbSettings(DATABASE_URL=database_url, DATABASE_AUTO_CREATE=True),
        SESSION=SessionSettings(SESSION_BACKEND="memory", SESSION_COOKIE_SECURE=False),
        GOOGLE=GoogleSettings(
            GOOGLE_CLIENT_ID="client-id",
            GOOGLE_CLIENT_SECRET="client-secret",
            GOOGLE_REDIRECT_URI="http://testserver/auth/callback",
        ),
        CONVAI=ConvaiSettings(ELEVENLABS_API_KEY="test-key", CONVAI_BASE_URL=CONVAI_BASE_URL),
    )


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'gateway.db'}"


@pytest.fixture
async def database(database_url):
    db = DatabaseResource(database_url, connect_args={"timeout": 30})
    await db.init()
    await db.create_all(BaseEntity.metadata)
    yield db
    await db.shutdown()


@pytest.fixture
async def db_session(database):
    session = database.get_session()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def convai_stub() -> ConvaiStub:
    return ConvaiStub()


@pytest.fixture
def google_stub() -> GoogleStub:
    return GoogleStub()


def build_app(settings: Settings, convai_stub: ConvaiStub, google_stub: GoogleStub):
    from api.main import create_fastapi_app

    app = create_fastapi_app(settings)
    app.container.infrastructure.convai_client.override(providers.Object(convai_stub.client()))
    app.container.infrastructure.identity_provider.override(
        providers.Object(google_stub.provider())
    )
    return app


@pytest.fixture
def app(database_url, convai_stub, google_stub):
    return build_app(make_settings(database_url), convai_stub, google_stub)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def login(client: TestClient, google_stub: GoogleStub, sub: str, email: str) -> str:
    """Run the OAuth redirect dance as ``sub`` and return the session token."""
    client.cookies.clear()
    google_stub.claims = {"sub": sub, "email": email, "email_verified": True, "name": email}

    response = client.get("/auth/login", follow_redirects=False)
    assert response.status_code == 302
    state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]

    response = client.get(
        "/auth/callback", params={"code": "auth-code", "state": state}, follow_redirects=False
    )
    assert response.status_code == 302
    assert response.headers["location"] == FRONTEND_URL
    token = client.cookies.get("convai_session")
    assert token
    return token
