from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from api.features.accounts.repositories.account_repository import AccountRepository
from api.features.auth.providers import ExternalIdentity
from api.features.auth.service import IdentityService
from api.shared.exceptions import IdentityExchangeError


def test_claims_map_to_identity():
    identity = ExternalIdentity.from_claims(
        {"sub": "g-1", "email": "ada@example.com", "name": "Ada Lovelace"}
    )
    assert identity == ExternalIdentity("g-1", "ada@example.com", "Ada Lovelace")


def test_display_name_falls_back_to_email():
    identity = ExternalIdentity.from_claims({"sub": "g-1", "email": "ada@example.com"})
    assert identity.display_name == "ada@example.com"


@pytest.mark.parametrize(
    "claims",
    [
        {"email": "ada@example.com"},
        {"sub": "g-1"},
        {"sub": "g-1", "email": "  "},
        {"sub": "g-1", "email": "ada@example.com", "email_verified": False},
    ],
)
def test_incomplete_claims_are_rejected(claims):
    with pytest.raises(IdentityExchangeError):
        ExternalIdentity.from_claims(claims)


def test_authorization_url(google_stub):
    url = google_stub.provider().authorization_url("state-123")
    parsed = urlparse(url)
    query = parse_qs(parsed.query)

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://oauth.test/auth"
    assert query["state"] == ["state-123"]
    assert query["client_id"] == ["client-id"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["openid email profile"]


@pytest.mark.asyncio
async def test_exchange_returns_identity(google_stub):
    identity = await google_stub.provider().exchange("auth-code")

    assert identity == ExternalIdentity("g-1", "ada@example.com", "Ada Lovelace")
    [token_request] = google_stub.token_requests
    assert token_request["code"] == ["auth-code"]
    assert token_request["grant_type"] == ["authorization_code"]
    assert token_request["client_secret"] == ["client-secret"]


@pytest.mark.asyncio
async def test_exchange_rejected_by_provider(google_stub):
    google_stub.token_status = 400
    with pytest.raises(IdentityExchangeError):
        await google_stub.provider().exchange("bad-code")


@pytest.mark.asyncio
async def test_exchange_without_email_claim(google_stub):
    google_stub.claims = {"sub": "g-1", "name": "No Email"}
    with pytest.raises(IdentityExchangeError):
        await google_stub.provider().exchange("auth-code")


@pytest.mark.asyncio
async def test_exchange_without_code(google_stub):
    with pytest.raises(IdentityExchangeError):
        await google_stub.provider().exchange("")
    assert google_stub.token_requests == []


@pytest.mark.asyncio
async def test_exchange_when_provider_unreachable():
    from api.features.auth.providers import GoogleIdentityProvider

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = GoogleIdentityProvider(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://testserver/auth/callback",
        auth_url="https://oauth.test/auth",
        token_url="https://oauth.test/token",
        userinfo_url="https://oauth.test/userinfo",
        transport=httpx.MockTransport(handler),
    )
    with pytest.raises(IdentityExchangeError):
        await provider.exchange("auth-code")


@pytest.mark.asyncio
async def test_first_sign_in_creates_account(db_session):
    account = await IdentityService().sign_in(
        ExternalIdentity("g-1", "ada@example.com", "Ada"), db_session=db_session
    )

    assert account.external_id == "g-1"
    assert account.email == "ada@example.com"
    assert account.ownerships == []


@pytest.mark.asyncio
async def test_repeated_sign_in_reuses_account(db_session):
    service = IdentityService()
    first = await service.sign_in(
        ExternalIdentity("g-1", "ada@example.com", "Ada"), db_session=db_session
    )
    second = await service.sign_in(
        ExternalIdentity("g-1", "ada@new.example.com", "Ada L."), db_session=db_session
    )

    assert second.id == first.id
    assert second.email == "ada@example.com"
    assert await AccountRepository(db_session).count(external_id="g-1") == 1


@pytest.mark.asyncio
async def test_distinct_external_ids_get_distinct_accounts(db_session):
    service = IdentityService()
    a = await service.sign_in(ExternalIdentity("g-1", "a@example.com", "A"), db_session=db_session)
    b = await service.sign_in(ExternalIdentity("g-2", "b@example.com", "B"), db_session=db_session)
    assert a.id != b.id


@pytest.mark.asyncio
async def test_sign_in_requires_email(db_session):
    with pytest.raises(IdentityExchangeError):
        await IdentityService().sign_in(ExternalIdentity("g-1", "", "Ada"), db_session=db_session)
    assert await AccountRepository(db_session).count() == 0
