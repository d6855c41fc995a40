"""Identity provider adapters.

A provider turns an assertion it issued (for Google, an OAuth2 authorization
code) into verified identity claims. The redirect that produces the assertion
is the provider's business; the gateway only builds the URL and consumes the
result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol
from urllib.parse import urlencode

import httpx
import structlog

from api.shared.exceptions import IdentityExchangeError

logger = structlog.get_logger("convai.auth.providers")


@dataclass(frozen=True)
class ExternalIdentity:
    external_id: str
    email: str
    display_name: str

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "ExternalIdentity":
        """Build an identity from OIDC-style claims, rejecting incomplete ones."""
        external_id = str(claims.get("sub") or "").strip()
        email = str(claims.get("email") or "").strip()
        if not external_id:
            raise IdentityExchangeError("Identity assertion has no subject claim")
        if not email:
            raise IdentityExchangeError(
                "Identity assertion has no email claim", {"external_id": external_id}
            )
        if claims.get("email_verified") is False:
            raise IdentityExchangeError(
                "Identity provider reports an unverified email", {"external_id": external_id}
            )
        display_name = str(claims.get("name") or "").strip() or email
        return cls(external_id=external_id, email=email, display_name=display_name)


class IdentityProvider(Protocol):
    def authorization_url(self, state: str) -> str: ...

    async def exchange(self, assertion: str) -> ExternalIdentity: ...


class GoogleIdentityProvider:
    """Google OAuth2 authorization-code flow with the OIDC userinfo endpoint."""

    scopes = ("openid", "email", "profile")

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        auth_url: str,
        token_url: str,
        userinfo_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.auth_url = auth_url
        self.token_url = token_url
        self.userinfo_url = userinfo_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def authorization_url(self, state: str) -> str:
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "response_type": "code",
                "scope": " ".join(self.scopes),
                "state": state,
                "prompt": "select_account",
            }
        )
        return f"{self.auth_url}?{query}"

    async def exchange(self, assertion: str) -> ExternalIdentity:
        if not assertion:
            raise IdentityExchangeError("Missing authorization code")

        access_token = await self._fetch_access_token(assertion)
        claims = await self._fetch_userinfo(access_token)
        return ExternalIdentity.from_claims(claims)

    async def _fetch_access_token(self, code: str) -> str:
        payload = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        data = await self._request("POST", self.token_url, step="token", data=payload)
        access_token = data.get("access_token")
        if not access_token:
            raise IdentityExchangeError("Token response has no access_token")
        return access_token

    async def _fetch_userinfo(self, access_token: str) -> Dict[str, Any]:
        return await self._request(
            "GET",
            self.userinfo_url,
            step="userinfo",
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def _request(self, method: str, url: str, *, step: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable", step=step, error=str(e))
            raise IdentityExchangeError(f"Identity provider unreachable: {e}") from e

        if response.is_error:
            logger.warning(
                "Identity provider rejected request",
                step=step,
                status=response.status_code,
                body=response.text,
            )
            raise IdentityExchangeError(
                "Identity provider rejected the assertion",
                {"step": step, "status": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise IdentityExchangeError("Identity provider returned invalid JSON") from e
        if not isinstance(data, dict):
            raise IdentityExchangeError("Identity provider returned an unexpected payload")
        return data

    async def aclose(self) -> None:
        await self._client.aclose()
