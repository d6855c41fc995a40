"""Session manager: opaque client tokens mapped to account ids."""
import secrets
from typing import Optional

from fastapi import Request, Response

from infra.session_store import SessionStore


class SessionManager:
    """Creates, resolves and destroys sessions, and owns the cookie that carries them.

    Expiry is either fixed (set once at login) or sliding (renewed on every
    successful resolve), depending on ``sliding``.
    """

    TOKEN_BYTES = 32

    def __init__(
        self,
        store: SessionStore,
        ttl_seconds: int,
        sliding: bool = False,
        cookie_name: str = "convai_session",
        cookie_secure: bool = True,
        cookie_samesite: str = "lax",
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.sliding = sliding
        self.cookie_name = cookie_name
        self.cookie_secure = cookie_secure
        self.cookie_samesite = cookie_samesite

    async def create_session(self, account_id: str) -> str:
        token = secrets.token_urlsafe(self.TOKEN_BYTES)
        await self.store.set(token, account_id, self.ttl_seconds)
        return token

    async def resolve(self, token: Optional[str]) -> Optional[str]:
        """Account id for a live token; None means unauthenticated."""
        if not token:
            return None
        account_id = await self.store.get(token)
        if account_id and self.sliding:
            await self.store.touch(token, self.ttl_seconds)
        return account_id or None

    async def destroy(self, token: Optional[str]) -> None:
        if token:
            await self.store.delete(token)

    def token_from(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.cookie_name)

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.ttl_seconds,
            path="/",
            httponly=True,
            secure=self.cookie_secure,
            samesite=self.cookie_samesite,
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.cookie_secure,
            samesite=self.cookie_samesite,
        )
