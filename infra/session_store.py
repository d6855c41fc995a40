"""Session stores: token -> account id with expiry.

Both stores satisfy the same contract, so the session manager does not care
where the records live. Redis is used in deployments; the in-memory store
only works for a single process and is meant for local runs and tests.
"""
from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Protocol, Tuple

from infra.resources import RedisResource


class SessionStore(Protocol):
    async def set(self, token: str, account_id: str, ttl_seconds: int) -> None: ...

    async def get(self, token: str) -> Optional[str]: ...

    async def touch(self, token: str, ttl_seconds: int) -> None: ...

    async def delete(self, token: str) -> None: ...


class InMemorySessionStore:
    """Process-local store for local runs and tests.

    Expired entries are dropped when read and swept on every write.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    async def set(self, token: str, account_id: str, ttl_seconds: int) -> None:
        now = self._clock()
        self._prune(now)
        self._entries[token] = (account_id, now + ttl_seconds)

    def _prune(self, now: float) -> None:
        expired = [token for token, (_, expires_at) in self._entries.items() if now >= expires_at]
        for token in expired:
            del self._entries[token]

    async def get(self, token: str) -> Optional[str]:
        entry = self._entries.get(token)
        if entry is None:
            return None
        account_id, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(token, None)
            return None
        return account_id

    async def touch(self, token: str, ttl_seconds: int) -> None:
        entry = self._entries.get(token)
        if entry is not None:
            self._entries[token] = (entry[0], self._clock() + ttl_seconds)

    async def delete(self, token: str) -> None:
        self._entries.pop(token, None)


class RedisSessionStore:
    """Redis-backed store; expiry is enforced by key TTLs."""

    key_prefix = "session:"

    def __init__(self, redis: RedisResource):
        self.redis = redis

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    @property
    def _client(self):
        if self.redis.client is None:
            raise RuntimeError("Redis not initialized. Call init() first.")
        return self.redis.client

    async def set(self, token: str, account_id: str, ttl_seconds: int) -> None:
        await self._client.set(self._key(token), account_id, ex=ttl_seconds)

    async def get(self, token: str) -> Optional[str]:
        return await self._client.get(self._key(token))

    async def touch(self, token: str, ttl_seconds: int) -> None:
        await self._client.expire(self._key(token), ttl_seconds)

    async def delete(self, token: str) -> None:
        await self._client.delete(self._key(token))
