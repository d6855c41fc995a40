"""Infrastructure resources: DB, Redis.

This module is part of the infra layer and must not import from application features.
"""
from typing import Any, Dict, Optional

import redis.asyncio as aioredis
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str, connect_args: Optional[Dict[str, Any]] = None):
        self.database_url = str(database_url)
        self.connect_args = connect_args or {}
        self.engine: Optional[AsyncEngine] = None
        self.session_factory = None

    async def init(self):
        """Initialize database connection."""
        if self.engine is not None:
            return self
        self.engine = create_async_engine(
            self.database_url,
            echo=False,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args=self.connect_args,
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def create_all(self, metadata: MetaData) -> None:
        """Create missing tables; used for local and test databases only."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


class RedisResource:
    """Redis resource for dependency injection."""

    def __init__(self, redis_url: str):
        self.redis_url = str(redis_url)
        self.client: Optional[aioredis.Redis] = None

    async def init(self):
        """Create the client; no connection is opened until first use."""
        if self.client is None:
            self.client = aioredis.from_url(self.redis_url, decode_responses=True)
        return self

    async def connect(self):
        """Verify the server is reachable."""
        if self.client is None:
            await self.init()
        await self.client.ping()

    async def disconnect(self):
        """Disconnect from Redis."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None
