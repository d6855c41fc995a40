"""Request-scoped database session dependency shared by every router."""
from typing import AsyncIterator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer
from infra.resources import DatabaseResource


@inject
async def get_db_session(
    db: DatabaseResource = Depends(
        Provide[ApplicationContainer.infrastructure.database]
    ),
) -> AsyncIterator[AsyncSession]:
    """One AsyncSession per request, closed when the response is done.

    Services decide when to commit; anything left uncommitted is rolled back on close.
    """
    async with db.get_session() as session:
        yield session
