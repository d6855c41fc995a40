"""Base repository with the common query patterns used by feature repositories."""
from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.entities.base import BaseEntity
from api.shared.exceptions import DatabaseError

T = TypeVar("T", bound=BaseEntity)

# Dialects that support INSERT .. ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class BaseRepository(ABC, Generic[T]):
    """Base repository with common read operations and an atomic insert-if-absent."""

    model: Type[T]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, entity_id: str) -> Optional[T]:
        """Get entity by ID."""
        stmt = select(self.model).where(self.model.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_field(
        self, field_name: str, value: Any, limit: Optional[int] = None
    ) -> List[T]:
        """Get entities by field value."""
        field = getattr(self.model, field_name)
        stmt = select(self.model).where(field == value)

        if limit:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, **filters: Any) -> int:
        """Count entities with filters."""
        stmt = select(func.count(self.model.id))

        for field_name, value in filters.items():
            if hasattr(self.model, field_name) and value is not None:
                field = getattr(self.model, field_name)
                stmt = stmt.where(field == value)

        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def insert_if_absent(
        self, values: Dict[str, Any], conflict_columns: Sequence[str]
    ) -> bool:
        """Insert a row unless one already exists for ``conflict_columns``.

        Runs as a single ``INSERT .. ON CONFLICT DO NOTHING`` statement, so
        concurrent callers cannot lose each other's rows. Returns True when a
        row was written.
        """
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise DatabaseError(
                f"Dialect '{dialect}' does not support atomic inserts",
                {"dialect": dialect},
            )

        stmt = (
            insert(self.model)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(conflict_columns))
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
