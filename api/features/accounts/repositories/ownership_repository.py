"""Ownership repository: the set of conversation ids claimed by each account."""
from typing import List, Optional, Set

from sqlalchemy import select

from api.features.accounts.entities.account import ConversationOwnership
from api.shared.base import BaseRepository


class OwnershipRepository(BaseRepository[ConversationOwnership]):
    model = ConversationOwnership

    async def add(self, account_id: str, conversation_id: str) -> bool:
        """Atomic set-add. Returns False when the claim already existed."""
        return await self.insert_if_absent(
            {"account_id": account_id, "conversation_id": conversation_id},
            conflict_columns=["account_id", "conversation_id"],
        )

    async def get(self, account_id: str, conversation_id: str) -> Optional[ConversationOwnership]:
        stmt = select(ConversationOwnership).where(
            ConversationOwnership.account_id == account_id,
            ConversationOwnership.conversation_id == conversation_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_account(self, account_id: str) -> List[ConversationOwnership]:
        stmt = (
            select(ConversationOwnership)
            .where(ConversationOwnership.account_id == account_id)
            .order_by(ConversationOwnership.claimed_at, ConversationOwnership.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def conversation_ids(self, account_id: str) -> Set[str]:
        stmt = select(ConversationOwnership.conversation_id).where(
            ConversationOwnership.account_id == account_id
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def exists(self, account_id: str, conversation_id: str) -> bool:
        return await self.count(account_id=account_id, conversation_id=conversation_id) > 0
