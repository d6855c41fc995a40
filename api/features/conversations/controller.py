"""Controller for the Conversations feature."""
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.accounts.models import AccountModel
from api.features.accounts.service import OwnershipRegistrar
from api.features.conversations.dtos import ClaimConversationResponse
from api.features.conversations.service import ConversationGateway


class ConversationController:
    """Controller handling owned conversation listing, claims and transcripts."""

    def __init__(self, gateway: ConversationGateway, registrar: OwnershipRegistrar):
        self.gateway = gateway
        self.registrar = registrar

    async def list_conversations(
        self, account: AccountModel, *, db_session: AsyncSession
    ) -> List[Dict[str, Any]]:
        return await self.gateway.list_for(account.id, db_session=db_session)

    async def claim_conversation(
        self, account: AccountModel, conversation_id: str, *, db_session: AsyncSession
    ) -> ClaimConversationResponse:
        record = await self.registrar.claim(account.id, conversation_id, db_session=db_session)
        return ClaimConversationResponse(
            conversation_id=record.conversation_id, claimed_at=record.claimed_at
        )

    async def get_transcript(
        self, account: AccountModel, conversation_id: str, *, db_session: AsyncSession
    ) -> List[Any]:
        return await self.gateway.get_transcript(
            account.id, conversation_id, db_session=db_session
        )
