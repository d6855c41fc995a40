"""Conversation gateway: upstream reads authorized against ownership claims."""
from typing import Any, Dict, List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.accounts.service import OwnershipRegistrar
from api.shared.exceptions import Forbidden, NotFoundError, UpstreamUnavailable
from infra.convai_client import ConvaiClient, ConvaiError

logger = structlog.get_logger("convai.conversations.service")


class ConversationGateway:
    def __init__(self, client: ConvaiClient, registrar: OwnershipRegistrar):
        self.client = client
        self.registrar = registrar

    async def list_for(
        self, account_id: str, *, db_session: AsyncSession
    ) -> List[Dict[str, Any]]:
        """Upstream conversations the account owns, in upstream order.

        Entries are passed through untouched. Only the first upstream page is
        considered.
        """
        owned = await self.registrar.owned_ids(account_id, db_session=db_session)

        try:
            payload = await self.client.list_conversations()
        except ConvaiError as e:
            raise UpstreamUnavailable(e.message, e.status_code) from e

        conversations = payload.get("conversations")
        if not isinstance(conversations, list):
            return []
        return [
            entry
            for entry in conversations
            if isinstance(entry, dict)
            and isinstance(entry.get("conversation_id"), str)
            and entry["conversation_id"] in owned
        ]

    async def get_transcript(
        self, account_id: str, conversation_id: str, *, db_session: AsyncSession
    ) -> List[Any]:
        # Ownership is checked before any upstream call, so a non-owner cannot
        # tell an existing conversation from a missing one.
        if not await self.registrar.is_owned(
            account_id, conversation_id, db_session=db_session
        ):
            raise Forbidden("You do not have access to this conversation")

        try:
            payload = await self.client.get_conversation(conversation_id)
        except ConvaiError as e:
            if e.status_code == 404:
                logger.warning(
                    "Owned conversation missing upstream",
                    account_id=account_id,
                    conversation_id=conversation_id,
                )
                raise NotFoundError("Conversation", conversation_id) from e
            raise UpstreamUnavailable(e.message, e.status_code) from e

        transcript = payload.get("transcript")
        if not isinstance(transcript, list):
            if transcript is not None:
                logger.warning(
                    "Upstream transcript is not a list",
                    conversation_id=conversation_id,
                    kind=type(transcript).__name__,
                )
            return []
        return transcript
