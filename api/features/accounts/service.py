"""Service layer for the Accounts feature: account lookup and the ownership registrar."""
from typing import List, Optional, Set

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.accounts.models import AccountModel, OwnershipModel
from api.features.accounts.repositories.account_repository import AccountRepository
from api.features.accounts.repositories.ownership_repository import OwnershipRepository
from api.features.accounts.validators import ConversationIdValidator

logger = structlog.get_logger("convai.accounts.service")


class AccountService:
    """Read access to account records."""

    async def get_account(
        self, account_id: str, *, db_session: AsyncSession
    ) -> Optional[AccountModel]:
        entity = await AccountRepository(db_session).get_by_id(account_id)
        return AccountModel.from_entity(entity) if entity else None

    async def get_account_summary(
        self, account_id: str, *, db_session: AsyncSession
    ) -> Optional[AccountModel]:
        """Account plus its ordered ownership records."""
        entity = await AccountRepository(db_session).get_by_id(account_id)
        if entity is None:
            return None
        ownerships = await OwnershipRegistrar().list_ownerships(
            account_id, db_session=db_session
        )
        return AccountModel.from_entity(entity).model_copy(update={"ownerships": ownerships})


class OwnershipRegistrar:
    """Records which upstream conversation ids an account may read.

    Claims have set semantics: claiming an id twice is a no-op that returns
    the original record. There is no way to give up a claim.
    """

    async def claim(
        self, account_id: str, conversation_id: str, *, db_session: AsyncSession
    ) -> OwnershipModel:
        conversation_id = ConversationIdValidator.validate(conversation_id)
        repository = OwnershipRepository(db_session)

        created = await repository.add(account_id, conversation_id)
        record = await repository.get(account_id, conversation_id)
        # Commit so the claim is visible to the account's next request
        await db_session.commit()

        if created:
            logger.info(
                "Conversation claimed", account_id=account_id, conversation_id=conversation_id
            )
        return OwnershipModel.from_entity(record)

    async def owned_ids(self, account_id: str, *, db_session: AsyncSession) -> Set[str]:
        return await OwnershipRepository(db_session).conversation_ids(account_id)

    async def is_owned(
        self, account_id: str, conversation_id: str, *, db_session: AsyncSession
    ) -> bool:
        return await OwnershipRepository(db_session).exists(account_id, conversation_id)

    async def list_ownerships(
        self, account_id: str, *, db_session: AsyncSession
    ) -> List[OwnershipModel]:
        """Ownership records, oldest claim first."""
        records = await OwnershipRepository(db_session).list_for_account(account_id)
        return [OwnershipModel.from_entity(record) for record in records]
