"""Account repository using base repository pattern."""
from typing import Optional
from uuid import uuid4

from api.features.accounts.entities.account import Account
from api.shared.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Repository for account entities."""

    model = Account

    async def get_by_external_id(self, external_id: str) -> Optional[Account]:
        entities = await self.get_by_field("external_id", external_id, limit=1)
        return entities[0] if entities else None

    async def get_or_create(
        self, *, external_id: str, email: str, display_name: str
    ) -> Account:
        """Return the account for ``external_id``, creating it on first sight.

        The insert is a no-op when the external id already exists, so retries
        and concurrent first logins converge on a single row.
        """
        await self.insert_if_absent(
            {
                "id": str(uuid4()),
                "external_id": external_id,
                "email": email,
                "display_name": display_name,
            },
            conflict_columns=["external_id"],
        )
        account = await self.get_by_external_id(external_id)
        if account is None:
            raise RuntimeError(f"Account for external id '{external_id}' vanished after upsert")
        return account
