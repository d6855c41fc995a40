"""Identity service: maps a verified external identity onto a local account."""
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.accounts.models import AccountModel
from api.features.accounts.repositories.account_repository import AccountRepository
from api.features.auth.providers import ExternalIdentity
from api.shared.exceptions import IdentityExchangeError

logger = structlog.get_logger("convai.auth.service")


class IdentityService:
    async def sign_in(
        self, identity: ExternalIdentity, *, db_session: AsyncSession
    ) -> AccountModel:
        """Find or create the account for ``identity.external_id``.

        Safe to retry: the account row is written at most once per external id.
        """
        if not identity.external_id or not identity.email:
            raise IdentityExchangeError(
                "Identity is missing required claims",
                {"external_id": identity.external_id or None},
            )

        repository = AccountRepository(db_session)
        account = await repository.get_or_create(
            external_id=identity.external_id,
            email=identity.email,
            display_name=identity.display_name or identity.email,
        )
        await db_session.commit()

        logger.info("Account signed in", account_id=account.id)
        return AccountModel.from_entity(account)
