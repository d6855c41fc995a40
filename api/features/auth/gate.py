"""Access gate for protected routers.

Install ``require_account`` as a router-level dependency; every route on that
router then runs only for requests carrying a live session. The resolved
account is also stored on ``request.state.account``.
"""
import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.accounts.models import AccountModel
from api.features.accounts.service import AccountService
from api.features.auth.sessions import SessionManager
from api.shared.db import get_db_session
from api.shared.exceptions import Unauthenticated

logger = structlog.get_logger("convai.auth.gate")


@inject
async def require_account(
    request: Request,
    session_manager: SessionManager = Depends(
        Provide[DependencyContainer.services.session_manager]
    ),
    account_service: AccountService = Depends(
        Provide[DependencyContainer.services.account_service]
    ),
    db_session: AsyncSession = Depends(get_db_session),
) -> AccountModel:
    account_id = await session_manager.resolve(session_manager.token_from(request))
    if account_id is None:
        raise Unauthenticated()

    account = await account_service.get_account(account_id, db_session=db_session)
    if account is None:
        # Session outlived its account record
        logger.warning("Session references unknown account", account_id=account_id)
        raise Unauthenticated()

    request.state.account = account
    return account
