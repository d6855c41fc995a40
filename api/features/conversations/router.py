"""Router for the Conversations feature. Every route sits behind the access gate."""
from typing import Any, Dict, List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.accounts.models import AccountModel
from api.features.auth.gate import require_account
from api.features.conversations.controller import ConversationController
from api.features.conversations.dtos import (
    ClaimConversationRequest,
    ClaimConversationResponse,
)
from api.shared.db import get_db_session
from api.shared.dtos import ErrorResponse

router = APIRouter(
    dependencies=[Depends(require_account)],
    responses={
        401: {"model": ErrorResponse, "description": "No live session"},
        403: {"model": ErrorResponse, "description": "Conversation not owned"},
        502: {"model": ErrorResponse, "description": "Upstream failure"},
    },
)


@router.get("", response_model=List[Dict[str, Any]])
@inject
async def list_conversations(
    account: AccountModel = Depends(require_account),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Upstream conversations owned by the signed-in account."""
    return await controller.list_conversations(account, db_session=db_session)


@router.post(
    "",
    response_model=ClaimConversationResponse,
    status_code=status.HTTP_201_CREATED,
)
@inject
async def claim_conversation(
    request: ClaimConversationRequest,
    account: AccountModel = Depends(require_account),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Record that the signed-in account owns an upstream conversation."""
    return await controller.claim_conversation(
        account, request.conversation_id, db_session=db_session
    )


@router.get("/{conversation_id}", response_model=List[Any])
@inject
async def get_transcript(
    conversation_id: str,
    account: AccountModel = Depends(require_account),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Transcript of an owned conversation."""
    return await controller.get_transcript(
        account, conversation_id, db_session=db_session
    )
