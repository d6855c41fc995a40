"""Router for the Auth feature: the OAuth redirect dance and session lifecycle."""
from typing import Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.di.container import ApplicationContainer as DependencyContainer
from api.features.auth.controller import AuthController
from api.features.auth.dtos import CurrentUserResponse
from api.shared.db import get_db_session
from api.shared.exceptions import IdentityExchangeError

router = APIRouter()
logger = structlog.get_logger("convai.auth.router")


@router.get("/login")
@inject
async def login(
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
):
    """Redirect to the identity provider."""
    url, state = controller.begin_login()
    response = RedirectResponse(url, status_code=302)
    response.set_cookie(
        key=controller.state_cookie_name,
        value=state,
        max_age=controller.state_ttl_seconds,
        path="/auth",
        httponly=True,
        secure=controller.session_manager.cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/callback")
@inject
async def callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Complete the exchange, start a session and send the browser back to the client."""
    try:
        token = await controller.complete_login(
            code=code,
            state=state,
            expected_state=request.cookies.get(controller.state_cookie_name),
            error=error,
            db_session=db_session,
        )
    except IdentityExchangeError as e:
        logger.warning("Login failed", reason=e.message, details=e.details)
        response = RedirectResponse(controller.failure_url, status_code=302)
        response.delete_cookie(controller.state_cookie_name, path="/auth")
        return response

    response = RedirectResponse(controller.frontend_url, status_code=302)
    response.delete_cookie(controller.state_cookie_name, path="/auth")
    controller.session_manager.set_cookie(response, token)
    return response


@router.get("/logout")
@inject
async def logout(
    request: Request,
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
):
    """Destroy the session and clear the cookie."""
    await controller.logout(controller.session_manager.token_from(request))
    response = RedirectResponse(controller.frontend_url, status_code=302)
    controller.session_manager.clear_cookie(response)
    return response


@router.get("/user", response_model=CurrentUserResponse)
@inject
async def current_user(
    request: Request,
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Current account summary, or an unauthenticated indicator."""
    return await controller.current_user(
        controller.session_manager.token_from(request), db_session=db_session
    )
