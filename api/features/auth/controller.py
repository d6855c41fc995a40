"""Controller for the Auth feature - orchestrates provider, sessions and accounts."""
import secrets
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.accounts.service import AccountService
from api.features.auth.dtos import AccountSummaryDTO, CurrentUserResponse
from api.features.auth.providers import IdentityProvider
from api.features.auth.service import IdentityService
from api.features.auth.sessions import SessionManager
from api.shared.exceptions import IdentityExchangeError

logger = structlog.get_logger("convai.auth.controller")


class AuthController:
    """Login, callback, logout and current-user operations."""

    STATE_BYTES = 16

    def __init__(
        self,
        identity_provider: IdentityProvider,
        identity_service: IdentityService,
        session_manager: SessionManager,
        account_service: AccountService,
        frontend_url: str,
        failure_url: str,
        state_cookie_name: str = "oauth_state",
        state_ttl_seconds: int = 600,
    ):
        self.identity_provider = identity_provider
        self.identity_service = identity_service
        self.session_manager = session_manager
        self.account_service = account_service
        self.frontend_url = frontend_url
        self.failure_url = failure_url
        self.state_cookie_name = state_cookie_name
        self.state_ttl_seconds = state_ttl_seconds

    def begin_login(self) -> tuple[str, str]:
        """Return (provider redirect URL, anti-forgery state)."""
        state = secrets.token_urlsafe(self.STATE_BYTES)
        return self.identity_provider.authorization_url(state), state

    async def complete_login(
        self,
        *,
        code: Optional[str],
        state: Optional[str],
        expected_state: Optional[str],
        error: Optional[str],
        db_session: AsyncSession,
    ) -> str:
        """Validate the callback, sign the user in, and return a new session token."""
        if error:
            raise IdentityExchangeError(f"Identity provider returned error: {error}")
        if not state or not expected_state or not secrets.compare_digest(state, expected_state):
            raise IdentityExchangeError("OAuth state mismatch")
        if not code:
            raise IdentityExchangeError("Missing authorization code")

        identity = await self.identity_provider.exchange(code)
        account = await self.identity_service.sign_in(identity, db_session=db_session)
        return await self.session_manager.create_session(account.id)

    async def logout(self, token: Optional[str]) -> None:
        await self.session_manager.destroy(token)
        logger.info("Session destroyed")

    async def current_user(
        self, token: Optional[str], *, db_session: AsyncSession
    ) -> CurrentUserResponse:
        account_id = await self.session_manager.resolve(token)
        if account_id is None:
            return CurrentUserResponse(authenticated=False)

        account = await self.account_service.get_account_summary(
            account_id, db_session=db_session
        )
        if account is None:
            return CurrentUserResponse(authenticated=False)
        return CurrentUserResponse(
            authenticated=True, user=AccountSummaryDTO.from_model(account)
        )
