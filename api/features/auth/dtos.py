"""DTOs for the Auth feature."""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from api.features.accounts.models import AccountModel
from api.shared.dtos import BaseDTO


class OwnedConversationDTO(BaseDTO):
    conversation_id: str = Field(alias="conversationId", description="Upstream conversation id")
    claimed_at: datetime = Field(alias="claimedAt", description="Claim timestamp")


class AccountSummaryDTO(BaseDTO):
    """What the client sees of the signed-in account."""

    id: str = Field(description="Account identifier")
    email: str = Field(description="Account email")
    display_name: str = Field(alias="displayName", description="Name shown in the client")
    conversations: List[OwnedConversationDTO] = Field(
        default_factory=list, description="Claimed conversations, oldest first"
    )

    @classmethod
    def from_model(cls, account: AccountModel) -> "AccountSummaryDTO":
        return cls(
            id=account.id,
            email=account.email,
            display_name=account.display_name,
            conversations=[
                OwnedConversationDTO(
                    conversation_id=o.conversation_id, claimed_at=o.claimed_at
                )
                for o in account.ownerships
            ],
        )


class CurrentUserResponse(BaseDTO):
    authenticated: bool = Field(description="Whether the request carries a live session")
    user: Optional[AccountSummaryDTO] = Field(default=None, description="Signed-in account")
