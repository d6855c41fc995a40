"""Domain models for the Accounts feature."""
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from api.features.accounts.entities.account import (
    Account as AccountEntity,
    ConversationOwnership as OwnershipEntity,
)


class OwnershipModel(BaseModel):
    """An account's claim on one upstream conversation."""

    conversation_id: str = Field(description="Upstream conversation identifier")
    claimed_at: datetime = Field(description="When the claim was recorded")

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, entity: OwnershipEntity) -> "OwnershipModel":
        return cls(conversation_id=entity.conversation_id, claimed_at=entity.claimed_at)


class AccountModel(BaseModel):
    """Domain model for Account."""

    id: str = Field(description="Account identifier")
    external_id: str = Field(description="Identity provider subject id")
    email: str = Field(description="Account email")
    display_name: str = Field(description="Name shown in the client")
    ownerships: List[OwnershipModel] = Field(
        default_factory=list, description="Claimed conversations, oldest first"
    )

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, entity: AccountEntity) -> "AccountModel":
        return cls(
            id=entity.id,
            external_id=entity.external_id,
            email=entity.email,
            display_name=entity.display_name,
        )
