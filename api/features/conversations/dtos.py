"""DTOs for the Conversations feature."""
from datetime import datetime

from pydantic import Field

from api.shared.dtos import BaseDTO


class ClaimConversationRequest(BaseDTO):
    """Claim ownership of an upstream conversation id."""

    # Validated by the registrar so malformed ids map to INVALID_IDENTIFIER
    conversation_id: str = Field(alias="conversationId", description="Upstream conversation id")


class ClaimConversationResponse(BaseDTO):
    conversation_id: str = Field(alias="conversationId", description="Upstream conversation id")
    claimed_at: datetime = Field(alias="claimedAt", description="When the claim was recorded")
