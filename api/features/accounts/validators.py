"""Validators for conversation identifiers supplied by clients."""
import re

from api.shared.exceptions import InvalidIdentifier


class ConversationIdValidator:
    # Upstream ids look like "conv_01jx..."; anything else is rejected before
    # it reaches the database or an upstream URL path.
    PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
    MAX_LENGTH = 128

    @classmethod
    def validate(cls, conversation_id: object) -> str:
        """Return the normalized id or raise ``InvalidIdentifier``."""
        if not isinstance(conversation_id, str):
            raise InvalidIdentifier("conversationId must be a string")

        normalized = conversation_id.strip()
        if not normalized:
            raise InvalidIdentifier("conversationId must not be empty")
        if len(normalized) > cls.MAX_LENGTH:
            raise InvalidIdentifier(
                f"conversationId must be at most {cls.MAX_LENGTH} characters",
                {"length": len(normalized)},
            )
        if not cls.PATTERN.match(normalized):
            raise InvalidIdentifier(
                "conversationId may only contain letters, digits, '-' and '_'",
                {"conversation_id": normalized},
            )
        return normalized
