"""Account and conversation-ownership entities."""
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(BaseEntity):
    """Local record for a signed-in user, keyed by the identity provider's subject id."""

    external_id: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)


class ConversationOwnership(BaseEntity):
    """An account's claim on an upstream conversation id. Never removed."""

    __tablename__ = "conversation_ownership"
    __table_args__ = (
        UniqueConstraint(
            "account_id", "conversation_id", name="uq_ownership_account_conversation"
        ),
    )

    account_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    conversation_id: Mapped[str] = mapped_column(String(128), nullable=False)
    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
