"""Entity registry to ensure SQLAlchemy loads all table metadata.

Import all entity modules here so Alembic and ``DATABASE_AUTO_CREATE`` can
discover them.
"""
# Import base first to expose BaseEntity.metadata
from api.shared.entities.base import BaseEntity  # noqa: F401

# Feature: Accounts
from api.features.accounts.entities.account import Account, ConversationOwnership  # noqa: F401
