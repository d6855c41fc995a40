"""Add account and conversation_ownership tables

Revision ID: 20251019_add_account_tables
Revises:
Create Date: 2025-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20251019_add_account_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create account table
    op.create_table(
        "account",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("external_id", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )

    # Create ownership table
    op.create_table(
        "conversation_ownership",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("account_id", sa.String(36), nullable=False),
        sa.Column("conversation_id", sa.String(128), nullable=False),
        sa.Column("claimed_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.UniqueConstraint(
            "account_id", "conversation_id", name="uq_ownership_account_conversation"
        ),
    )

    # Add foreign key constraint
    op.create_foreign_key(
        "fk_ownership_account_id",
        "conversation_ownership",
        "account",
        ["account_id"],
        ["id"],
        ondelete="CASCADE",
    )

    # Create indexes
    op.create_index("ix_account_external_id", "account", ["external_id"], unique=True)
    op.create_index(
        "ix_conversation_ownership_account_id", "conversation_ownership", ["account_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_conversation_ownership_account_id", table_name="conversation_ownership")
    op.drop_index("ix_account_external_id", table_name="account")
    op.drop_constraint("fk_ownership_account_id", "conversation_ownership", type_="foreignkey")
    op.drop_table("conversation_ownership")
    op.drop_table("account")
