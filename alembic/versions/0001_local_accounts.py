"""Local account cores and nickname aliases."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0001_local_accounts"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("display_nick", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_table(
        "nick_aliases",
        sa.Column("nick", sa.Text(), primary_key=True, nullable=False),
        sa.Column(
            "account_id",
            sa.Uuid(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_nick_aliases_account_id", "nick_aliases", ["account_id"])
    op.create_index(
        "uq_nick_aliases_nick_lower",
        "nick_aliases",
        [sa.text("lower(nick)")],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("uq_nick_aliases_nick_lower", table_name="nick_aliases")
    op.drop_index("ix_nick_aliases_account_id", table_name="nick_aliases")
    op.drop_table("nick_aliases")
    op.drop_table("accounts")
