"""SQLAlchemy metadata definitions for local account tables."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()

accounts = sa.Table(
    "accounts",
    metadata,
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

nick_aliases = sa.Table(
    "nick_aliases",
    metadata,
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

sa.Index("ix_nick_aliases_account_id", nick_aliases.c.account_id)
sa.Index(
    "uq_nick_aliases_nick_lower",
    sa.func.lower(nick_aliases.c.nick),
    unique=True,
)
