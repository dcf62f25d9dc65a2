"""Create guild_configs, guild_stats and transcripts tables

Revision ID: 4c1e9a7d2b30
Revises:
Create Date: 2026-10-19 11:20:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '4c1e9a7d2b30'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "guild_configs",
        sa.Column("guild_id", sa.BigInteger, primary_key=True),
        sa.Column("config_json", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "guild_stats",
        sa.Column("guild_id", sa.BigInteger, primary_key=True),
        sa.Column("stats_json", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "transcripts",
        sa.Column("key", sa.String(200), primary_key=True),
        sa.Column("html", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("transcripts")
    op.drop_table("guild_stats")
    op.drop_table("guild_configs")
