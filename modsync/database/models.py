"""
modsync.database.models — SQLAlchemy 2.0 Data Models
=====================================================

Tables:
- guild_configs  — One moderation config document per guild (last write wins)
- guild_stats    — One running counters document per guild
- transcripts    — Ticket transcripts stored as raw HTML by key

Documents are stored whole as JSONB.  There is no version column and no
row lock: every write replaces the document.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all ModSync ORM models."""


# ---------------------------------------------------------------------------
# GuildConfig — the authoritative moderation settings per guild
# ---------------------------------------------------------------------------
class GuildConfig(Base):
    __tablename__ = "guild_configs"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    config_json: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<GuildConfig guild={self.guild_id}>"


# ---------------------------------------------------------------------------
# GuildStats — folded event counters per guild
# ---------------------------------------------------------------------------
class GuildStats(Base):
    __tablename__ = "guild_stats"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    stats_json: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<GuildStats guild={self.guild_id} stats={self.stats_json!r}>"


# ---------------------------------------------------------------------------
# Transcript — closed-ticket HTML archive
# ---------------------------------------------------------------------------
class Transcript(Base):
    __tablename__ = "transcripts"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    html: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Transcript key={self.key!r} size={len(self.html)}>"
