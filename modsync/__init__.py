"""
ModSync — Synchronized Auto-Moderation for Discord
====================================================
A rule-evaluation bot that enforces per-community moderation settings,
paired with a backend that owns those settings, folds moderation and
ticket events into running statistics, and pushes live updates to every
connected dashboard.

Package layout::

    modsync/
    ├── config.py          # YAML → typed Python config
    ├── errors.py          # Error taxonomy shared by bot and API
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # Config, stats and transcript tables
    ├── engine/
    │   ├── automod_config.py  # Typed decoding of the config document
    │   ├── cache.py       # Read-through TTL cache in front of the API
    │   ├── events.py      # DomainEvent + the stats fold
    │   ├── rules.py       # Violation detection in fixed priority order
    │   └── sanctions.py   # Independent sanction actions + outcome report
    ├── services/
    │   ├── backend_client.py  # httpx client the bot uses to reach the API
    │   ├── broadcast.py   # WebSocket connection manager (fan-out)
    │   ├── config_store.py    # Config document read/write
    │   ├── stats_service.py   # Stats read + event ingestion
    │   └── transcript_store.py # Ticket transcript put/get
    ├── bot/
    │   ├── core.py        # Bot subclass, cog loader
    │   └── cogs/
    │       └── automod.py # on_message enforcement pipeline
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Shared-secret auth + engine/hub injection
        └── routes/        # config, events/stats, transcripts, websocket
"""

__version__ = "0.1.0"
