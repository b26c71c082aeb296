"""
TaskQuest — Streaks & Badges for Task Completion
=================================================
Turns a stream of "task completed" events into a daily streak, a running
completion count, and one-time badge unlocks.

Package layout::

    taskquest/
    ├── config.py          # YAML → typed Python config
    ├── exceptions.py      # Error taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # profiles, badge_unlocks
    ├── engine/
    │   ├── streak.py      # Profile + daily streak transition
    │   └── badges.py      # Badge catalog, context assembly, evaluation
    ├── services/
    │   ├── store.py               # Persistence contract + SQLAlchemy store
    │   ├── gamification_service.py  # Completion pipeline + reads
    │   └── log_buffer.py          # Recent log records for diagnostics
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # JWT identity, engine, service wiring
        └── routes/        # /me and /diagnostics endpoints
"""

__version__ = "0.1.0"
