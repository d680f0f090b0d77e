"""Database schema definition and initialization."""

from __future__ import annotations

import logging

from jokevault.storage.connection import get_connection

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """\
-- Stored jokes; text is the uniqueness key for deduplication
CREATE TABLE IF NOT EXISTS jokes (
    id          TEXT PRIMARY KEY,
    text        TEXT NOT NULL UNIQUE,
    created_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_jokes_created_at ON jokes(created_at);

-- Fetch run tracking
CREATE TABLE IF NOT EXISTS fetch_runs (
    id              TEXT PRIMARY KEY,
    started_at      TEXT NOT NULL,
    finished_at     TEXT NOT NULL,
    status          TEXT NOT NULL CHECK (status IN ('success', 'error', 'cancelled')),
    requested_count INTEGER NOT NULL,
    result          TEXT NOT NULL,   -- JSON
    error           TEXT
);
CREATE INDEX IF NOT EXISTS idx_fetch_runs_started_at ON fetch_runs(started_at);
"""


def init_db(database_path: str) -> None:
    """Create all tables and indexes if they do not already exist."""
    with get_connection(database_path) as conn:
        conn.executescript(_SCHEMA_SQL)
    logger.info("Database initialized at %s", database_path)
