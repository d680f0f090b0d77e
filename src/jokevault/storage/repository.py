"""Joke persistence — repository interface and SQLite implementation."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timezone

from jokevault.errors import raise_if_cancelled
from jokevault.joke import Joke
from jokevault.storage.connection import get_connection

logger = logging.getLogger(__name__)


class JokeRepository(ABC):
    """Durable joke store that enforces uniqueness of id and text."""

    @abstractmethod
    def insert_new(self, jokes: Sequence[Joke], cancel: threading.Event | None = None) -> int:
        """Insert jokes not already stored and return how many rows were created.

        A joke whose id or text collides with a stored row, or with an earlier
        joke in the same batch, is skipped without error. The batch is applied
        atomically.
        """

    @abstractmethod
    def get_all(self) -> list[Joke]:
        """Return every stored joke."""


class SqliteJokeRepository(JokeRepository):
    """JokeRepository backed by the `jokes` table."""

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path

    @property
    def database_path(self) -> str:
        return self._database_path

    def insert_new(self, jokes: Sequence[Joke], cancel: threading.Event | None = None) -> int:
        raise_if_cancelled(cancel, "Joke insert cancelled")
        created_at = datetime.now(timezone.utc).isoformat()
        inserted = 0
        with get_connection(self._database_path) as conn:
            for joke in jokes:
                raise_if_cancelled(cancel, "Joke insert cancelled")
                cur = conn.execute(
                    "INSERT OR IGNORE INTO jokes (id, text, created_at) VALUES (?, ?, ?)",
                    (joke.id, joke.text, created_at),
                )
                inserted += cur.rowcount
        logger.debug("Inserted %d of %d jokes", inserted, len(jokes))
        return inserted

    def get_all(self) -> list[Joke]:
        with get_connection(self._database_path) as conn:
            rows = conn.execute(
                "SELECT id, text FROM jokes ORDER BY created_at, id"
            ).fetchall()
        return [Joke(id=row["id"], text=row["text"]) for row in rows]
