"""Storage layer — SQLite database access and schema management."""

from jokevault.storage.connection import get_connection
from jokevault.storage.repository import JokeRepository, SqliteJokeRepository
from jokevault.storage.schema import init_db

__all__ = ["JokeRepository", "SqliteJokeRepository", "get_connection", "init_db"]
