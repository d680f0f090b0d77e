"""Job functions — a single fetch run with run bookkeeping."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone

from jokevault.config import Config
from jokevault.errors import FetchCancelled
from jokevault.fetching.chuck_norris import ChuckNorrisApi
from jokevault.fetching.fetcher import FetchResult, JokeFetcher
from jokevault.storage.connection import get_connection
from jokevault.storage.repository import SqliteJokeRepository

logger = logging.getLogger(__name__)


def _record_run(
    database_path: str,
    started_at: str,
    requested_count: int,
    result: dict,
    status: str = "success",
    error: str | None = None,
) -> None:
    """Insert a fetch run record into the fetch_runs table."""
    finished_at = datetime.now(timezone.utc).isoformat()
    with get_connection(database_path) as conn:
        conn.execute(
            "INSERT INTO fetch_runs "
            "(id, started_at, finished_at, status, requested_count, result, error) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                str(uuid.uuid4()),
                started_at,
                finished_at,
                status,
                requested_count,
                json.dumps(result),
                error,
            ),
        )


def build_source(config: Config) -> ChuckNorrisApi:
    """Create the HTTP joke source described by the config."""
    return ChuckNorrisApi(
        config.joke_api_base_url,
        api_key=config.joke_api_key,
        api_host=config.joke_api_host,
        timeout=config.joke_api_timeout_seconds,
        max_retries=config.joke_api_max_retries,
    )


def run_fetch(
    config: Config,
    count: int | None = None,
    cancel: threading.Event | None = None,
) -> FetchResult:
    """Fetch jokes once, store the new ones, and record the run.

    Failures are logged and recorded in fetch_runs, then re-raised so the
    caller decides whether to retry.
    """
    requested = config.fetch_count if count is None else count
    started_at = datetime.now(timezone.utc).isoformat()
    repository = SqliteJokeRepository(config.database_path)

    try:
        with build_source(config) as source:
            fetcher = JokeFetcher(source, repository, config.fetcher_options())
            result = fetcher.fetch_and_store(requested, cancel)
    except FetchCancelled as exc:
        logger.warning("Joke fetch cancelled: %s", exc)
        _record_run(
            config.database_path, started_at, requested, {},
            status="cancelled", error=str(exc),
        )
        raise
    except Exception as exc:
        logger.exception("Failed to fetch jokes")
        _record_run(
            config.database_path, started_at, requested, {},
            status="error", error=f"{type(exc).__name__}: {exc}",
        )
        raise

    _record_run(config.database_path, started_at, requested, result.as_dict())
    logger.info(
        "Success: %d fetched, %d unique, %d saved",
        result.total_fetched, result.unique_fetched, result.saved_to_database,
    )
    return result
