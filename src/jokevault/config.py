"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from jokevault.fetching.chuck_norris import DEFAULT_BASE_URL, DEFAULT_RAPIDAPI_HOST
from jokevault.fetching.fetcher import FetcherOptions


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    # Required
    database_path: str

    # Optional — Joke API
    joke_api_base_url: str = DEFAULT_BASE_URL
    joke_api_key: str = ""
    joke_api_host: str = DEFAULT_RAPIDAPI_HOST
    joke_api_timeout_seconds: int = 15
    joke_api_max_retries: int = 3

    # Optional — Fetching
    fetch_count: int = 10
    max_parallelism: int = 10
    fetch_schedule_cron: str = "0 * * * *"
    fetch_timezone: str = "UTC"

    # Optional — Application
    log_level: str = "INFO"
    log_format: str = "json"
    app_env: str = "production"

    def fetcher_options(self) -> FetcherOptions:
        return FetcherOptions(
            count=self.fetch_count,
            max_parallelism=self.max_parallelism,
        )


_REQUIRED_VARS = [
    "DATABASE_PATH",
]


def _int_env(name: str, default: str) -> int:
    raw = os.environ.get(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    that all required variables are set. Raises ValueError listing any
    missing variables, or naming a numeric variable that does not parse.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [var for var in _REQUIRED_VARS if not os.environ.get(var)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return Config(
        # Required
        database_path=os.environ["DATABASE_PATH"],
        # Optional — Joke API
        joke_api_base_url=os.environ.get("JOKE_API_BASE_URL", DEFAULT_BASE_URL),
        joke_api_key=os.environ.get("JOKE_API_KEY", ""),
        joke_api_host=os.environ.get("JOKE_API_HOST", DEFAULT_RAPIDAPI_HOST),
        joke_api_timeout_seconds=_int_env("JOKE_API_TIMEOUT_SECONDS", "15"),
        joke_api_max_retries=_int_env("JOKE_API_MAX_RETRIES", "3"),
        # Optional — Fetching
        fetch_count=_int_env("FETCH_COUNT", "10"),
        max_parallelism=_int_env("MAX_PARALLELISM", "10"),
        fetch_schedule_cron=os.environ.get("FETCH_SCHEDULE_CRON", "0 * * * *"),
        fetch_timezone=os.environ.get("FETCH_TIMEZONE", "UTC"),
        # Optional — Application
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        app_env=os.environ.get("APP_ENV", "production"),
    )
