"""Tests for jokevault.config."""

import os

import pytest

from jokevault.config import Config, load_config
from jokevault.fetching.fetcher import FetcherOptions

REQUIRED_ENV = {
    "DATABASE_PATH": "./test.db",
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove all config-related env vars before each test."""
    for key in list(os.environ):
        if key in REQUIRED_ENV or key.startswith(("JOKE_API_", "FETCH_")):
            monkeypatch.delenv(key, raising=False)
    for key in ("MAX_PARALLELISM", "LOG_LEVEL", "LOG_FORMAT", "APP_ENV"):
        monkeypatch.delenv(key, raising=False)
    # Prevent .env file from re-setting variables during tests
    monkeypatch.setattr("jokevault.config.load_dotenv", lambda *a, **kw: None)


def test_missing_required_vars_raises():
    """load_config raises ValueError listing all missing required variables."""
    with pytest.raises(ValueError, match="Missing required environment variables: DATABASE_PATH"):
        load_config()


def test_load_config_with_required_vars(monkeypatch):
    """Config loads successfully when all required vars are set, with correct defaults."""
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)

    config = load_config()

    assert config.database_path == "./test.db"

    # Defaults
    assert config.joke_api_base_url == "https://api.chucknorris.io"
    assert config.joke_api_key == ""
    assert config.joke_api_host == "matchilling-chuck-norris-jokes-v1.p.rapidapi.com"
    assert config.joke_api_timeout_seconds == 15
    assert config.joke_api_max_retries == 3
    assert config.fetch_count == 10
    assert config.max_parallelism == 10
    assert config.fetch_schedule_cron == "0 * * * *"
    assert config.fetch_timezone == "UTC"
    assert config.log_level == "INFO"
    assert config.log_format == "json"
    assert config.app_env == "production"


def test_optional_overrides(monkeypatch):
    """Optional vars override defaults when set."""
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("JOKE_API_BASE_URL", "https://example.test")
    monkeypatch.setenv("JOKE_API_KEY", "secret")
    monkeypatch.setenv("FETCH_COUNT", "25")
    monkeypatch.setenv("MAX_PARALLELISM", "4")
    monkeypatch.setenv("FETCH_SCHEDULE_CRON", "*/5 * * * *")
    monkeypatch.setenv("LOG_FORMAT", "text")

    config = load_config()

    assert config.joke_api_base_url == "https://example.test"
    assert config.joke_api_key == "secret"
    assert config.fetch_count == 25
    assert config.max_parallelism == 4
    assert config.fetch_schedule_cron == "*/5 * * * *"
    assert config.log_format == "text"


@pytest.mark.parametrize("value", ["0", "-2"])
def test_low_max_parallelism_runs_one_worker(monkeypatch, value):
    monkeypatch.setenv("DATABASE_PATH", "./test.db")
    monkeypatch.setenv("MAX_PARALLELISM", value)

    config = load_config()

    assert config.max_parallelism == int(value)
    assert config.fetcher_options().effective_parallelism == 1


def test_non_integer_value_names_variable(monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "./test.db")
    monkeypatch.setenv("FETCH_COUNT", "lots")

    with pytest.raises(ValueError, match="FETCH_COUNT"):
        load_config()


def test_fetcher_options_from_config():
    config = Config(database_path="x.db", fetch_count=7, max_parallelism=0)

    options = config.fetcher_options()

    assert options == FetcherOptions(count=7, max_parallelism=0)
    assert options.effective_parallelism == 1


def test_config_is_frozen():
    config = Config(database_path="x.db")
    with pytest.raises(AttributeError):
        config.database_path = "other.db"  # type: ignore[misc]
