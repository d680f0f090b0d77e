"""Tests for jokevault.main — CLI commands and scheduler wiring."""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from jokevault import main as main_mod
from jokevault.config import Config
from jokevault.errors import UpstreamError
from jokevault.fetching.fetcher import FetchResult
from jokevault.joke import Joke
from jokevault.storage import SqliteJokeRepository, init_db

runner = CliRunner()


@pytest.fixture()
def env(tmp_path, monkeypatch):
    """Point the CLI at a temp database and keep logging untouched."""
    for key in list(os.environ):
        if key.startswith(("JOKE_API_", "FETCH_")) or key == "MAX_PARALLELISM":
            monkeypatch.delenv(key, raising=False)
    db_path = str(tmp_path / "cli.db")
    monkeypatch.setenv("DATABASE_PATH", db_path)
    monkeypatch.setattr("jokevault.config.load_dotenv", lambda *a, **kw: None)
    monkeypatch.setattr(main_mod, "_setup_logging", lambda *a, **kw: None)
    return db_path


def test_run_prints_stats(env, monkeypatch):
    captured = {}

    def fake_run_fetch(config, count=None):
        captured["count"] = count
        return FetchResult(total_fetched=4, unique_fetched=3, saved_to_database=2)

    monkeypatch.setattr(main_mod, "run_fetch", fake_run_fetch)

    result = runner.invoke(main_mod.app, ["run", "--count", "4"])

    assert result.exit_code == 0, result.output
    assert "Total jokes fetched from API: 4" in result.output
    assert "Unique jokes found: 3" in result.output
    assert "New jokes saved to DB: 2" in result.output
    assert captured["count"] == 4


def test_run_show_lists_stored_jokes(env, monkeypatch):
    init_db(env)
    SqliteJokeRepository(env).insert_new([Joke.create("1", "stored joke")])
    monkeypatch.setattr(main_mod, "run_fetch", lambda config, count=None: FetchResult(0, 0, 0))

    result = runner.invoke(main_mod.app, ["run", "--show"])

    assert result.exit_code == 0, result.output
    assert "- stored joke" in result.output


def test_run_failure_exits_non_zero(env, monkeypatch):
    def failing(config, count=None):
        raise UpstreamError("down")

    monkeypatch.setattr(main_mod, "run_fetch", failing)

    result = runner.invoke(main_mod.app, ["run"])

    assert result.exit_code == 1


def test_missing_config_exits_with_usage_code(env, monkeypatch):
    monkeypatch.delenv("DATABASE_PATH")

    result = runner.invoke(main_mod.app, ["list"])

    assert result.exit_code == 2


def test_list_prints_jokes(env):
    init_db(env)
    SqliteJokeRepository(env).insert_new([Joke.create("1", "first"), Joke.create("2", "second")])

    result = runner.invoke(main_mod.app, ["list"])

    assert result.exit_code == 0, result.output
    assert "--- Jokes in DB ---" in result.output
    assert "- first" in result.output
    assert "- second" in result.output


def test_list_creates_schema_on_empty_database(env):
    result = runner.invoke(main_mod.app, ["list"])

    assert result.exit_code == 0, result.output
    assert os.path.exists(env)


# --- Scheduler ---


def test_build_scheduler_registers_fetch_job(tmp_path):
    config = Config(database_path=str(tmp_path / "s.db"), fetch_schedule_cron="*/15 * * * *")

    scheduler = main_mod._build_scheduler(config)

    job = scheduler.get_job("fetch")
    assert job is not None
    assert job.args == (config,)


def test_cron_trigger_rejects_bad_expression():
    with pytest.raises(ValueError, match="5 fields"):
        main_mod._cron_trigger("* * *", "UTC")


def test_scheduled_fetch_swallows_failures(monkeypatch):
    failing = MagicMock(side_effect=UpstreamError("down"))
    monkeypatch.setattr(main_mod, "run_fetch", failing)

    main_mod._scheduled_fetch(Config(database_path="x.db"))

    failing.assert_called_once()
