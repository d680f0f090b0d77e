"""Command-line entry point — one-off fetches, listing, and the scheduled service."""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

import typer
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from jokevault.config import Config, load_config
from jokevault.jobs import run_fetch
from jokevault.storage import SqliteJokeRepository, init_db

logger = logging.getLogger("jokevault")

app = typer.Typer(
    help="Fetch jokes from the joke API and keep the new ones.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def _bootstrap() -> Config:
    """Load config, set up logging, and make sure the schema exists."""
    try:
        config = load_config()
    except ValueError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from None
    _setup_logging(config.log_level, config.log_format)
    init_db(config.database_path)
    return config


def _print_jokes(config: Config) -> None:
    jokes = SqliteJokeRepository(config.database_path).get_all()
    typer.echo("--- Jokes in DB ---")
    for joke in jokes:
        typer.echo(f"- {joke.text}")


def _cron_trigger(expression: str, timezone: str) -> CronTrigger:
    parts = expression.split()
    if len(parts) != 5:
        raise ValueError(f"Cron expression must have 5 fields, got {expression!r}")
    return CronTrigger(
        minute=parts[0],
        hour=parts[1],
        day=parts[2],
        month=parts[3],
        day_of_week=parts[4],
        timezone=timezone,
    )


def _scheduled_fetch(config: Config) -> None:
    """Scheduler job wrapper. Failures are already logged and recorded by run_fetch."""
    try:
        run_fetch(config)
    except Exception:
        logger.error("Scheduled fetch failed; scheduler will continue")


def _build_scheduler(config: Config) -> BlockingScheduler:
    """Create a BlockingScheduler with the periodic fetch job."""
    scheduler = BlockingScheduler(timezone=config.fetch_timezone)
    scheduler.add_job(
        _scheduled_fetch,
        trigger=_cron_trigger(config.fetch_schedule_cron, config.fetch_timezone),
        args=[config],
        id="fetch",
        name="Joke fetch",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


@app.command()
def run(
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Number of jokes to request (defaults to FETCH_COUNT)."
    ),
    show: bool = typer.Option(False, "--show", help="Print every stored joke afterwards."),
) -> None:
    """Fetch jokes once and report the counts."""
    config = _bootstrap()
    try:
        result = run_fetch(config, count=count)
    except Exception as exc:
        typer.echo(f"Fetch failed: {exc}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo("--- Fetch Stats ---")
    typer.echo(f"Total jokes fetched from API: {result.total_fetched}")
    typer.echo(f"Unique jokes found: {result.unique_fetched}")
    typer.echo(f"New jokes saved to DB: {result.saved_to_database}")

    if show:
        typer.echo("")
        _print_jokes(config)


@app.command("list")
def list_jokes() -> None:
    """Print every stored joke."""
    config = _bootstrap()
    _print_jokes(config)


@app.command()
def serve() -> None:
    """Run the fetch job on FETCH_SCHEDULE_CRON until interrupted."""
    config = _bootstrap()
    logger.info(
        "jokevault starting (env=%s, db=%s, schedule=%s)",
        config.app_env,
        config.database_path,
        config.fetch_schedule_cron,
    )

    scheduler = _build_scheduler(config)

    logger.info("Running initial fetch")
    _scheduled_fetch(config)

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler shutting down")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
