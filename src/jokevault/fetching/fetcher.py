"""Fetch orchestration — concurrent retrieval, validation, dedup, and persistence."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from jokevault.errors import InvalidFetchCount, raise_if_cancelled
from jokevault.fetching.dedup import remove_duplicates
from jokevault.fetching.source import JokeSource, RawJoke
from jokevault.joke import Joke, JokeValidationError
from jokevault.storage.repository import JokeRepository

logger = logging.getLogger(__name__)

MIN_FETCH_COUNT = 1
MAX_FETCH_COUNT = 1000
DISCARD_EMPTY = "empty upstream result"
DISCARD_INVALID = "invalid content"
_CANCEL_POLL_SECONDS = 0.1


@dataclass(frozen=True)
class FetcherOptions:
    """Fetch behaviour: default batch size and the worker cap."""

    count: int = 10
    max_parallelism: int = 10

    @property
    def effective_parallelism(self) -> int:
        return max(1, self.max_parallelism)


@dataclass(frozen=True)
class FetchResult:
    """Counts reported by one fetch_and_store call."""

    total_fetched: int
    unique_fetched: int
    saved_to_database: int

    def as_dict(self) -> dict:
        return {
            "total_fetched": self.total_fetched,
            "unique_fetched": self.unique_fetched,
            "saved_to_database": self.saved_to_database,
        }


@dataclass(frozen=True)
class ConversionOutcome:
    """Result of turning one upstream result into a Joke.

    Exactly one of `joke` and `discard_reason` is set.
    """

    joke: Joke | None = None
    discard_reason: str | None = None
    external_id: str | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.joke is not None


def convert_raw_joke(raw: RawJoke | None) -> ConversionOutcome:
    """Validate an upstream result without raising."""
    if raw is None:
        return ConversionOutcome(discard_reason=DISCARD_EMPTY)
    try:
        joke = Joke.create(raw.external_id, raw.text)
    except JokeValidationError as exc:
        return ConversionOutcome(
            discard_reason=DISCARD_INVALID,
            external_id=raw.external_id,
            detail=str(exc),
        )
    return ConversionOutcome(joke=joke, external_id=raw.external_id)


def _validate_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidFetchCount(f"The number of jokes to fetch must be an integer, got {count!r}.")
    if count < MIN_FETCH_COUNT:
        raise InvalidFetchCount("The number of jokes to fetch must be positive.")
    if count > MAX_FETCH_COUNT:
        raise InvalidFetchCount(
            f"The maximum number of jokes in a single request is {MAX_FETCH_COUNT}."
        )


class JokeFetcher:
    """Fetch jokes from a source and store the ones not seen before.

    Only the retrieval phase is concurrent. Conversion, deduplication and
    persistence run on the calling thread once every request has settled.
    """

    def __init__(
        self,
        source: JokeSource,
        repository: JokeRepository,
        options: FetcherOptions | None = None,
    ) -> None:
        self._source = source
        self._repository = repository
        self._options = options or FetcherOptions()

    def fetch_and_store(self, count: int, cancel: threading.Event | None = None) -> FetchResult:
        """Fetch `count` jokes, drop invalid and duplicate ones, persist the rest.

        Raises InvalidFetchCount before any request when count is outside
        [1, 1000]. UpstreamError from any single request aborts the whole
        call, as does FetchCancelled when `cancel` is set. No partial result
        is returned in either case.
        """
        _validate_count(count)
        logger.info("Starting to fetch %d jokes", count)

        raw_jokes = self._fetch_raw(count, cancel)
        jokes = self._convert(raw_jokes)
        unique = remove_duplicates(jokes)
        logger.info("Fetched %d jokes, %d unique", len(jokes), len(unique))

        saved = self._save(unique, cancel)

        result = FetchResult(
            total_fetched=len(jokes),
            unique_fetched=len(unique),
            saved_to_database=saved,
        )
        logger.info(
            "Finished fetching jokes: %d fetched, %d unique, %d saved",
            result.total_fetched, result.unique_fetched, result.saved_to_database,
        )
        return result

    def _fetch_raw(self, count: int, cancel: threading.Event | None) -> list[RawJoke | None]:
        """Run `count` source calls on a bounded pool.

        Results land in a slot list indexed by attempt number. The first
        failing call or a set cancel event stops the collection, cancels
        every call that has not started yet, and sets the abort event handed
        to the calls still running.
        """
        raise_if_cancelled(cancel, "Fetch cancelled before retrieval")

        # Sources only see this event; it is set whenever retrieval ends.
        abort = threading.Event()
        slots: list[RawJoke | None] = [None] * count
        executor = ThreadPoolExecutor(
            max_workers=self._options.effective_parallelism,
            thread_name_prefix="joke-fetch",
        )
        try:
            futures: dict[Future, int] = {
                executor.submit(self._source.fetch_random, abort): index
                for index in range(count)
            }
            pending = set(futures)
            while pending:
                done, pending = wait(
                    pending, timeout=_CANCEL_POLL_SECONDS, return_when=FIRST_EXCEPTION
                )
                for future in done:
                    slots[futures[future]] = future.result()
                raise_if_cancelled(cancel, "Fetch cancelled during retrieval")
        finally:
            abort.set()
            executor.shutdown(wait=False, cancel_futures=True)
        return slots

    def _convert(self, raw_jokes: list[RawJoke | None]) -> list[Joke]:
        jokes: list[Joke] = []
        for raw in raw_jokes:
            outcome = convert_raw_joke(raw)
            if outcome.ok:
                jokes.append(outcome.joke)
            elif outcome.discard_reason == DISCARD_EMPTY:
                logger.warning("Discarding joke: %s (API returned null)", outcome.discard_reason)
            else:
                logger.warning(
                    "Discarding joke: %s; failed to create a joke from DTO %s: %s",
                    outcome.discard_reason, outcome.external_id, outcome.detail,
                )
        return jokes

    def _save(self, jokes: list[Joke], cancel: threading.Event | None) -> int:
        if not jokes:
            logger.info("No new jokes to save")
            return 0

        # The store's unique constraints have the final say on duplicates.
        saved = self._repository.insert_new(jokes, cancel)
        logger.info("Saved %d new jokes", saved)
        return saved
