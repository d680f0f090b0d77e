"""Chuck Norris jokes API source — one random joke per request."""

from __future__ import annotations

import logging
import threading
import time

import httpx

from jokevault.errors import FetchCancelled, UpstreamError, raise_if_cancelled
from jokevault.fetching.source import JokeSource, RawJoke

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.chucknorris.io"
DEFAULT_RAPIDAPI_HOST = "matchilling-chuck-norris-jokes-v1.p.rapidapi.com"
_RANDOM_PATH = "/jokes/random"
_RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})


def _is_retryable(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in _RETRYABLE_STATUS
    return isinstance(exc, httpx.TransportError)


def _string_or_none(value: object) -> str | None:
    return value if isinstance(value, str) else None


class ChuckNorrisApi(JokeSource):
    """HTTP source for the Chuck Norris jokes API.

    The underlying httpx.Client is shared across worker threads. Transient
    failures get up to `max_retries` retries after the first attempt, with
    exponential backoff of 2^retry seconds (2s, 4s, 8s, ...). There is no
    circuit breaker.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        api_key: str = "",
        api_host: str = DEFAULT_RAPIDAPI_HOST,
        timeout: float = 15,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"accept": "application/json"}
        if api_key:
            headers["x-rapidapi-key"] = api_key
            headers["x-rapidapi-host"] = api_host
        self._max_retries = max(0, max_retries)
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def fetch_random(self, cancel: threading.Event | None = None) -> RawJoke | None:
        response = self._get_with_retry(_RANDOM_PATH, cancel)
        if not response.content.strip():
            return None
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Joke API returned a non-JSON body") from exc

        if data is None:
            return None
        if not isinstance(data, dict):
            raise UpstreamError(
                f"Joke API returned unexpected JSON type: {type(data).__name__}"
            )

        fields = {str(key).lower(): value for key, value in data.items()}
        return RawJoke(
            external_id=_string_or_none(fields.get("id")),
            text=_string_or_none(fields.get("value")),
        )

    def _get_with_retry(self, path: str, cancel: threading.Event | None) -> httpx.Response:
        attempts = self._max_retries + 1
        last_exc: httpx.HTTPError | None = None
        for attempt in range(attempts):
            raise_if_cancelled(cancel, "Joke request cancelled")
            try:
                response = self._client.get(path)
                response.raise_for_status()
                return response
            except httpx.HTTPError as exc:
                if not _is_retryable(exc):
                    raise UpstreamError(f"Joke API request failed: {exc}") from exc
                last_exc = exc
                logger.warning(
                    "Joke API request failed (attempt %d/%d): %s",
                    attempt + 1, attempts, exc,
                )

            if attempt < attempts - 1:
                backoff = 2 ** (attempt + 1)
                if cancel is not None:
                    if cancel.wait(backoff):
                        raise FetchCancelled("Joke request cancelled during backoff")
                else:
                    time.sleep(backoff)

        raise UpstreamError(
            f"Joke API request failed after {attempts} attempt(s): {last_exc}"
        ) from last_exc

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ChuckNorrisApi:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
