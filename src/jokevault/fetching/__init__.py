"""Fetching pipeline — upstream sources, deduplication, and orchestration."""

from jokevault.fetching.chuck_norris import ChuckNorrisApi
from jokevault.fetching.fetcher import FetcherOptions, FetchResult, JokeFetcher
from jokevault.fetching.source import JokeSource, RawJoke

__all__ = [
    "ChuckNorrisApi",
    "FetchResult",
    "FetcherOptions",
    "JokeFetcher",
    "JokeSource",
    "RawJoke",
]
