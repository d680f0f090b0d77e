"""Joke source interface."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RawJoke:
    """Joke as returned by the upstream API. Not validated."""

    external_id: str | None
    text: str | None


class JokeSource(ABC):
    """Abstract base class for upstream joke sources.

    Each call yields at most one joke. There is no pagination or batching:
    fetching N jokes means N independent calls.
    """

    @abstractmethod
    def fetch_random(self, cancel: threading.Event | None = None) -> RawJoke | None:
        """Fetch one random joke.

        Returns None when the upstream has nothing for this attempt. Raises
        UpstreamError on transport or protocol failures and FetchCancelled
        when `cancel` is set before the request goes out.
        """
