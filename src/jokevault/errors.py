"""Errors that abort a whole fetch operation."""

from __future__ import annotations

import threading


class JokeVaultError(Exception):
    """Base class for jokevault operation errors."""


class InvalidFetchCount(JokeVaultError, ValueError):
    """Requested joke count is outside the accepted range."""


class UpstreamError(JokeVaultError):
    """The joke API failed with a transport or protocol error."""


class FetchCancelled(JokeVaultError):
    """The operation was cancelled through its cancellation event."""


def raise_if_cancelled(cancel: threading.Event | None, message: str = "Operation cancelled") -> None:
    """Raise FetchCancelled if the given event has been set."""
    if cancel is not None and cancel.is_set():
        raise FetchCancelled(message)
