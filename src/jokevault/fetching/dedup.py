"""Exact-text deduplication of fetched jokes."""

from __future__ import annotations

from collections.abc import Iterable

from jokevault.joke import Joke


def remove_duplicates(jokes: Iterable[Joke]) -> list[Joke]:
    """Keep the first joke for each distinct text, preserving input order.

    Texts are compared exactly, matching the store's unique constraint.
    Running this on its own output returns the same list.
    """
    seen: set[str] = set()
    unique: list[Joke] = []
    for joke in jokes:
        if joke.text in seen:
            continue
        seen.add(joke.text)
        unique.append(joke)
    return unique
