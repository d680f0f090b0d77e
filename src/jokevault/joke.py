"""Joke domain entity."""

from __future__ import annotations

from dataclasses import dataclass

MAX_JOKE_LENGTH = 200


class JokeValidationError(ValueError):
    """Raised when joke content violates the entity invariants."""


@dataclass(frozen=True)
class Joke:
    """A validated joke. Build instances with Joke.create()."""

    id: str
    text: str

    @classmethod
    def create(cls, id: str | None, text: str | None) -> Joke:
        """Validate id and text and return a new Joke.

        Raises JokeValidationError if the id or text is missing or blank, or
        if the text is longer than MAX_JOKE_LENGTH characters. Length is
        counted in Unicode code points, so an emoji counts as one character.
        """
        if id is None or not id.strip():
            raise JokeValidationError("Joke ID cannot be null or empty.")
        if text is None or not text.strip():
            raise JokeValidationError("Joke text cannot be null or empty.")
        if len(text) > MAX_JOKE_LENGTH:
            raise JokeValidationError(
                f"Joke cannot be longer than {MAX_JOKE_LENGTH} characters."
            )
        return cls(id=id, text=text)
