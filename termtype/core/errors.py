"""Exceptions raised by the typing-session engine and its collaborators."""

from __future__ import annotations


class TermtypeError(Exception):
    """Base class for all termtype errors."""


class InvalidTransition(TermtypeError):
    """An engine operation was called in a phase that forbids it.

    The session is left untouched; callers usually log and ignore the key.
    """

    def __init__(self, operation: str, phase: object) -> None:
        self.operation = operation
        self.phase = phase
        super().__init__(f"cannot {operation} while session is {phase}")


class WordSourceExhausted(TermtypeError):
    """The word source could not supply enough words for the session."""

    def __init__(self, requested: int, received: int) -> None:
        self.requested = requested
        self.received = received
        super().__init__(f"word source returned {received} of {requested} requested words")
