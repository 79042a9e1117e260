"""Structured error types for parse/match separation."""

from __future__ import annotations

from dataclasses import dataclass

from .parser import PatternSyntaxError


class MatchesError(Exception):
    """Base class for structured matches errors."""


@dataclass(frozen=True)
class MatchesSyntaxError(MatchesError):
    """Wraps parser failures with explicit parse-stage typing."""

    reason: str
    column: int
    source: str

    @classmethod
    def from_syntax_error(cls, err: PatternSyntaxError) -> "MatchesSyntaxError":
        return cls(reason=err.reason, column=err.column, source=err.source)

    def __str__(self) -> str:
        return f"{self.reason} at column {self.column}"


class PatternsExhausted(MatchesError, TypeError):
    """Every alternative of a dispatcher failed to match."""

    def __init__(self, args: tuple[object, ...] = ()) -> None:
        super().__init__("All patterns exhausted")
        self.arguments = args


class UnregisteredExtractorError(MatchesError, LookupError):
    """A pattern referenced an extractor name with no registered function."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Extractor does not exist: {name}")
        self.name = name


class NotAMatcherError(MatchesError, TypeError):
    """A value passed where a dispatcher was expected carries no matcher chain."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Not a matcher function: {type(value).__name__}")
        self.value = value
