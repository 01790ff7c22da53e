"""Error types."""

from __future__ import annotations

from typing import Optional


class CadbError(Exception):
    """Base exception type for cadb.

    Attributes
    ----------
    code
        Stable error identifier.
    message
        Human-readable error message.
    details
        Optional detail payload for debugging.
    """

    def __init__(self, code: str, message: str, details: Optional[object] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details is None:
            return self.message
        return f"{self.message}: {self.details}"


class StructureError(CadbError):
    """Errors raised while reading a structure file."""


class BuildError(CadbError):
    """Errors raised by the distance matrix builder."""


class DatabaseError(CadbError):
    """Errors raised when opening or parsing a distance database.

    Attributes
    ----------
    code
        Stable error identifier.
    message
        Human-readable error message.
    details
        Optional detail payload, usually the path or offending line.
    """


class SearchError(CadbError):
    """Errors raised by the search engine."""


class CommandError(CadbError):
    """Errors raised while interpreting a search control command.

    The interpreter reports these to the operator and carries on with the
    next command.
    """
