"""Exception hierarchy for the routing engine."""

from __future__ import annotations

from typing import Sequence


class AskDataError(Exception):
    """Base class for all routing engine errors."""


class CatalogError(AskDataError):
    """The operation catalog failed validation while loading."""


class UnknownOperationError(AskDataError):
    """A matched operation name is not present in the catalog.

    This means the vector index and the catalog have drifted apart.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Function {name} not found in registry")
        self.name = name


class MissingParametersError(AskDataError):
    """Required parameters were not extracted from the query."""

    def __init__(self, operation: str, missing: Sequence[str]) -> None:
        super().__init__(f"Missing required parameters for {operation}: {', '.join(missing)}")
        self.operation = operation
        self.missing = list(missing)


class ServiceTimeoutError(AskDataError):
    """An upstream call exceeded its time budget."""


class ParseError(AskDataError):
    """Model output could not be interpreted as the expected structure."""
