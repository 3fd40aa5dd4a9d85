"""Exceptions raised by the fusion engine and the search orchestrator.

Validation errors derive from ``HybridSearchError`` and are raised before
any external search call is made. Failures reported by the search engine
itself derive from ``UpstreamSearchFailure`` and reach the caller unchanged.
"""

from typing import Any, Optional


class HybridSearchError(Exception):
    """Base exception for argument validation in this package."""
    pass


class InvalidInputKind(HybridSearchError, TypeError):
    """A result-list container element is not itself list-shaped."""

    def __init__(self, list_index: Optional[int], received: Any):
        self.list_index = list_index
        self.received_type = type(received).__name__
        if list_index is None:
            message = f"Result lists must be a list of lists, got {self.received_type}"
        else:
            message = f"Result list at index {list_index} must be a list, got {self.received_type}"
        super().__init__(message)


class InvalidDocumentKind(HybridSearchError, TypeError):
    """An element inside a result list is not a field mapping."""

    def __init__(self, list_index: int, position: int, received: Any):
        self.list_index = list_index
        self.position = position
        self.received_type = type(received).__name__
        super().__init__(
            f"Document at position {position} in result list {list_index} "
            f"must be a mapping, got {self.received_type}"
        )


class InvalidVectorKind(HybridSearchError, TypeError):
    """A vector query is not a non-empty sequence of numbers."""
    pass


class AmbiguousColumnSelection(HybridSearchError, ValueError):
    """Both a single text column and a list of text columns were given."""
    pass


class UpstreamSearchFailure(Exception):
    """Base exception for failures reported by a search engine."""
    pass


class MissingIndexError(UpstreamSearchFailure):
    """The searched column has no index of the required kind."""
    pass


class UnknownColumnError(UpstreamSearchFailure):
    """The searched column does not exist."""
    pass
