"""Base search engine interface.

Defines the narrow contract the orchestrator depends on, independent of the
backing implementation (a columnar dataset, a search cluster, the in-memory
reference engine, etc.).

Implementations own storage, indexing, and scoring. They report failures
by raising ``UpstreamSearchFailure`` subclasses (or their own exceptions),
which the orchestrator propagates unchanged.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Union


class SearchEngine(ABC):
    """Abstract base class for search engines.

    Results are lists of document dicts, best match first. Engines may attach
    per-modality metadata under ``_``-prefixed field names (``_distance``,
    ``_score``); fusion ignores those fields when matching documents.
    """

    @abstractmethod
    def vector_search(
        self,
        column: str,
        query_vector: Sequence[float],
        limit: int
    ) -> List[Dict[str, Any]]:
        """Search ``column`` for the vectors nearest to ``query_vector``.

        Returns
        - Up to ``limit`` documents ordered by ascending distance
        """
        pass

    @abstractmethod
    def text_search(
        self,
        column_or_columns: Union[str, Sequence[str]],
        query: str,
        limit: int
    ) -> List[Dict[str, Any]]:
        """Full-text search over one column or several.

        Returns
        - Up to ``limit`` documents ordered by descending relevance
        """
        pass
