"""In-memory implementation of the search engine.

Keeps documents in a Python list and answers queries by brute force:
exact Euclidean distance with numpy for vector search, and a log-scaled
term frequency times inverse document frequency score for text search.
Suitable for tests, examples, and small corpora; it is not an ANN or BM25
implementation.

Behavior mirrors a columnar dataset engine
- Indexes are created explicitly per column; searching a column without the
  matching index raises ``MissingIndexError``
- Unknown columns raise ``UnknownColumnError``
- Results are copies carrying ``_distance`` (vector) or ``_score`` (text)
"""

import math
import re
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Union

import numpy as np
import structlog

from ..errors import MissingIndexError, UnknownColumnError, UpstreamSearchFailure
from .base import SearchEngine

logger = structlog.get_logger("search_engine.memory")

DISTANCE_FIELD = "_distance"
SCORE_FIELD = "_score"

_TOKEN_PATTERN = re.compile(r"\w+")


def tokenize(text: Any) -> List[str]:
    """Lower-case ``text`` and split it into word tokens."""
    return _TOKEN_PATTERN.findall(str(text).lower())


class InMemorySearchEngine(SearchEngine):
    """Brute-force search engine over documents held in memory."""

    def __init__(self, documents: Optional[Iterable[Mapping[str, Any]]] = None):
        self._documents: List[Dict[str, Any]] = []
        self._vector_indexes: Set[str] = set()
        self._text_indexes: Set[str] = set()
        if documents is not None:
            self.add_documents(documents)

    def __len__(self) -> int:
        return len(self._documents)

    def add_documents(self, documents: Iterable[Mapping[str, Any]]) -> int:
        """Append documents and return how many were added."""
        added = 0
        for document in documents:
            if not isinstance(document, Mapping):
                raise TypeError(f"Documents must be mappings, got {type(document).__name__}")
            self._documents.append(dict(document))
            added += 1

        logger.info("Documents added", count=added, total=len(self._documents))
        return added

    def columns(self) -> Set[str]:
        """Names of every field present on at least one document."""
        names: Set[str] = set()
        for document in self._documents:
            names.update(document.keys())
        return names

    def _require_column(self, column: str) -> None:
        if column not in self.columns():
            raise UnknownColumnError(f"Column {column} not found")

    def create_vector_index(self, column: str) -> None:
        """Enable vector search on ``column``."""
        self._require_column(column)
        self._vector_indexes.add(column)
        logger.info("Vector index created", column=column)

    def create_text_index(self, column: str) -> None:
        """Enable full-text search on ``column``."""
        self._require_column(column)
        self._text_indexes.add(column)
        logger.info("Text index created", column=column)

    def vector_search(
        self,
        column: str,
        query_vector: Sequence[float],
        limit: int
    ) -> List[Dict[str, Any]]:
        """Return the ``limit`` documents closest to ``query_vector``."""
        self._require_column(column)
        if column not in self._vector_indexes:
            raise MissingIndexError(f"Column {column} has no vector index")
        if limit <= 0:
            return []

        candidates = [doc for doc in self._documents if doc.get(column) is not None]
        if not candidates:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        try:
            matrix = np.asarray([doc[column] for doc in candidates], dtype=np.float64)
        except ValueError as e:
            raise UpstreamSearchFailure(f"Column {column} does not hold fixed-size vectors") from e

        if matrix.ndim != 2 or query.ndim != 1 or matrix.shape[1] != query.shape[0]:
            raise UpstreamSearchFailure(
                f"Query vector of shape {query.shape} does not match column {column}"
            )

        distances = np.linalg.norm(matrix - query, axis=1)
        order = np.argsort(distances, kind="stable")[:limit]

        logger.debug("Vector search completed", column=column, results_count=len(order))
        return [{**candidates[i], DISTANCE_FIELD: float(distances[i])} for i in order]

    def text_search(
        self,
        column_or_columns: Union[str, Sequence[str]],
        query: str,
        limit: int
    ) -> List[Dict[str, Any]]:
        """Return the ``limit`` documents most relevant to ``query``.

        A document matches when any query token occurs in any searched
        column. Matching is case-insensitive.
        """
        if isinstance(column_or_columns, str):
            columns = [column_or_columns]
        else:
            columns = list(column_or_columns)

        for column in columns:
            self._require_column(column)
            if column not in self._text_indexes:
                raise MissingIndexError(f"Column {column} has no text index")

        terms = set(tokenize(query))
        if not terms or limit <= 0:
            return []

        term_counts = []
        for document in self._documents:
            tokens: List[str] = []
            for column in columns:
                value = document.get(column)
                if value is not None:
                    tokens.extend(tokenize(value))
            term_counts.append(Counter(tokens))

        total = len(term_counts)
        document_frequency = {
            term: sum(1 for counts in term_counts if term in counts)
            for term in terms
        }

        scored = []
        for position, counts in enumerate(term_counts):
            score = 0.0
            for term in terms:
                tf = counts.get(term, 0)
                if tf:
                    idf = math.log(1.0 + total / document_frequency[term])
                    score += (1.0 + math.log(tf)) * idf
            if score > 0:
                scored.append((position, score))

        scored.sort(key=lambda item: item[1], reverse=True)

        logger.debug("Text search completed", columns=columns, results_count=min(len(scored), limit))
        return [
            {**self._documents[position], SCORE_FIELD: score}
            for position, score in scored[:limit]
        ]
