"""Hybrid search with Reciprocal Rank Fusion.

Subpackages:
- ``hybrid_search.ranking``: rank fusion over independently ranked lists.
- ``hybrid_search.hybrid``: the ``SearchManager`` orchestrating vector and
  full-text searches.
- ``hybrid_search.search_engine``: the engine interface and an in-memory
  implementation.
- ``hybrid_search.common``: configuration, logging, and metrics.

Usage:
- ``fuse([vector_hits, text_hits], k=60)`` for lists gathered ad hoc
- ``SearchManager(engine).hybrid_search(text_query=..., vector_query=...)``
"""

from .common.config import HybridSearchConfig, get_config
from .common.logging import configure_logging
from .errors import (
    AmbiguousColumnSelection,
    HybridSearchError,
    InvalidDocumentKind,
    InvalidInputKind,
    InvalidVectorKind,
    MissingIndexError,
    UnknownColumnError,
    UpstreamSearchFailure,
)
from .hybrid.search_manager import SearchManager, create_search_manager
from .ranking.fusion import (
    DEFAULT_RRF_K,
    RRF_SCORE_FIELD,
    DocumentKey,
    ReciprocalRankFusion,
    fuse,
    reciprocal_rank_fusion,
)
from .search_engine.base import SearchEngine
from .search_engine.memory import InMemorySearchEngine

__version__ = "0.1.0"

__all__ = [
    "AmbiguousColumnSelection",
    "DEFAULT_RRF_K",
    "DocumentKey",
    "HybridSearchConfig",
    "HybridSearchError",
    "InMemorySearchEngine",
    "InvalidDocumentKind",
    "InvalidInputKind",
    "InvalidVectorKind",
    "MissingIndexError",
    "RRF_SCORE_FIELD",
    "ReciprocalRankFusion",
    "SearchEngine",
    "SearchManager",
    "UnknownColumnError",
    "UpstreamSearchFailure",
    "configure_logging",
    "create_search_manager",
    "fuse",
    "get_config",
    "reciprocal_rank_fusion",
]
