"""Shared fixtures for hybrid search tests."""

from typing import Any, Dict, List, Optional

import pytest
from prometheus_client import CollectorRegistry

from hybrid_search.common.config import HybridSearchConfig
from hybrid_search.common.metrics import MetricsCollector
from hybrid_search.search_engine.base import SearchEngine
from hybrid_search.search_engine.memory import InMemorySearchEngine


FRAMEWORK_DOCUMENTS = [
    {
        "id": 1,
        "title": "Ruby on Rails",
        "content": "Ruby web framework for building database backed applications",
        "embedding": [0.1, 0.2, 0.3],
    },
    {
        "id": 2,
        "title": "Python Django",
        "content": "Python web framework with batteries included",
        "embedding": [0.2, 0.3, 0.4],
    },
    {
        "id": 3,
        "title": "JavaScript Express",
        "content": "Minimal and flexible web framework for Node",
        "embedding": [0.9, 0.9, 0.9],
    },
    {
        "id": 4,
        "title": "Ruby Sinatra",
        "content": "Lightweight Ruby DSL for small web services",
        "embedding": [0.15, 0.25, 0.35],
    },
]


class RecordingEngine(SearchEngine):
    """Engine returning canned results and recording every call."""

    def __init__(
        self,
        vector_results: Optional[List[Dict[str, Any]]] = None,
        text_results: Optional[List[Dict[str, Any]]] = None,
        vector_error: Optional[Exception] = None,
        text_error: Optional[Exception] = None,
    ):
        self.vector_results = vector_results or []
        self.text_results = text_results or []
        self.vector_error = vector_error
        self.text_error = text_error
        self.calls: List[tuple] = []

    def vector_search(self, column, query_vector, limit):
        self.calls.append(("vector", column, limit))
        if self.vector_error is not None:
            raise self.vector_error
        return self.vector_results[:limit]

    def text_search(self, column_or_columns, query, limit):
        self.calls.append(("text", column_or_columns, limit))
        if self.text_error is not None:
            raise self.text_error
        return self.text_results[:limit]


@pytest.fixture
def config():
    """Configuration with defaults and metrics left to the injected collector."""
    return HybridSearchConfig()


@pytest.fixture
def metrics():
    """Metrics collector backed by a private registry."""
    return MetricsCollector("test-hybrid-search", registry=CollectorRegistry())


@pytest.fixture
def memory_engine():
    """In-memory engine loaded with framework documents and indexed."""
    engine = InMemorySearchEngine(FRAMEWORK_DOCUMENTS)
    engine.create_vector_index("embedding")
    engine.create_text_index("title")
    engine.create_text_index("content")
    return engine
