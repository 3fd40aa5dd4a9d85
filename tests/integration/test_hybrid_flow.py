"""Integration tests for hybrid search over the in-memory engine."""

import pytest

from hybrid_search import (
    InMemorySearchEngine,
    InvalidVectorKind,
    MissingIndexError,
    SearchManager,
    fuse,
)
from hybrid_search.common.config import HybridSearchConfig
from hybrid_search.ranking.fusion import RRF_SCORE_FIELD


@pytest.mark.integration
class TestHybridFlow:
    """Run hybrid searches end to end against indexed documents."""

    @pytest.fixture
    def manager(self, memory_engine, metrics):
        """Search manager over the indexed framework documents."""
        config = HybridSearchConfig(hybrid_vector_column="embedding")
        return SearchManager(memory_engine, config=config, metrics=metrics)

    def test_fused_results_are_scored_and_limited(self, manager):
        """Both modalities fuse into at most ``limit`` scored documents."""
        results = manager.hybrid_search(
            text_query="Ruby",
            vector_query=[0.1, 0.2, 0.3],
            text_column="title",
            limit=3,
        )

        assert [doc["id"] for doc in results] == [1, 4, 2]
        assert all(RRF_SCORE_FIELD in doc for doc in results)
        assert results[0][RRF_SCORE_FIELD] == pytest.approx(2.0 / 61)
        # representative comes from the vector list, which ran first
        assert "_distance" in results[0]
        assert results[0]["embedding"] == [0.1, 0.2, 0.3]

    def test_documents_from_either_modality_survive(self, manager):
        """Documents found by only one search still appear."""
        results = manager.hybrid_search(
            text_query="Ruby",
            vector_query=[0.9, 0.9, 0.9],
            text_column="title",
            limit=4,
        )

        titles = [doc["title"] for doc in results]
        assert "JavaScript Express" in titles
        assert "Ruby on Rails" in titles
        assert titles[:2] == ["Ruby on Rails", "Ruby Sinatra"]

    def test_no_duplicates_when_both_modalities_match(self, manager):
        """Each document appears once even when both searches find it."""
        results = manager.hybrid_search(
            text_query="Ruby",
            vector_query=[0.1, 0.2, 0.3],
            text_column="title",
            limit=10,
        )

        titles = [doc["title"] for doc in results]
        assert len(titles) == len(set(titles)) == 4

    def test_vector_only_has_no_fusion_score(self, manager):
        """A vector-only search is passed through unscored."""
        results = manager.hybrid_search(vector_query=[0.1, 0.2, 0.3], limit=2)

        assert len(results) == 2
        assert all(RRF_SCORE_FIELD not in doc for doc in results)
        assert [doc["id"] for doc in results] == [1, 4]

    def test_text_only_has_no_fusion_score(self, manager):
        """A text-only search is passed through unscored."""
        results = manager.hybrid_search(text_query="framework", text_column="content", limit=2)

        assert len(results) == 2
        assert all(RRF_SCORE_FIELD not in doc for doc in results)
        assert all("_score" in doc for doc in results)

    def test_multi_column_text_search(self, manager):
        """Multiple text columns combine with the vector search."""
        results = manager.hybrid_search(
            text_query="Ruby",
            vector_query=[0.1, 0.2, 0.3],
            text_columns=["title", "content"],
            limit=3,
        )

        assert len(results) == 3
        assert all(RRF_SCORE_FIELD in doc for doc in results)

    def test_unmatched_term_returns_empty(self, manager):
        """A text search with no hits is an empty result."""
        assert manager.hybrid_search(text_query="NonexistentTerm", text_column="title", limit=10) == []

    def test_no_query_returns_empty(self, manager):
        """Neither query nor vector gives an empty result."""
        assert manager.hybrid_search(limit=10) == []
        assert manager.hybrid_search(text_query="", limit=10) == []

    def test_custom_fusion_k(self, manager):
        """A custom constant changes the attached scores."""
        results = manager.hybrid_search(
            text_query="Ruby",
            vector_query=[0.1, 0.2, 0.3],
            text_column="title",
            limit=2,
            fusion_k=100,
        )

        assert results[0][RRF_SCORE_FIELD] == pytest.approx(2.0 / 101)

    def test_invalid_vector_is_rejected(self, manager):
        """A non-numeric vector is refused before searching."""
        with pytest.raises(InvalidVectorKind, match="array of numbers"):
            manager.hybrid_search(text_query="Ruby", vector_query="not an array", text_column="title")

    def test_missing_index_propagates(self, metrics):
        """Engine errors surface unchanged through the manager."""
        engine = InMemorySearchEngine([{"id": 1, "text": "ruby"}])
        manager = SearchManager(engine, metrics=metrics)

        with pytest.raises(MissingIndexError, match="Column text has no text index"):
            manager.hybrid_search(text_query="ruby")

    def test_manual_fusion_of_ad_hoc_searches(self, memory_engine):
        """Callers can fuse their own result lists."""
        by_title = memory_engine.text_search("title", "ruby", 10)
        by_content = memory_engine.text_search("content", "ruby", 10)
        by_vector = memory_engine.vector_search("embedding", [0.15, 0.25, 0.35], 10)

        fused = fuse([by_title, by_content, by_vector])

        assert {doc["id"] for doc in fused} == {1, 2, 3, 4}
        assert fused[0]["id"] in (1, 4)

    @pytest.mark.asyncio
    async def test_async_matches_sync(self, manager):
        """The concurrent path agrees with the sequential one."""
        kwargs = dict(text_query="Ruby", vector_query=[0.9, 0.9, 0.9], text_column="title", limit=4)

        assert await manager.hybrid_search_async(**kwargs) == manager.hybrid_search(**kwargs)
