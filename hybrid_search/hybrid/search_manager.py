"""Search manager for hybrid vector and full-text search.

Runs vector similarity and full-text search against a ``SearchEngine`` and
merges their results using Reciprocal Rank Fusion (RRF). Each modality is
over-fetched so fusion has enough candidates to produce a meaningful top
``limit``; truncation happens only after fusion.

Resolution paths
- ``empty``: no query given, or every search came back empty
- ``vector`` / ``text``: one modality produced results; they are returned
  as the engine ranked them, without ``rrf_score``
- ``fused``: both produced results; they are fused and scored
"""

import asyncio
import time
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import structlog

from ..common.config import HybridSearchConfig, get_config
from ..common.metrics import MetricsCollector, get_metrics_collector
from ..errors import AmbiguousColumnSelection, InvalidVectorKind
from ..ranking.fusion import fuse, validate_fusion_k
from ..search_engine.base import SearchEngine

logger = structlog.get_logger("hybrid_search.search_manager")


@dataclass(frozen=True)
class SearchPlan:
    """Validated parameters of one hybrid search call."""

    vector_query: Optional[Sequence[float]]
    vector_column: str
    text_query: Optional[str]
    text_selector: Union[str, List[str]]
    limit: int
    fetch_limit: int
    fusion_k: float


def validate_vector(vector_query: Any) -> None:
    """Raise ``InvalidVectorKind`` unless the query is a non-empty 1-D numeric vector."""
    if isinstance(vector_query, np.ndarray):
        numeric = (
            np.issubdtype(vector_query.dtype, np.integer)
            or np.issubdtype(vector_query.dtype, np.floating)
        )
        if vector_query.ndim != 1 or vector_query.size == 0 or not numeric:
            raise InvalidVectorKind("Vector must be a one-dimensional array of numbers")
        return

    if not isinstance(vector_query, (list, tuple)):
        raise InvalidVectorKind(
            f"Vector must be an array of numbers, got {type(vector_query).__name__}"
        )
    if not vector_query:
        raise InvalidVectorKind("Vector must not be empty")
    for value in vector_query:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidVectorKind(
                f"Vector must be an array of numbers, found {type(value).__name__}"
            )


async def _no_results() -> List[Dict[str, Any]]:
    return []


class SearchManager:
    """Coordinates hybrid search over a single engine.

    Responsibilities
    - Validate every argument before the engine is called
    - Query vector and text modalities with an over-fetched limit
    - Fuse with RRF when both modalities return results, else pass through
    - Record metrics and structured logs for each call
    """

    def __init__(
        self,
        engine: SearchEngine,
        config: Optional[HybridSearchConfig] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        """Construct a search manager.

        Parameters
        - engine: collaborator providing ``vector_search`` and ``text_search``
        - config: ``HybridSearchConfig`` with defaults for columns, limit, k
        - metrics: collector to record into; defaults to the shared one when
          metrics are enabled in config
        """
        self.engine = engine
        self.config = config or HybridSearchConfig()
        if metrics is None and self.config.hybrid_metrics_enabled:
            metrics = get_metrics_collector()
        self.metrics = metrics

    def plan(
        self,
        text_query: Optional[str] = None,
        vector_query: Optional[Sequence[float]] = None,
        vector_column: Optional[str] = None,
        text_column: Optional[str] = None,
        text_columns: Optional[Union[str, Sequence[str]]] = None,
        limit: Optional[int] = None,
        fusion_k: Optional[float] = None
    ) -> SearchPlan:
        """Validate arguments and resolve defaults without touching the engine."""
        if text_column is not None and text_columns is not None:
            raise AmbiguousColumnSelection("Cannot specify both text_column and text_columns")

        if text_columns is not None:
            if isinstance(text_columns, str):
                text_selector: Union[str, List[str]] = [text_columns]
            else:
                text_selector = list(text_columns)
            if not text_selector:
                raise ValueError("text_columns must name at least one column")
        else:
            text_selector = text_column or self.config.hybrid_text_column

        if vector_query is not None:
            validate_vector(vector_query)

        if text_query is not None and not isinstance(text_query, str):
            raise TypeError(f"Query must be a string, got {type(text_query).__name__}")

        if limit is None:
            limit = self.config.hybrid_default_limit
        if isinstance(limit, bool) or not isinstance(limit, Integral) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        limit = int(limit)

        if fusion_k is None:
            fusion_k = self.config.hybrid_fusion_k

        return SearchPlan(
            vector_query=vector_query,
            vector_column=vector_column or self.config.hybrid_vector_column,
            text_query=text_query or None,
            text_selector=text_selector,
            limit=limit,
            fetch_limit=limit * self.config.hybrid_overfetch_factor,
            fusion_k=validate_fusion_k(fusion_k),
        )

    def hybrid_search(
        self,
        text_query: Optional[str] = None,
        vector_query: Optional[Sequence[float]] = None,
        vector_column: Optional[str] = None,
        text_column: Optional[str] = None,
        text_columns: Optional[Union[str, Sequence[str]]] = None,
        limit: Optional[int] = None,
        fusion_k: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """Perform hybrid search.

        Returns at most ``limit`` document dicts. When both modalities return
        results the documents carry ``rrf_score`` and are ordered by it;
        otherwise they are the single modality's results as ranked by the
        engine.

        Engine errors propagate unchanged.
        """
        start_time = time.time()
        plan = self.plan(
            text_query=text_query,
            vector_query=vector_query,
            vector_column=vector_column,
            text_column=text_column,
            text_columns=text_columns,
            limit=limit,
            fusion_k=fusion_k,
        )

        vector_results: List[Dict[str, Any]] = []
        if plan.vector_query is not None:
            vector_results = self._run_vector_search(plan)

        text_results: List[Dict[str, Any]] = []
        if plan.text_query:
            text_results = self._run_text_search(plan)

        return self._assemble(plan, vector_results, text_results, start_time)

    async def hybrid_search_async(
        self,
        text_query: Optional[str] = None,
        vector_query: Optional[Sequence[float]] = None,
        vector_column: Optional[str] = None,
        text_column: Optional[str] = None,
        text_columns: Optional[Union[str, Sequence[str]]] = None,
        limit: Optional[int] = None,
        fusion_k: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """Perform hybrid search with both engine calls running concurrently.

        Semantics match ``hybrid_search``; the calls run in worker threads and
        are joined before fusion, with vector results ranked ahead of text
        results in the fusion input. When a call fails, the other is still
        awaited; a vector failure is raised in preference to a text failure.
        """
        start_time = time.time()
        plan = self.plan(
            text_query=text_query,
            vector_query=vector_query,
            vector_column=vector_column,
            text_column=text_column,
            text_columns=text_columns,
            limit=limit,
            fusion_k=fusion_k,
        )

        vector_results, text_results = await asyncio.gather(
            asyncio.to_thread(self._run_vector_search, plan)
            if plan.vector_query is not None else _no_results(),
            asyncio.to_thread(self._run_text_search, plan)
            if plan.text_query else _no_results(),
            return_exceptions=True,
        )

        # Both calls have finished; report failures in sequential order
        for outcome in (vector_results, text_results):
            if isinstance(outcome, BaseException):
                raise outcome

        return self._assemble(plan, vector_results, text_results, start_time)

    def _run_vector_search(self, plan: SearchPlan) -> List[Dict[str, Any]]:
        """Query the vector modality, recording the outcome."""
        try:
            results = self.engine.vector_search(
                plan.vector_column,
                plan.vector_query,
                plan.fetch_limit
            )
        except Exception as e:
            self._record_upstream("vector", "error")
            logger.error("Vector search failed", column=plan.vector_column, error=str(e))
            raise

        self._record_upstream("vector", "ok")
        return list(results)

    def _run_text_search(self, plan: SearchPlan) -> List[Dict[str, Any]]:
        """Query the text modality, recording the outcome."""
        try:
            results = self.engine.text_search(
                plan.text_selector,
                plan.text_query,
                plan.fetch_limit
            )
        except Exception as e:
            self._record_upstream("text", "error")
            logger.error("Text search failed", columns=plan.text_selector, error=str(e))
            raise

        self._record_upstream("text", "ok")
        return list(results)

    def _record_upstream(self, modality: str, status: str) -> None:
        if self.metrics is not None:
            self.metrics.record_upstream_call(modality, status)

    def _assemble(
        self,
        plan: SearchPlan,
        vector_results: List[Dict[str, Any]],
        text_results: List[Dict[str, Any]],
        start_time: float
    ) -> List[Dict[str, Any]]:
        """Pick the resolution path and cut the output to ``limit``."""
        result_lists = [results for results in (vector_results, text_results) if results]

        if not result_lists:
            path = "empty"
            final_results: List[Dict[str, Any]] = []
        elif len(result_lists) == 1:
            path = "vector" if vector_results else "text"
            final_results = result_lists[0][:plan.limit]
        else:
            path = "fused"
            fused = fuse(result_lists, k=plan.fusion_k)
            if self.metrics is not None:
                self.metrics.record_fusion(len(fused))
            final_results = fused[:plan.limit]

        duration = time.time() - start_time
        if self.metrics is not None:
            self.metrics.record_search(path, duration)

        logger.info(
            "Hybrid search completed",
            path=path,
            vector_count=len(vector_results),
            text_count=len(text_results),
            results_count=len(final_results),
            limit=plan.limit,
            duration_ms=duration * 1000
        )

        return final_results


def create_search_manager(
    engine: SearchEngine,
    config: Optional[HybridSearchConfig] = None,
    metrics: Optional[MetricsCollector] = None
) -> SearchManager:
    """Create a search manager, loading configuration from the environment if not given."""
    return SearchManager(engine, config=config or get_config(), metrics=metrics)
