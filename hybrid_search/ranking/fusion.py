"""Result fusion for hybrid search.

Implements Reciprocal Rank Fusion (RRF) over any number of independently
ranked result lists. A document's fused score is the sum of ``1 / (k + rank)``
over the lists it appears in; lists it is absent from contribute nothing.

Documents are plain mappings. Two documents are the same document when they
are equal after dropping transient fields: anything whose name starts with
``_`` (``_distance``, ``_score`` and similar per-modality metadata) and a
previously attached ``rrf_score``.
"""

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..errors import InvalidDocumentKind, InvalidInputKind

logger = structlog.get_logger("search_fusion")

DEFAULT_RRF_K = 60.0
METADATA_PREFIX = "_"
RRF_SCORE_FIELD = "rrf_score"

Document = Mapping[str, Any]
ResultList = Sequence[Document]


def is_transient_field(name: Any) -> bool:
    """Return True for fields that never take part in document identity."""
    if not isinstance(name, str):
        return False
    return name.startswith(METADATA_PREFIX) or name == RRF_SCORE_FIELD


def validate_fusion_k(k: Any) -> float:
    """Check the RRF constant and return it as a float.

    Raises ``ValueError`` unless ``k`` is a finite real number above zero.
    """
    if isinstance(k, bool) or not isinstance(k, Real) or not math.isfinite(k) or k <= 0:
        raise ValueError(f"RRF constant k must be a positive number, got {k!r}")
    return float(k)


# Stands in for every NaN so a document stays equal to itself
_NAN = object()


def _name_order(item: Tuple[Hashable, Any]) -> Tuple[str, str]:
    # Field names of mixed types cannot be compared directly
    return type(item[0]).__name__, str(item[0])


def _freeze(value: Any) -> Hashable:
    """Turn a field value into something hashable with the same equality."""
    if isinstance(value, Mapping):
        items = sorted(((k, _freeze(v)) for k, v in value.items()), key=_name_order)
        return (dict, tuple(items))
    if isinstance(value, np.ndarray):
        return tuple(_freeze(v) for v in value.tolist())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(v) for v in value)
    if isinstance(value, (float, np.floating)) and math.isnan(value):
        return _NAN
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


@dataclass(frozen=True)
class DocumentKey:
    """Identity of a document with its transient fields stripped.

    Only used as a dictionary key while fusing; it is never returned.
    """

    fields: Tuple[Tuple[Hashable, Hashable], ...]

    @classmethod
    def from_document(cls, document: Document) -> "DocumentKey":
        items = [
            (name, _freeze(value))
            for name, value in document.items()
            if not is_transient_field(name)
        ]
        items.sort(key=_name_order)
        return cls(tuple(items))


@dataclass
class _FusionRecord:
    document: Document
    ranks: Dict[int, int] = field(default_factory=dict)


def _validate_result_lists(result_lists: Sequence[Any]) -> None:
    for list_idx, result_list in enumerate(result_lists):
        if not isinstance(result_list, (list, tuple)):
            raise InvalidInputKind(list_idx, result_list)

        for position, document in enumerate(result_list):
            if not isinstance(document, Mapping):
                raise InvalidDocumentKind(list_idx, position, document)


def _build_document_ranks(result_lists: Sequence[ResultList]) -> Dict[DocumentKey, _FusionRecord]:
    # Insertion order of this dict is first appearance, which the final
    # stable sort relies on to break ties.
    records: Dict[DocumentKey, _FusionRecord] = {}

    for list_idx, result_list in enumerate(result_lists):
        for position, document in enumerate(result_list):
            key = DocumentKey.from_document(document)
            record = records.get(key)
            if record is None:
                record = records[key] = _FusionRecord(document=document)
            # Repeats inside one list keep their best rank
            record.ranks.setdefault(list_idx, position + 1)

    return records


def _calculate_rrf_scores(
    records: Dict[DocumentKey, _FusionRecord],
    k: float
) -> List[Tuple[Document, float]]:
    scored = []
    for record in records.values():
        score = 0.0
        for list_idx in sorted(record.ranks):
            score += 1.0 / (k + record.ranks[list_idx])
        scored.append((record.document, score))
    return scored


def fuse(
    result_lists: Optional[Sequence[ResultList]],
    k: float = DEFAULT_RRF_K
) -> List[Dict[str, Any]]:
    """Fuse ranked result lists with Reciprocal Rank Fusion.

    Parameters
    - result_lists: ranked lists of document mappings, best match first
    - k: damping constant, strictly positive (default 60)

    Returns
    - New document dicts carrying every field of the first occurrence of each
      distinct document plus ``rrf_score``, ordered by descending score. Ties
      keep first-appearance order (earlier list, then earlier position).

    Raises
    - ``InvalidInputKind`` when a member of ``result_lists`` is not a list
    - ``InvalidDocumentKind`` when a list element is not a mapping
    - ``ValueError`` for a non-positive ``k``
    """
    k = validate_fusion_k(k)

    if result_lists is None:
        return []
    if not isinstance(result_lists, (list, tuple)):
        raise InvalidInputKind(None, result_lists)
    if not result_lists:
        return []

    _validate_result_lists(result_lists)

    if all(len(result_list) == 0 for result_list in result_lists):
        return []

    records = _build_document_ranks(result_lists)
    scored = _calculate_rrf_scores(records, k)

    # list.sort is stable with reverse=True, so ties stay in first-seen order
    scored.sort(key=lambda item: item[1], reverse=True)

    fused = [{**document, RRF_SCORE_FIELD: score} for document, score in scored]

    logger.info(
        "RRF fusion completed",
        list_count=len(result_lists),
        input_count=sum(len(result_list) for result_list in result_lists),
        fused_count=len(fused),
        k_parameter=k
    )

    return fused


reciprocal_rank_fusion = fuse


class ReciprocalRankFusion:
    """Reciprocal Rank Fusion with a fixed constant."""

    def __init__(self, k: float = DEFAULT_RRF_K):
        self.k = validate_fusion_k(k)

    def fuse_results(self, result_lists: Optional[Sequence[ResultList]]) -> List[Dict[str, Any]]:
        """Fuse ranked result lists using this instance's ``k``."""
        return fuse(result_lists, k=self.k)
