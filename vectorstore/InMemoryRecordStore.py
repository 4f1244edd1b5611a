# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Description: InMemoryRecordStore
# -----------------------------------------------------------------------------
import copy
import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from record.Record import Record
from utility.logging_utils import get_class_logger
from vectorstore.RecordStore import RecordPage, SearchHit, VectorUpdate
from vectorstore.slicing import check_slice, slice_of

SUPPORTED_METRICS = ("cosine", "dot", "l2")


@dataclass
class _VectorField:
    dimension: int
    metric: str
    index_options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class _CollectionState:
    records: Dict[str, Record] = field(default_factory=dict)
    vector_fields: Dict[str, _VectorField] = field(default_factory=dict)


class InMemoryRecordStore:
    """Dict-backed RecordStore for tests and local development."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_class_logger(self.__class__)
        self._lock = threading.RLock()
        self._collections: Dict[str, _CollectionState] = {}

    def test_connection(self) -> bool:
        return True

    def ensure_vector_field(
            self,
            collection: str,
            output_field: str,
            dimension: int,
            metric: str = "cosine",
            index_options: Dict[str, Any] | None = None,
    ) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be > 0")
        metric = (metric or "cosine").lower()
        if metric not in SUPPORTED_METRICS:
            raise ValueError(f"Unsupported metric: {metric}. Supported: {list(SUPPORTED_METRICS)}")

        with self._lock:
            state = self._collections.setdefault(collection, _CollectionState())
            existing = state.vector_fields.get(output_field)
            if existing is not None:
                if existing.dimension != dimension:
                    raise ValueError(
                        f"Vector field '{output_field}' already declared with dimension "
                        f"{existing.dimension}, got {dimension}"
                    )
                return
            state.vector_fields[output_field] = _VectorField(
                dimension=dimension,
                metric=metric,
                index_options=dict(index_options or {}),
            )
        self.logger.info(
            "Declared vector field '%s.%s' (dim=%d, metric=%s)", collection, output_field, dimension, metric
        )

    def vector_field_dimension(self, collection: str, output_field: str) -> Optional[int]:
        with self._lock:
            state = self._collections.get(collection)
            if state is None or output_field not in state.vector_fields:
                return None
            return state.vector_fields[output_field].dimension

    def upsert_records(self, collection: str, records: Sequence[Record]) -> None:
        with self._lock:
            state = self._collections.setdefault(collection, _CollectionState())
            for record in records:
                for output_field, vector in record.vectors.items():
                    self._check_vector(state, output_field, vector)
                state.records[record.id] = copy.deepcopy(record)

    def get_records(self, collection: str, ids: Sequence[str]) -> List[Record]:
        with self._lock:
            state = self._get_collection(collection)
            return [copy.deepcopy(state.records[i]) for i in ids if i in state.records]

    def read_batch(
            self,
            collection: str,
            *,
            filters: Dict[str, Any] | None = None,
            slice_id: int = 0,
            slice_count: int = 1,
            cursor: Optional[str] = None,
            limit: int = 1000,
    ) -> RecordPage:
        check_slice(slice_id, slice_count)
        if limit < 1:
            raise ValueError("limit must be >= 1")

        with self._lock:
            state = self._get_collection(collection)
            ids = sorted(
                rid for rid, rec in state.records.items()
                if slice_of(rid, slice_count) == slice_id
                and (cursor is None or rid > cursor)
                and self._match_filters(rec.attributes, filters)
            )
            page_ids = ids[:limit]
            records = [copy.deepcopy(state.records[rid]) for rid in page_ids]

        next_cursor = page_ids[-1] if len(ids) > limit else None
        return RecordPage(records=records, next_cursor=next_cursor)

    def update_vectors(self, collection: str, output_field: str, updates: Sequence[VectorUpdate]) -> int:
        updated = 0
        with self._lock:
            state = self._get_collection(collection)
            for u in updates:
                self._check_vector(state, output_field, u.vector)
                rec = state.records.get(u.record_id)
                if rec is None:
                    continue
                rec.vectors[output_field] = [float(v) for v in u.vector]
                rec.pipeline_versions[output_field] = u.pipeline_version
                updated += 1
        return updated

    def knn_search(
            self,
            collection: str,
            output_field: str,
            vector: Sequence[float],
            *,
            k: int,
            num_candidates: int,
            filters: Dict[str, Any] | None = None,
            fields: Optional[List[str]] = None,
    ) -> List[SearchHit]:
        if k <= 0:
            return []

        with self._lock:
            state = self._get_collection(collection)
            vf = state.vector_fields.get(output_field)
            if vf is None:
                raise KeyError(f"Vector field does not exist: {collection}.{output_field}")
            self._check_vector(state, output_field, vector)

            scored: List[SearchHit] = []
            for rec in state.records.values():
                stored = rec.vectors.get(output_field)
                if stored is None or not self._match_filters(rec.attributes, filters):
                    continue
                scored.append(
                    SearchHit(
                        record_id=rec.id,
                        score=self._similarity(vf.metric, vector, stored),
                        attributes=rec.project(fields),
                    )
                )

        scored.sort(key=lambda h: (-h.score, h.record_id))
        candidates = scored[: max(num_candidates, k)]
        return candidates[:k]

    def count(self, collection: str, filters: Dict[str, Any] | None = None) -> int:
        with self._lock:
            state = self._collections.get(collection)
            if state is None:
                return 0
            return sum(1 for r in state.records.values() if self._match_filters(r.attributes, filters))

    # -------------------------------------------------------------------------
    def _get_collection(self, name: str) -> _CollectionState:
        if name not in self._collections:
            raise KeyError(f"Collection does not exist: {name}")
        return self._collections[name]

    @staticmethod
    def _check_vector(state: _CollectionState, output_field: str, vector: Sequence[float]) -> None:
        vf = state.vector_fields.get(output_field)
        if vf is None:
            raise KeyError(f"Vector field is not declared: {output_field}")
        if len(vector) != vf.dimension:
            raise ValueError(
                f"Vector dimension mismatch for '{output_field}': expected {vf.dimension}, got {len(vector)}"
            )

    @staticmethod
    def _match_filters(attributes: Dict[str, Any], filters: Dict[str, Any] | None) -> bool:
        if not filters:
            return True
        return all(attributes.get(key) == value for key, value in filters.items())

    @staticmethod
    def _similarity(metric: str, left: Sequence[float], right: Sequence[float]) -> float:
        if metric == "dot":
            return sum(a * b for a, b in zip(left, right))
        if metric == "l2":
            return -math.sqrt(sum((a - b) ** 2 for a, b in zip(left, right)))

        dot = sum(a * b for a, b in zip(left, right))
        norm_left = math.sqrt(sum(a * a for a in left))
        norm_right = math.sqrt(sum(b * b for b in right))
        if norm_left == 0.0 or norm_right == 0.0:
            return 0.0
        return dot / (norm_left * norm_right)
