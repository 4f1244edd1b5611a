# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Description: RecordStore
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from record.Record import Record


@dataclass(frozen=True)
class VectorUpdate:
    """Partial update of one output field on one record."""

    record_id: str
    vector: List[float]
    pipeline_version: int


@dataclass(frozen=True)
class RecordPage:
    records: List[Record]
    # None once the slice is exhausted
    next_cursor: Optional[str] = None


@dataclass(frozen=True)
class SearchHit:
    record_id: str
    score: float
    attributes: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class RecordStore(Protocol):
    """
    Storage engine operations the core relies on. Adapters translate backend
    errors into StoreUnavailableError (transient); KeyError means an unknown
    collection or vector field.
    """

    def test_connection(self) -> bool:
        ...

    def ensure_vector_field(
            self,
            collection: str,
            output_field: str,
            dimension: int,
            metric: str = "cosine",
            index_options: Dict[str, Any] | None = None,
    ) -> None:
        ...

    def vector_field_dimension(self, collection: str, output_field: str) -> Optional[int]:
        ...

    def upsert_records(self, collection: str, records: Sequence[Record]) -> None:
        ...

    def get_records(self, collection: str, ids: Sequence[str]) -> List[Record]:
        ...

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
        ...

    def update_vectors(self, collection: str, output_field: str, updates: Sequence[VectorUpdate]) -> int:
        ...

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
        ...

    def count(self, collection: str, filters: Dict[str, Any] | None = None) -> int:
        ...
