# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: SearchGateway
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from errors.Faults import Fault, SystemicFault, ValidationFault
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from pipeline.PipelineRegistry import PipelineRegistry
from utility.logging_utils import get_class_logger
from vectorstore.RecordStore import RecordStore, SearchHit


@dataclass
class SearchGateway:
    """
    Query entry point: text is turned into a vector with the same inference +
    normalization used at indexing time, then nearest-neighbour scoring is
    delegated to the store.
    """

    store: RecordStore
    registry: PipelineRegistry
    pipeline: EmbeddingPipeline
    collection_name: str
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    def search(
        self,
        output_field: str,
        *,
        text: Optional[str] = None,
        vector: Optional[Sequence[float]] = None,
        k: int = 10,
        num_candidates: int = 100,
        fields: Optional[List[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        pipeline_version: Optional[int] = None,
    ) -> List[SearchHit]:
        if (text is None) == (vector is None):
            raise ValidationFault("provide exactly one of text or vector")
        if k < 1:
            raise ValidationFault(f"k must be >= 1, got {k}")
        if num_candidates < k:
            raise ValidationFault(f"num_candidates ({num_candidates}) must be >= k ({k})")

        definition = self.registry.resolve(output_field, pipeline_version)
        dim = definition.target_dimension

        if vector is not None:
            query_vector = [float(v) for v in vector]
            if len(query_vector) != dim:
                raise ValidationFault(
                    f"query vector has length {len(query_vector)}, field '{output_field}' expects {dim}"
                )
        else:
            try:
                query_vector = self.pipeline.vectorize_text(text, dim)
            except ValidationFault:
                raise
            except Fault as e:
                raise SystemicFault(f"query inference failed: {e.describe()}") from e

        self.logger.info(
            "Search field='%s' v%d (%s, k=%d, candidates=%d, filters=%s)",
            output_field,
            definition.version,
            "text" if text is not None else "vector",
            k,
            num_candidates,
            filters,
        )

        try:
            hits = self.store.knn_search(
                self.collection_name,
                output_field,
                query_vector,
                k=k,
                num_candidates=num_candidates,
                filters=filters,
                fields=fields,
            )
        except KeyError:
            raise
        except Fault as e:
            raise SystemicFault(f"storage engine query failed: {e.describe()}") from e

        hits = sorted(hits, key=lambda h: (-h.score, h.record_id))[:k]
        self.logger.info("Search complete: returned %d hit(s) (requested %d)", len(hits), k)
        return hits

    def search_text(self, output_field: str, text: str, **kwargs) -> List[SearchHit]:
        return self.search(output_field, text=text, **kwargs)

    def search_vector(self, output_field: str, vector: Sequence[float], **kwargs) -> List[SearchHit]:
        return self.search(output_field, vector=vector, **kwargs)
