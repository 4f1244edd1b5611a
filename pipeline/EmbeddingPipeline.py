# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-17
# Description: EmbeddingPipeline
# -----------------------------------------------------------------------------
import logging
import threading
from contextlib import nullcontext
from dataclasses import dataclass
from typing import List, Optional

from composer.FieldComposer import FieldComposer
from errors.Faults import EmptyCompositionError, ValidationFault
from inference.InferenceClient import InferenceClient, WeightedTermMap
from inference.RetryPolicy import RetryPolicy
from normalizer.VectorNormalizer import VectorNormalizer
from pipeline.PipelineDefinition import PipelineDefinition
from record.Record import Record
from utility.logging_utils import get_class_logger

EMPTY_TEXT_POLICIES = ("zero_vector", "skip", "fail")


@dataclass(frozen=True)
class VectorizeOutcome:
    """Vector for one record; vector is None when the record was skipped."""

    record_id: str
    vector: Optional[List[float]]
    pipeline_version: int
    skipped: bool = False


class EmbeddingPipeline:
    """
    The compose -> infer -> normalize transform shared by ingest,
    bulk reprocessing and query-time search.
    """

    def __init__(
        self,
        *,
        inference_client: InferenceClient,
        composer: FieldComposer | None = None,
        normalizer: VectorNormalizer | None = None,
        retry_policy: RetryPolicy | None = None,
        empty_text_policy: str = "zero_vector",
        logger: logging.Logger | None = None,
    ) -> None:
        if empty_text_policy not in EMPTY_TEXT_POLICIES:
            raise ValueError(f"empty_text_policy must be one of {EMPTY_TEXT_POLICIES}, got {empty_text_policy!r}")
        self.inference_client = inference_client
        self.composer = composer or FieldComposer()
        self.normalizer = normalizer or VectorNormalizer()
        self.retry_policy = retry_policy or RetryPolicy()
        self.empty_text_policy = empty_text_policy
        self.logger = logger or get_class_logger(self.__class__)

    def vectorize_record(
        self,
        record: Record,
        definition: PipelineDefinition,
        *,
        inference_gate: threading.Semaphore | None = None,
    ) -> VectorizeOutcome:
        text = self.composer.compose(record, definition)

        if not text.strip():
            if self.empty_text_policy == "fail":
                raise EmptyCompositionError(
                    f"record '{record.id}' composes to empty text for '{definition.output_field}'",
                    record_id=record.id,
                )
            if self.empty_text_policy == "skip":
                self.logger.debug("Record '%s' has empty composition; skipped", record.id)
                return VectorizeOutcome(record.id, None, definition.version, skipped=True)
            return VectorizeOutcome(record.id, self.normalizer.zeros(definition.target_dimension), definition.version)

        term_map = self._infer(text, gate=inference_gate, description=f"inference for record '{record.id}'")
        vector = self.normalizer.normalize(term_map, definition.target_dimension)
        return VectorizeOutcome(record.id, vector, definition.version)

    def vectorize_text(self, text: str, target_dimension: int) -> List[float]:
        """Query-time path: no composition, same inference + normalization."""
        if text is None or not text.strip():
            raise ValidationFault("query text must not be empty")
        term_map = self._infer(text, gate=None, description="query inference")
        return self.normalizer.normalize(term_map, target_dimension)

    def _infer(self, text: str, *, gate: threading.Semaphore | None, description: str) -> WeightedTermMap:
        def attempt() -> WeightedTermMap:
            with gate if gate is not None else nullcontext():
                return self.inference_client.infer(text)

        return self.retry_policy.call(attempt, description=description, logger=self.logger)
