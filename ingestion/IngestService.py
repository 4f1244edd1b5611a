# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: IngestService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from errors.Faults import ValidationFault
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from pipeline.PipelineRegistry import PipelineRegistry
from record.Record import Record
from utility.logging_utils import get_class_logger
from vectorstore.RecordStore import RecordStore


@dataclass
class IngestResult:
    requested: int = 0
    stored: int = 0
    vectors_written: int = 0
    # output field -> ids whose vector could not be produced this time
    failed: Dict[str, List[str]] = field(default_factory=dict)
    skipped: Dict[str, List[str]] = field(default_factory=dict)


class IngestService:
    """
    Owns the write path for newly arriving records:
      - run every active pipeline of the collection over each record
      - store the record with its vectors and pipeline versions

    A record whose vector cannot be produced is still stored, without that
    vector; the next reprocessing pass fills it in.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        registry: PipelineRegistry,
        pipeline: EmbeddingPipeline,
        collection_name: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.pipeline = pipeline
        self.collection_name = collection_name
        self.logger = logger or get_class_logger(self.__class__)

    def index_records(
        self,
        records: Iterable[Record],
        *,
        output_fields: Optional[List[str]] = None,
    ) -> IngestResult:
        batch = list(records)
        ids = [r.id for r in batch]
        if any(not isinstance(i, str) or not i for i in ids):
            raise ValidationFault("every record needs a non-empty string id")
        if len(set(ids)) != len(ids):
            raise ValidationFault("record ids must be unique within one ingest call")

        if output_fields is None:
            definitions = self.registry.active_definitions()
        else:
            definitions = [self.registry.current(f) for f in output_fields]

        result = IngestResult(requested=len(batch))
        if not batch:
            return result

        self.logger.info(
            "Ingesting %d record(s) into '%s' for field(s) %s",
            len(batch),
            self.collection_name,
            [d.output_field for d in definitions],
        )

        prepared: List[Record] = []
        for record in batch:
            out = Record(id=record.id, attributes=dict(record.attributes))
            for definition in definitions:
                try:
                    outcome = self.pipeline.vectorize_record(record, definition)
                except Exception as e:
                    self.logger.warning(
                        "Record '%s': vector '%s' not produced: %s", record.id, definition.output_field, e
                    )
                    result.failed.setdefault(definition.output_field, []).append(record.id)
                    continue
                if outcome.skipped:
                    result.skipped.setdefault(definition.output_field, []).append(record.id)
                    continue
                out = out.with_vector(definition.output_field, outcome.vector, outcome.pipeline_version)
                result.vectors_written += 1
            prepared.append(out)

        self.store.upsert_records(self.collection_name, prepared)
        result.stored = len(prepared)

        self.logger.info(
            "Ingest complete: %d/%d record(s) stored, %d vector(s) written, failures=%s",
            result.stored,
            result.requested,
            result.vectors_written,
            {f: len(v) for f, v in result.failed.items()},
        )
        return result
