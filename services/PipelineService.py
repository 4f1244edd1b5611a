# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: PipelineService.py
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from errors.Faults import ValidationFault
from pipeline.PipelineDefinition import PipelineDefinition
from pipeline.PipelineRegistry import PipelineRegistry
from utility.logging_utils import get_class_logger
from vectorstore.RecordStore import RecordStore


@dataclass
class PipelineService:
    """
    Pipeline Definition facade used by FastAPI.
    Registering a definition also declares its vector field in the store,
    which is a no-op for later versions of the same field/dimension.
    """

    registry: PipelineRegistry
    store: RecordStore
    collection_name: str
    metric: str = "cosine"
    index_options: Dict[str, Any] = field(default_factory=dict)
    logger: logging.Logger | None = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    def register(
        self,
        source_fields: Sequence[str],
        target_dimension: int,
        output_field: str,
        *,
        activate: bool = True,
    ) -> PipelineDefinition:
        PipelineDefinition.validate(source_fields, target_dimension, output_field)
        try:
            self.store.ensure_vector_field(
                self.collection_name,
                output_field,
                target_dimension,
                metric=self.metric,
                index_options=self.index_options,
            )
        except ValueError as e:
            raise ValidationFault(str(e)) from e
        return self.registry.register(source_fields, target_dimension, output_field, activate=activate)

    def current(self, output_field: str) -> PipelineDefinition:
        return self.registry.current(output_field)

    def activate(self, output_field: str, version: int) -> PipelineDefinition:
        return self.registry.activate(output_field, version)

    def versions(self, output_field: str) -> List[PipelineDefinition]:
        return self.registry.versions(output_field)

    def output_fields(self) -> List[str]:
        return self.registry.output_fields()
