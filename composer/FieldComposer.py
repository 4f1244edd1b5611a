# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: FieldComposer
# -----------------------------------------------------------------------------
from typing import Any, Mapping

from pipeline.PipelineDefinition import PipelineDefinition
from record.Record import Record


class FieldComposer:
    """
    Builds the canonical text for a record: the configured attributes, in
    composition-list order, joined by a single space. Missing attributes
    contribute an empty string, so absence never fails and the output for a
    given record + definition is always byte-identical.
    """

    separator = " "

    def compose(self, record: Record, definition: PipelineDefinition) -> str:
        return self.compose_attributes(record.attributes, definition.source_fields)

    def compose_attributes(self, attributes: Mapping[str, Any], source_fields) -> str:
        return self.separator.join(self._text(attributes.get(name)) for name in source_fields)

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return str(value)
