# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-22
# Description: test_field_composer.py
# -----------------------------------------------------------------------------
from composer.FieldComposer import FieldComposer
from pipeline.PipelineDefinition import PipelineDefinition
from record.Record import Record


def _definition(*fields: str) -> PipelineDefinition:
    return PipelineDefinition(output_field="vec", source_fields=tuple(fields), target_dimension=8, version=1)


def test_compose_joins_attributes_in_list_order():
    record = Record(
        id="r1",
        attributes={"serviceName": "CAR-ENRICHMENT", "level": "INFO", "message": "enrich start"},
    )
    text = FieldComposer().compose(record, _definition("serviceName", "level", "message"))
    assert text == "CAR-ENRICHMENT INFO enrich start"


def test_compose_follows_definition_order_not_record_order():
    record = Record(id="r1", attributes={"a": "first", "b": "second"})
    assert FieldComposer().compose(record, _definition("b", "a")) == "second first"


def test_missing_and_none_attributes_become_empty_strings():
    record = Record(id="r1", attributes={"a": "x", "c": None})
    assert FieldComposer().compose(record, _definition("a", "b", "c")) == "x  "


def test_non_string_values_are_rendered():
    record = Record(id="r1", attributes={"code": 503, "ok": False})
    assert FieldComposer().compose(record, _definition("code", "ok")) == "503 False"


def test_compose_is_deterministic():
    composer = FieldComposer()
    definition = _definition("serviceName", "message")
    record = Record(id="r1", attributes={"message": "m", "serviceName": "s"})
    outputs = {composer.compose(record, definition) for _ in range(20)}
    assert outputs == {"s m"}
