# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-23
# Description: test_ingest_service.py
# -----------------------------------------------------------------------------
import pytest

from errors.Faults import ValidationFault
from ingestion.IngestService import IngestService
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from record.Record import Record

COLLECTION = "test-records"


def _service(store, registry, pipeline) -> IngestService:
    return IngestService(store=store, registry=registry, pipeline=pipeline, collection_name=COLLECTION)


def test_new_records_get_a_vector_per_active_pipeline(store, registry, pipeline, pipeline_service, record_factory):
    pipeline_service.register(["serviceName", "level", "message"], 8, "semantic_vec")
    pipeline_service.register(["message"], 4, "message_vec")

    result = _service(store, registry, pipeline).index_records(record_factory(10))

    assert result.requested == 10
    assert result.stored == 10
    assert result.vectors_written == 20
    assert result.failed == {}
    for record in store.get_records(COLLECTION, [f"{i:06d}" for i in range(10)]):
        assert len(record.vector("semantic_vec")) == 8
        assert len(record.vector("message_vec")) == 4
        assert record.pipeline_version("semantic_vec") == 1


def test_output_fields_subset(store, registry, pipeline, pipeline_service, record_factory):
    pipeline_service.register(["message"], 4, "a")
    pipeline_service.register(["message"], 4, "b")

    result = _service(store, registry, pipeline).index_records(record_factory(3), output_fields=["b"])

    assert result.vectors_written == 3
    [record] = store.get_records(COLLECTION, ["000000"])
    assert record.vector("a") is None
    assert record.vector("b") is not None


def test_records_are_stored_even_when_vectorization_fails(store, registry, pipeline_service, client_factory, no_wait_retry):
    pipeline_service.register(["message"], 4, "vec")
    flaky = EmbeddingPipeline(
        inference_client=client_factory(fail_when=lambda text: "bad" in text),
        retry_policy=no_wait_retry,
    )
    records = [Record(id="good", attributes={"message": "fine"}), Record(id="broken", attributes={"message": "bad"})]

    result = _service(store, registry, flaky).index_records(records)

    assert result.stored == 2
    assert result.failed == {"vec": ["broken"]}
    good, broken = store.get_records(COLLECTION, ["good", "broken"])
    assert good.vector("vec") is not None
    assert broken.vector("vec") is None
    assert broken.attributes == {"message": "bad"}


def test_duplicate_or_blank_ids_are_rejected(store, registry, pipeline, pipeline_service):
    pipeline_service.register(["message"], 4, "vec")
    svc = _service(store, registry, pipeline)

    with pytest.raises(ValidationFault):
        svc.index_records([Record(id="x"), Record(id="x")])
    with pytest.raises(ValidationFault):
        svc.index_records([Record(id="")])
    assert store.count(COLLECTION) == 0
