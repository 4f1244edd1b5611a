# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-24
# Description: test_chroma_record_store.py
# -----------------------------------------------------------------------------
import os
import uuid

import chromadb
import pytest

from config.Config import Config
from errors.Faults import StoreUnavailableError, ValidationFault
from inference.RetryPolicy import RetryPolicy
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from reprocess.BulkReprocessor import BulkReprocessor
from reprocess.ReprocessingJob import JobStatus
from record.Record import Record
from search.SearchGateway import SearchGateway
from services.PipelineService import PipelineService
from vectorstore.ChromaRecordStore import ChromaRecordStore
from vectorstore.RecordStore import VectorUpdate


@pytest.fixture
def chroma_store() -> ChromaRecordStore:
    return ChromaRecordStore(client=chromadb.EphemeralClient())


@pytest.fixture
def collection() -> str:
    # EphemeralClient state is shared within the process
    return f"rvi-test-{uuid.uuid4().hex[:12]}"


def _read_all(store, collection, slice_id, slice_count, limit):
    ids, cursor = [], None
    while True:
        page = store.read_batch(collection, slice_id=slice_id, slice_count=slice_count, cursor=cursor, limit=limit)
        ids.extend(r.id for r in page.records)
        if page.next_cursor is None:
            return ids
        cursor = page.next_cursor


def test_vector_field_declaration(chroma_store, collection):
    assert chroma_store.test_connection() is True
    chroma_store.ensure_vector_field(collection, "vec", 4, metric="cosine", index_options={"hnsw:M": 16})
    chroma_store.ensure_vector_field(collection, "vec", 4)

    assert chroma_store.vector_field_dimension(collection, "vec") == 4
    assert chroma_store.vector_field_dimension(collection, "other") is None
    with pytest.raises(ValueError):
        chroma_store.ensure_vector_field(collection, "vec", 8)
    with pytest.raises(ValueError):
        chroma_store.ensure_vector_field(collection, "bad", 4, metric="hamming")


def test_records_and_vectors_roundtrip(chroma_store, collection):
    chroma_store.ensure_vector_field(collection, "vec", 3)
    chroma_store.upsert_records(
        collection,
        [
            Record(id="a", attributes={"level": "INFO", "code": 7}, vectors={"vec": [0.5, 0.25, 0.0]}, pipeline_versions={"vec": 2}),
            Record(id="b", attributes={"level": "ERROR"}),
        ],
    )

    a, b = chroma_store.get_records(collection, ["a", "b"])
    assert a.attributes == {"level": "INFO", "code": 7}
    assert a.vector("vec") == pytest.approx([0.5, 0.25, 0.0])
    assert a.pipeline_version("vec") == 2
    assert b.vector("vec") is None
    assert chroma_store.count(collection) == 2
    assert chroma_store.count(collection, {"level": "ERROR"}) == 1


def test_reserved_attribute_names_are_rejected(chroma_store, collection):
    with pytest.raises(ValueError):
        chroma_store.upsert_records(collection, [Record(id="x", attributes={"_bucket": 1})])


def test_collection_name_rejection_is_a_validation_error(chroma_store, collection, registry):
    with pytest.raises(ValueError) as excinfo:
        chroma_store.ensure_vector_field(collection, "semantic vec!", 4)
    assert not isinstance(excinfo.value, StoreUnavailableError)

    service = PipelineService(registry=registry, store=chroma_store, collection_name=collection)
    with pytest.raises(ValidationFault):
        service.register(["message"], 4, "semantic vec!")
    assert registry.output_fields() == []
    assert chroma_store.vector_field_dimension(collection, "semantic vec!") is None


def test_slices_cover_every_record_exactly_once(chroma_store, collection, record_factory):
    records = record_factory(60)
    chroma_store.upsert_records(collection, records)

    per_slice = [_read_all(chroma_store, collection, s, 3, 7) for s in range(3)]
    flat = [rid for ids in per_slice for rid in ids]

    assert sorted(flat) == sorted(r.id for r in records)
    assert len(flat) == len(set(flat))


def test_update_vectors_and_knn(chroma_store, collection):
    chroma_store.ensure_vector_field(collection, "vec", 2)
    chroma_store.upsert_records(
        collection,
        [
            Record(id="near", attributes={"kind": "x"}),
            Record(id="mid", attributes={"kind": "x"}),
            Record(id="far", attributes={"kind": "y"}),
        ],
    )
    written = chroma_store.update_vectors(
        collection,
        "vec",
        [
            VectorUpdate("near", [1.0, 0.1], 1),
            VectorUpdate("mid", [1.0, 1.0], 1),
            VectorUpdate("far", [0.0, 1.0], 1),
            VectorUpdate("ghost", [1.0, 0.0], 1),
        ],
    )
    assert written == 3

    hits = chroma_store.knn_search(collection, "vec", [1.0, 0.0], k=3, num_candidates=3)
    assert [h.record_id for h in hits] == ["near", "mid", "far"]
    assert hits[0].score > hits[1].score > hits[2].score

    filtered = chroma_store.knn_search(collection, "vec", [1.0, 0.0], k=3, num_candidates=3, filters={"kind": "y"}, fields=["kind"])
    assert [(h.record_id, h.attributes) for h in filtered] == [("far", {"kind": "y"})]

    with pytest.raises(KeyError):
        chroma_store.knn_search(collection, "missing", [1.0, 0.0], k=1, num_candidates=1)


def test_reprocess_and_search_end_to_end(chroma_store, collection, registry, inference_client, record_factory):
    no_wait = RetryPolicy(max_attempts=2, initial_delay=0.0, sleep=lambda _: None)
    pipeline = EmbeddingPipeline(inference_client=inference_client, retry_policy=no_wait)
    PipelineService(registry=registry, store=chroma_store, collection_name=collection).register(
        ["serviceName", "level", "message"], 6, "semantic_vec"
    )
    chroma_store.upsert_records(collection, record_factory(40))

    reprocessor = BulkReprocessor(
        store=chroma_store,
        registry=registry,
        pipeline=pipeline,
        collection_name=collection,
        store_retry=no_wait,
        default_slice_count=2,
    )
    try:
        job = reprocessor.submit("semantic_vec", batch_size=8)
    finally:
        reprocessor.shutdown()

    assert job.status == JobStatus.COMPLETED
    assert job.updated == 40

    gateway = SearchGateway(store=chroma_store, registry=registry, pipeline=pipeline, collection_name=collection)
    hits = gateway.search("semantic_vec", text="svc-3 ERROR event number 3 processed", k=5, fields=["serviceName"])
    assert len(hits) == 5
    assert [h.score for h in hits] == sorted((h.score for h in hits), reverse=True)


def _missing_chroma_env_vars() -> list[str]:
    return [name for name in Config.CHROMA_CLOUD_ENV_VARS if not os.getenv(name)]


@pytest.mark.integration
def test_live_chroma_connection():
    missing = _missing_chroma_env_vars()
    if missing or not os.getenv(Config.ENV_VARS["inference_endpoint"]):
        pytest.skip(f"Missing env vars for Chroma Cloud: {', '.join(missing) or 'RVI_INFERENCE_ENDPOINT'}")

    store = ChromaRecordStore(cfg=Config.from_env())
    assert store.test_connection() is True
