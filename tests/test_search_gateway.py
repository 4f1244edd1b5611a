# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-23
# Description: test_search_gateway.py
# -----------------------------------------------------------------------------
import pytest

from errors.Faults import StoreUnavailableError, SystemicFault, ValidationFault
from ingestion.IngestService import IngestService
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from record.Record import Record
from search.SearchGateway import SearchGateway
from vectorstore.InMemoryRecordStore import InMemoryRecordStore

COLLECTION = "test-records"


class _SpyStore(InMemoryRecordStore):
    def __init__(self):
        super().__init__()
        self.knn_calls = 0

    def knn_search(self, *args, **kwargs):
        self.knn_calls += 1
        return super().knn_search(*args, **kwargs)


class _BrokenStore(InMemoryRecordStore):
    def knn_search(self, *args, **kwargs):
        raise StoreUnavailableError("search thread pool rejected")


def _index(store, registry, pipeline, pipeline_service, records, dim=4):
    pipeline_service.register(["title", "body"], dim, "vec")
    IngestService(store=store, registry=registry, pipeline=pipeline, collection_name=COLLECTION).index_records(records)


def _gateway(store, registry, pipeline) -> SearchGateway:
    return SearchGateway(store=store, registry=registry, pipeline=pipeline, collection_name=COLLECTION)


def test_wrong_length_vector_is_rejected_before_any_store_call(registry, pipeline):
    from services.PipelineService import PipelineService

    store = _SpyStore()
    PipelineService(registry=registry, store=store, collection_name=COLLECTION).register(["title"], 4, "vec")

    with pytest.raises(ValidationFault):
        _gateway(store, registry, pipeline).search("vec", vector=[0.1, 0.2, 0.3], k=5)
    assert store.knn_calls == 0


def test_text_search_ranks_best_match_first(store, registry, pipeline, pipeline_service):
    records = [
        Record(id="disk", attributes={"title": "disk full", "body": "disk disk"}),
        Record(id="net", attributes={"title": "network down", "body": "retry"}),
        Record(id="cpu", attributes={"title": "cpu hot", "body": "fan"}),
    ]
    _index(store, registry, pipeline, pipeline_service, records)

    hits = _gateway(store, registry, pipeline).search("vec", text="disk disk disk full", k=3, fields=["title"])

    assert hits[0].record_id == "disk"
    assert hits[0].attributes == {"title": "disk full"}
    scores = [h.score for h in hits]
    assert scores == sorted(scores, reverse=True)


def test_vector_search_honours_k_and_filters(store, registry, pipeline, pipeline_service, record_factory):
    records = record_factory(30)
    for r in records:
        r.attributes["title"] = r.attributes["serviceName"]
        r.attributes["body"] = r.attributes["message"]
    _index(store, registry, pipeline, pipeline_service, records)

    gateway = _gateway(store, registry, pipeline)
    hits = gateway.search_vector("vec", [1.0, 0.5, 0.2, 0.1], k=4, num_candidates=10, filters={"level": "ERROR"})

    assert len(hits) == 4
    ids = {h.record_id for h in hits}
    assert ids <= {f"{i:06d}" for i in range(0, 30, 5)}


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"text": "a", "vector": [0.0] * 4},
        {"text": "a", "k": 0},
        {"text": "a", "k": 10, "num_candidates": 5},
        {"text": "   "},
    ],
)
def test_invalid_requests_are_rejected(store, registry, pipeline, pipeline_service, kwargs):
    pipeline_service.register(["title"], 4, "vec")
    with pytest.raises(ValidationFault):
        _gateway(store, registry, pipeline).search("vec", **kwargs)


def test_unknown_field_raises_key_error(store, registry, pipeline):
    with pytest.raises(KeyError):
        _gateway(store, registry, pipeline).search("missing", text="hello")


def test_store_failure_surfaces_as_systemic(registry, pipeline):
    from services.PipelineService import PipelineService

    store = _BrokenStore()
    PipelineService(registry=registry, store=store, collection_name=COLLECTION).register(["title"], 4, "vec")

    with pytest.raises(SystemicFault):
        _gateway(store, registry, pipeline).search("vec", vector=[0.0, 0.0, 0.0, 1.0])


def test_query_inference_outage_surfaces_as_systemic(store, registry, pipeline_service, client_factory, no_wait_retry):
    pipeline_service.register(["title"], 4, "vec")
    down = EmbeddingPipeline(inference_client=client_factory(fail_when=lambda _: True), retry_policy=no_wait_retry)

    with pytest.raises(SystemicFault):
        _gateway(store, registry, down).search_text("vec", "anything")
