# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-22
# Description: test_slicing_and_inmemory_store.py
# -----------------------------------------------------------------------------
import pytest

from record.Record import Record
from vectorstore.RecordStore import VectorUpdate
from vectorstore.slicing import BUCKET_COUNT, bucket_of, buckets_for_slice, check_slice, slice_of

COLLECTION = "test-records"


def _read_all(store, slice_id, slice_count, limit, filters=None):
    ids, cursor = [], None
    while True:
        page = store.read_batch(
            COLLECTION, filters=filters, slice_id=slice_id, slice_count=slice_count, cursor=cursor, limit=limit
        )
        ids.extend(r.id for r in page.records)
        if page.next_cursor is None:
            return ids
        cursor = page.next_cursor


def test_bucket_is_stable_and_in_range():
    assert bucket_of("000042") == bucket_of("000042")
    assert all(0 <= bucket_of(f"id-{i}") < BUCKET_COUNT for i in range(500))


@pytest.mark.parametrize("slice_count", [1, 3, 8, 1024])
def test_buckets_partition_exactly(slice_count):
    seen = []
    for s in range(slice_count):
        seen.extend(buckets_for_slice(s, slice_count))
    assert sorted(seen) == list(range(BUCKET_COUNT))


@pytest.mark.parametrize("slice_id,slice_count", [(0, 0), (2, 2), (-1, 3), (0, 1025)])
def test_invalid_slices_are_rejected(slice_id, slice_count):
    with pytest.raises(ValueError):
        check_slice(slice_id, slice_count)


@pytest.mark.parametrize("slice_count,limit", [(1, 7), (4, 10), (5, 1000)])
def test_slices_cover_every_record_exactly_once(store, record_factory, slice_count, limit):
    records = record_factory(137)
    store.upsert_records(COLLECTION, records)

    per_slice = [_read_all(store, s, slice_count, limit) for s in range(slice_count)]
    flat = [rid for ids in per_slice for rid in ids]

    assert sorted(flat) == sorted(r.id for r in records)
    assert len(flat) == len(set(flat))
    for s, ids in enumerate(per_slice):
        assert all(slice_of(rid, slice_count) == s for rid in ids)


def test_read_batch_honours_filters(store, record_factory):
    store.upsert_records(COLLECTION, record_factory(50))
    ids = _read_all(store, 0, 1, 8, filters={"level": "ERROR"})
    assert ids == [f"{i:06d}" for i in range(0, 50, 5)]
    assert store.count(COLLECTION, {"level": "ERROR"}) == 10


def test_read_batch_on_missing_collection_raises_key_error(store):
    with pytest.raises(KeyError):
        store.read_batch("nope", slice_id=0, slice_count=1)


def test_vector_field_declaration_and_dimension_guard(store):
    store.ensure_vector_field(COLLECTION, "vec", 3)
    store.ensure_vector_field(COLLECTION, "vec", 3)
    assert store.vector_field_dimension(COLLECTION, "vec") == 3
    assert store.vector_field_dimension(COLLECTION, "other") is None

    with pytest.raises(ValueError):
        store.ensure_vector_field(COLLECTION, "vec", 4)
    with pytest.raises(ValueError):
        store.upsert_records(COLLECTION, [Record(id="r", vectors={"vec": [1.0]}, pipeline_versions={"vec": 1})])
    with pytest.raises(KeyError):
        store.upsert_records(COLLECTION, [Record(id="r", vectors={"undeclared": [1.0]})])


def test_update_vectors_is_partial_and_skips_unknown_ids(store):
    store.ensure_vector_field(COLLECTION, "a", 2)
    store.ensure_vector_field(COLLECTION, "b", 2)
    store.upsert_records(
        COLLECTION,
        [Record(id="r1", attributes={"x": "1"}, vectors={"b": [0.5, 0.5]}, pipeline_versions={"b": 4})],
    )

    written = store.update_vectors(
        COLLECTION, "a", [VectorUpdate("r1", [1.0, 0.0], 2), VectorUpdate("ghost", [1.0, 0.0], 2)]
    )

    assert written == 1
    [r1] = store.get_records(COLLECTION, ["r1"])
    assert r1.vector("a") == [1.0, 0.0]
    assert r1.pipeline_version("a") == 2
    assert r1.vector("b") == [0.5, 0.5]
    assert r1.pipeline_version("b") == 4
    assert r1.attributes == {"x": "1"}


def test_knn_orders_by_score_and_projects_fields(store):
    store.ensure_vector_field(COLLECTION, "vec", 2)
    store.upsert_records(
        COLLECTION,
        [
            Record(id="near", attributes={"t": "n", "u": 1}, vectors={"vec": [1.0, 0.1]}, pipeline_versions={"vec": 1}),
            Record(id="far", attributes={"t": "f", "u": 2}, vectors={"vec": [0.0, 1.0]}, pipeline_versions={"vec": 1}),
            Record(id="mid", attributes={"t": "m", "u": 3}, vectors={"vec": [1.0, 1.0]}, pipeline_versions={"vec": 1}),
            Record(id="novec", attributes={"t": "x"}),
        ],
    )

    hits = store.knn_search(COLLECTION, "vec", [1.0, 0.0], k=2, num_candidates=10, fields=["t"])

    assert [h.record_id for h in hits] == ["near", "mid"]
    assert hits[0].score >= hits[1].score
    assert hits[0].attributes == {"t": "n"}
