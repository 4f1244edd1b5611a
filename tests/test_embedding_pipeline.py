# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-22
# Description: test_embedding_pipeline.py
# -----------------------------------------------------------------------------
import threading

import pytest

from errors.Faults import EmptyCompositionError, InferenceUnavailableError, ValidationFault
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from pipeline.PipelineDefinition import PipelineDefinition
from record.Record import Record

DEFINITION = PipelineDefinition(output_field="vec", source_fields=("title", "body"), target_dimension=4, version=3)


def test_vectorize_record_composes_infers_and_normalizes(pipeline, inference_client):
    record = Record(id="r1", attributes={"title": "disk full", "body": "disk"})
    outcome = pipeline.vectorize_record(record, DEFINITION)

    assert inference_client.calls == ["disk full disk"]
    assert outcome.record_id == "r1"
    assert outcome.pipeline_version == 3
    assert outcome.vector == pytest.approx([2.04, 1.04, 0.0, 0.0])


def test_same_record_same_definition_is_bit_identical(pipeline, record_factory):
    definition = PipelineDefinition(
        output_field="vec", source_fields=("serviceName", "level", "message"), target_dimension=6, version=1
    )
    for record in record_factory(20):
        first = pipeline.vectorize_record(record, definition).vector
        second = pipeline.vectorize_record(record, definition).vector
        assert first == second


def test_empty_composition_default_is_zero_vector(pipeline, inference_client):
    outcome = pipeline.vectorize_record(Record(id="blank"), DEFINITION)
    assert outcome.vector == [0.0, 0.0, 0.0, 0.0]
    assert not outcome.skipped
    assert inference_client.calls == []


def test_empty_composition_skip_policy(inference_client, no_wait_retry):
    p = EmbeddingPipeline(inference_client=inference_client, retry_policy=no_wait_retry, empty_text_policy="skip")
    outcome = p.vectorize_record(Record(id="blank", attributes={"title": "  "}), DEFINITION)
    assert outcome.skipped
    assert outcome.vector is None


def test_empty_composition_fail_policy(inference_client, no_wait_retry):
    p = EmbeddingPipeline(inference_client=inference_client, retry_policy=no_wait_retry, empty_text_policy="fail")
    with pytest.raises(EmptyCompositionError) as exc:
        p.vectorize_record(Record(id="blank"), DEFINITION)
    assert exc.value.record_id == "blank"


def test_unknown_policy_is_rejected(inference_client):
    with pytest.raises(ValueError):
        EmbeddingPipeline(inference_client=inference_client, empty_text_policy="ignore")


def test_transient_inference_failure_is_retried(client_factory, no_wait_retry):
    attempts = []

    def fail_first_two(text):
        attempts.append(text)
        return len(attempts) <= 2

    p = EmbeddingPipeline(inference_client=client_factory(fail_when=fail_first_two), retry_policy=no_wait_retry)
    outcome = p.vectorize_record(Record(id="r", attributes={"title": "ok"}), DEFINITION)

    assert len(attempts) == 3
    assert outcome.vector[0] > 0.0


def test_exhausted_retries_propagate(client_factory, no_wait_retry):
    p = EmbeddingPipeline(inference_client=client_factory(fail_when=lambda _: True), retry_policy=no_wait_retry)
    with pytest.raises(InferenceUnavailableError):
        p.vectorize_record(Record(id="r", attributes={"title": "ok"}), DEFINITION)


def test_gate_is_released_after_each_attempt(client_factory, no_wait_retry):
    gate = threading.BoundedSemaphore(1)
    p = EmbeddingPipeline(inference_client=client_factory(fail_when=lambda _: True), retry_policy=no_wait_retry)
    with pytest.raises(InferenceUnavailableError):
        p.vectorize_record(Record(id="r", attributes={"title": "ok"}), DEFINITION, inference_gate=gate)
    assert gate.acquire(blocking=False)


def test_vectorize_text_rejects_blank_query(pipeline):
    with pytest.raises(ValidationFault):
        pipeline.vectorize_text("   ", 4)
