# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-22
# Description: conftest.py
# -----------------------------------------------------------------------------

import sys
import threading
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from errors.Faults import InferenceUnavailableError  # noqa: E402
from inference.RetryPolicy import RetryPolicy  # noqa: E402
from pipeline.EmbeddingPipeline import EmbeddingPipeline  # noqa: E402
from pipeline.PipelineRegistry import PipelineRegistry  # noqa: E402
from record.Record import Record  # noqa: E402
from services.PipelineService import PipelineService  # noqa: E402
from vectorstore.InMemoryRecordStore import InMemoryRecordStore  # noqa: E402

COLLECTION = "test-records"


class ScriptedInferenceClient:
    """
    Deterministic stand-in for the sparse inference service.

    Each whitespace token gets weight = occurrences + len(token) / 100.
    fail_when(text) -> True makes that call raise InferenceUnavailableError.
    """

    def __init__(self, fail_when: Optional[Callable[[str], bool]] = None) -> None:
        self.fail_when = fail_when
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def infer(self, text: str) -> Dict[str, float]:
        with self._lock:
            self.calls.append(text)
        if not text or not text.strip():
            return {}
        if self.fail_when is not None and self.fail_when(text):
            raise InferenceUnavailableError(f"scripted outage for {text!r}")
        counts = Counter(text.lower().split())
        return {tok: n + len(tok) / 100.0 for tok, n in counts.items()}

    def test_connection(self) -> bool:
        return True


def make_records(n: int, start: int = 0) -> List[Record]:
    return [
        Record(
            id=f"{i:06d}",
            attributes={
                "serviceName": f"svc-{i % 7}",
                "level": "ERROR" if i % 5 == 0 else "INFO",
                "message": f"event number {i} processed",
            },
        )
        for i in range(start, start + n)
    ]


@pytest.fixture
def no_wait_retry() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, initial_delay=0.0, sleep=lambda _: None)


@pytest.fixture
def inference_client() -> ScriptedInferenceClient:
    return ScriptedInferenceClient()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def registry() -> PipelineRegistry:
    return PipelineRegistry()


@pytest.fixture
def pipeline(inference_client, no_wait_retry) -> EmbeddingPipeline:
    return EmbeddingPipeline(inference_client=inference_client, retry_policy=no_wait_retry)


@pytest.fixture
def pipeline_service(registry, store) -> PipelineService:
    return PipelineService(registry=registry, store=store, collection_name=COLLECTION)


@pytest.fixture
def record_factory() -> Callable[..., List[Record]]:
    return make_records


@pytest.fixture
def client_factory():
    return ScriptedInferenceClient
