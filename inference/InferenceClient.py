# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: InferenceClient
# -----------------------------------------------------------------------------
from typing import Dict, Protocol, runtime_checkable

# token -> non-negative relevance weight; transient, never persisted
WeightedTermMap = Dict[str, float]


@runtime_checkable
class InferenceClient(Protocol):
    def infer(self, text: str) -> WeightedTermMap:
        ...

    def test_connection(self) -> bool:
        ...
