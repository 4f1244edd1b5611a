# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Description: Faults
# -----------------------------------------------------------------------------
"""
Fault taxonomy shared by the pipeline, the reprocessor and the API layer.

  - TransientFault:  retried with bounded backoff (inference / store hiccups)
  - ValidationFault: rejected synchronously, never retried
  - SystemicFault:   escalates to job-level failure
  - DataFault:       record-level data problem (e.g. empty composition)
"""


class Fault(Exception):
    category = "fault"

    def __init__(self, message: str, *, record_id: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id

    def describe(self) -> str:
        return f"{self.category}: {self}"


class TransientFault(Fault):
    category = "transient"


class InferenceUnavailableError(TransientFault):
    """Inference service unreachable, timed out or answered 429/5xx."""


class InferenceResponseError(TransientFault):
    """Inference service answered with a body we cannot turn into a term map."""


class StoreUnavailableError(TransientFault):
    """Storage engine call failed."""


class InferenceRejectedError(Fault):
    """Inference service refused the request (4xx). Retrying will not help."""

    category = "rejected"


class ValidationFault(Fault, ValueError):
    category = "validation"


class SystemicFault(Fault):
    category = "systemic"


class DataFault(Fault):
    category = "data"


class EmptyCompositionError(DataFault):
    """Composed text is empty and the configured policy is to fail the record."""


class JobStateError(Fault):
    """Requested job transition is not allowed in the job's current state."""

    category = "conflict"
