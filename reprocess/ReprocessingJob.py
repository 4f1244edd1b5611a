# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: ReprocessingJob
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_FAILED_IDS_PER_SLICE = 100


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)


@dataclass
class SliceProgress:
    slice_id: int
    seen: int = 0
    updated: int = 0
    failed: int = 0
    skipped: int = 0
    batches: int = 0
    # Position after the last written batch; None = start of slice
    cursor: Optional[str] = None
    done: bool = False
    error: Optional[str] = None
    failed_ids: List[str] = field(default_factory=list)

    def record_failure(self, record_id: str) -> None:
        self.failed += 1
        if len(self.failed_ids) < MAX_FAILED_IDS_PER_SLICE:
            self.failed_ids.append(record_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slice_id": self.slice_id,
            "seen": self.seen,
            "updated": self.updated,
            "failed": self.failed,
            "skipped": self.skipped,
            "batches": self.batches,
            "cursor": self.cursor,
            "done": self.done,
            "error": self.error,
            "failed_ids": list(self.failed_ids),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SliceProgress":
        return SliceProgress(
            slice_id=int(data["slice_id"]),
            seen=int(data.get("seen", 0)),
            updated=int(data.get("updated", 0)),
            failed=int(data.get("failed", 0)),
            skipped=int(data.get("skipped", 0)),
            batches=int(data.get("batches", 0)),
            cursor=data.get("cursor"),
            done=bool(data.get("done", False)),
            error=data.get("error"),
            failed_ids=list(data.get("failed_ids") or []),
        )


@dataclass
class ReprocessingJob:
    """
    A bulk reprocessing run: which records (collection + filters), which
    Pipeline Definition version, how it is partitioned, and how far each
    slice has got.
    """

    job_id: str
    collection: str
    output_field: str
    pipeline_version: int
    batch_size: int
    slice_count: int
    filters: Dict[str, Any] = field(default_factory=dict)
    only_stale: bool = False
    status: JobStatus = JobStatus.PENDING
    slices: List[SliceProgress] = field(default_factory=list)
    error: Optional[str] = None
    cancel_requested: bool = False
    created_at: str = field(default_factory=_now)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    updated_at: str = field(default_factory=_now)

    def __post_init__(self) -> None:
        if not self.slices:
            self.slices = [SliceProgress(slice_id=i) for i in range(self.slice_count)]

    @property
    def seen(self) -> int:
        return sum(s.seen for s in self.slices)

    @property
    def updated(self) -> int:
        return sum(s.updated for s in self.slices)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.slices)

    @property
    def skipped(self) -> int:
        return sum(s.skipped for s in self.slices)

    def pending_slices(self) -> List[SliceProgress]:
        return [s for s in self.slices if not s.done]

    def touch(self) -> None:
        self.updated_at = _now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "collection": self.collection,
            "output_field": self.output_field,
            "pipeline_version": self.pipeline_version,
            "batch_size": self.batch_size,
            "slice_count": self.slice_count,
            "filters": dict(self.filters),
            "only_stale": self.only_stale,
            "status": self.status.value,
            "slices": [s.to_dict() for s in self.slices],
            "error": self.error,
            "cancel_requested": self.cancel_requested,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "updated_at": self.updated_at,
            "totals": {
                "seen": self.seen,
                "updated": self.updated,
                "failed": self.failed,
                "skipped": self.skipped,
            },
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ReprocessingJob":
        return ReprocessingJob(
            job_id=data["job_id"],
            collection=data["collection"],
            output_field=data["output_field"],
            pipeline_version=int(data["pipeline_version"]),
            batch_size=int(data["batch_size"]),
            slice_count=int(data["slice_count"]),
            filters=dict(data.get("filters") or {}),
            only_stale=bool(data.get("only_stale", False)),
            status=JobStatus(data.get("status", JobStatus.PENDING.value)),
            slices=[SliceProgress.from_dict(s) for s in data.get("slices") or []],
            error=data.get("error"),
            cancel_requested=bool(data.get("cancel_requested", False)),
            created_at=data.get("created_at") or _now(),
            started_at=data.get("started_at"),
            finished_at=data.get("finished_at"),
            updated_at=data.get("updated_at") or _now(),
        )
