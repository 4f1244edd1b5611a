# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: JobStore
# -----------------------------------------------------------------------------
import copy
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from reprocess.ReprocessingJob import JobStatus, ReprocessingJob
from utility.json_state import load_json_state, save_json_state
from utility.logging_utils import get_class_logger


class JobStore:
    """
    Holds Reprocessing Jobs (control-plane state) until they are cleared.

    The live job objects are shared with the slice workers; save() is the
    checkpoint and, when a path is configured, also writes a JSON snapshot
    so a restarted process can resume from the per-slice cursors.
    """

    def __init__(self, *, path: Optional[Path] = None, logger: logging.Logger | None = None) -> None:
        self.path = path
        self.logger = logger or get_class_logger(self.__class__)
        self._lock = threading.RLock()
        self._jobs: Dict[str, ReprocessingJob] = {}
        self._load()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def add(self, job: ReprocessingJob) -> None:
        with self._lock:
            if job.job_id in self._jobs:
                raise ValueError(f"Job already exists: {job.job_id}")
            self._jobs[job.job_id] = job
            self._persist()

    def get(self, job_id: str) -> ReprocessingJob:
        with self._lock:
            if job_id not in self._jobs:
                raise KeyError(f"Unknown reprocessing job '{job_id}'")
            return self._jobs[job_id]

    def snapshot(self, job_id: str) -> ReprocessingJob:
        """Consistent copy of a job for callers outside the worker threads."""
        with self._lock:
            return copy.deepcopy(self.get(job_id))

    def list(self) -> List[ReprocessingJob]:
        with self._lock:
            return [copy.deepcopy(j) for j in sorted(self._jobs.values(), key=lambda j: j.created_at)]

    def save(self, job: ReprocessingJob) -> None:
        with self._lock:
            job.touch()
            self._persist()

    def remove(self, job_id: str) -> None:
        with self._lock:
            if job_id not in self._jobs:
                raise KeyError(f"Unknown reprocessing job '{job_id}'")
            del self._jobs[job_id]
            self._persist()

    # -------------------------------------------------------------------------
    def _persist(self) -> None:
        save_json_state(self.path, {"jobs": [j.to_dict() for j in self._jobs.values()]})

    def _load(self) -> None:
        data = load_json_state(self.path)
        if not data:
            return
        for raw in data.get("jobs", []):
            job = ReprocessingJob.from_dict(raw)
            # A job that was running when the process died is resumable, not running
            if job.status == JobStatus.RUNNING:
                job.status = JobStatus.PENDING
            self._jobs[job.job_id] = job
        self.logger.info("Loaded %d reprocessing job(s) from %s", len(self._jobs), self.path)
