# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: BulkReprocessor
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from errors.Faults import JobStateError, SystemicFault, TransientFault, ValidationFault
from inference.RetryPolicy import RetryPolicy
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from pipeline.PipelineDefinition import PipelineDefinition
from pipeline.PipelineRegistry import PipelineRegistry
from reprocess.JobStore import JobStore
from reprocess.ReprocessingJob import JobStatus, ReprocessingJob, SliceProgress
from utility.logging_utils import get_class_logger, get_job_logger
from vectorstore.RecordStore import RecordPage, RecordStore, VectorUpdate
from vectorstore.slicing import BUCKET_COUNT


class BulkReprocessor:
    """
    Replays the embedding pipeline over an existing record collection.

      - the record set is split into S disjoint slices, one worker thread each
      - each slice is walked in fixed-size batches:
          read -> compose/infer/normalize per record -> write -> checkpoint
      - per-record failures are counted, never abort the slice
      - systemic faults (store unreadable, inference persistently down) fail the job
      - cancellation is observed at batch boundaries only
      - jobs resume from the last checkpointed cursor of each slice
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        registry: PipelineRegistry,
        pipeline: EmbeddingPipeline,
        collection_name: str,
        job_store: JobStore | None = None,
        store_retry: RetryPolicy | None = None,
        default_batch_size: int = 1000,
        default_slice_count: int = 4,
        max_inflight_inference: int = 0,
        max_consecutive_failures: int = 100,
        async_runners: int = 2,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.pipeline = pipeline
        self.collection_name = collection_name
        self.job_store = job_store or JobStore()
        self.store_retry = store_retry or RetryPolicy(max_attempts=4, initial_delay=0.5, backoff_factor=2.0)
        self.default_batch_size = default_batch_size
        self.default_slice_count = default_slice_count
        self.max_inflight_inference = max_inflight_inference
        self.max_consecutive_failures = max_consecutive_failures
        self.logger = logger or get_class_logger(self.__class__)

        self._runner = ThreadPoolExecutor(max_workers=max(1, async_runners), thread_name_prefix="reprocess-job")
        self._cancel_events: Dict[str, threading.Event] = {}
        self._futures: Dict[str, Future] = {}
        self._running: set[str] = set()
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    def submit(
        self,
        output_field: str,
        *,
        pipeline_version: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
        batch_size: Optional[int] = None,
        slice_count: Optional[int] = None,
        only_stale: bool = False,
        wait: bool = True,
    ) -> ReprocessingJob:
        batch_size = self.default_batch_size if batch_size is None else batch_size
        slice_count = self.default_slice_count if slice_count is None else slice_count
        if batch_size < 1:
            raise ValidationFault(f"batch_size must be >= 1, got {batch_size}")
        if not 1 <= slice_count <= BUCKET_COUNT:
            raise ValidationFault(f"slice_count must be in 1..{BUCKET_COUNT}, got {slice_count}")

        definition = self.registry.resolve(output_field, pipeline_version)
        self._check_vector_field(definition)

        job = ReprocessingJob(
            job_id=uuid.uuid4().hex,
            collection=self.collection_name,
            output_field=output_field,
            pipeline_version=definition.version,
            batch_size=batch_size,
            slice_count=slice_count,
            filters=dict(filters or {}),
            only_stale=only_stale,
        )
        self.job_store.add(job)
        self.logger.info(
            "Submitted reprocessing job %s: field='%s' v%d slices=%d batch=%d filters=%s only_stale=%s wait=%s",
            job.job_id,
            output_field,
            definition.version,
            slice_count,
            batch_size,
            job.filters,
            only_stale,
            wait,
        )
        return self._start(job, wait=wait)

    def get(self, job_id: str) -> ReprocessingJob:
        return self.job_store.snapshot(job_id)

    def list_jobs(self) -> List[ReprocessingJob]:
        return self.job_store.list()

    def cancel(self, job_id: str) -> ReprocessingJob:
        with self.job_store.lock:
            job = self.job_store.get(job_id)
            if job.status.terminal:
                raise JobStateError(f"Job {job_id} is already {job.status.value}")
            job.cancel_requested = True
            self.job_store.save(job)

        event = self._cancel_event(job_id)
        event.set()
        self.logger.info("Cancellation requested for job %s", job_id)

        # A pending job that never got a runner is cancelled right away
        with self.job_store.lock:
            if job.status == JobStatus.PENDING and not self._is_active(job_id):
                self._finish(job, JobStatus.CANCELLED)
        return self.get(job_id)

    def resume(self, job_id: str, *, wait: bool = True) -> ReprocessingJob:
        with self.job_store.lock:
            job = self.job_store.get(job_id)
            if job.status == JobStatus.COMPLETED:
                raise JobStateError(f"Job {job_id} already completed")
            if self._is_active(job_id):
                raise JobStateError(f"Job {job_id} is still running")

            job.status = JobStatus.PENDING
            job.cancel_requested = False
            job.error = None
            job.finished_at = None
            for progress in job.slices:
                progress.error = None
            self.job_store.save(job)

        self._cancel_event(job_id).clear()
        self.logger.info(
            "Resuming job %s (%d/%d slice(s) unfinished)", job_id, len(job.pending_slices()), job.slice_count
        )
        return self._start(job, wait=wait)

    def clear(self, job_id: str) -> None:
        with self.job_store.lock:
            job = self.job_store.get(job_id)
            if not job.status.terminal or self._is_active(job_id):
                raise JobStateError(f"Job {job_id} is {job.status.value}; only finished jobs can be cleared")
            self.job_store.remove(job_id)
        with self._lock:
            self._cancel_events.pop(job_id, None)
            self._futures.pop(job_id, None)
        self.logger.info("Cleared job %s", job_id)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> ReprocessingJob:
        """Block until an asynchronous job finishes (or timeout elapses)."""
        with self._lock:
            future = self._futures.get(job_id)
        if future is not None:
            future.result(timeout=timeout)
        return self.get(job_id)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            events = list(self._cancel_events.values())
        for event in events:
            event.set()
        self._runner.shutdown(wait=wait)

    # -------------------------------------------------------------------------
    # Job execution
    # -------------------------------------------------------------------------
    def _start(self, job: ReprocessingJob, *, wait: bool) -> ReprocessingJob:
        if wait:
            self._run(job)
            return self.get(job.job_id)

        future = self._runner.submit(self._run, job)
        with self._lock:
            self._futures[job.job_id] = future
        return self.get(job.job_id)

    def _run(self, job: ReprocessingJob) -> None:
        with self._lock:
            self._running.add(job.job_id)
        try:
            self._execute(job)
        finally:
            with self._lock:
                self._running.discard(job.job_id)

    def _execute(self, job: ReprocessingJob) -> None:
        cancel_event = self._cancel_event(job.job_id)
        if cancel_event.is_set():
            with self.job_store.lock:
                self._finish(job, JobStatus.CANCELLED)
            return

        try:
            definition = self.registry.get(job.output_field, job.pipeline_version)
        except KeyError as e:
            self.logger.error("Job %s cannot start: %s", job.job_id, e)
            with self.job_store.lock:
                job.error = SystemicFault(str(e)).describe()
                self._finish(job, JobStatus.FAILED)
            return

        pending = job.pending_slices()
        with self.job_store.lock:
            job.status = JobStatus.RUNNING
            job.started_at = job.started_at or datetime.now(timezone.utc).isoformat()
            self.job_store.save(job)

        inflight = self.max_inflight_inference or job.slice_count
        gate = threading.BoundedSemaphore(inflight)
        abort_event = threading.Event()

        self.logger.info(
            "Job %s running: %d slice worker(s), inference gate=%d",
            job.job_id,
            len(pending),
            inflight,
        )

        if pending:
            with ThreadPoolExecutor(max_workers=len(pending), thread_name_prefix=f"slice-{job.job_id[:8]}") as pool:
                futures = {
                    pool.submit(self._run_slice, job, progress, definition, gate, cancel_event, abort_event): progress
                    for progress in pending
                }
                for future, progress in futures.items():
                    try:
                        future.result()
                    except Exception as e:
                        fault = e if isinstance(e, SystemicFault) else SystemicFault(f"unexpected error: {e}")
                        self.logger.error(
                            "Job %s slice %d failed: %s", job.job_id, progress.slice_id, fault, exc_info=True
                        )
                        with self.job_store.lock:
                            progress.error = fault.describe()
                            job.error = job.error or f"slice {progress.slice_id}: {fault.describe()}"
                            self.job_store.save(job)

        with self.job_store.lock:
            if any(s.error for s in job.slices):
                status = JobStatus.FAILED
            elif job.pending_slices():
                status = JobStatus.CANCELLED
            else:
                status = JobStatus.COMPLETED
            self._finish(job, status)

    def _run_slice(
        self,
        job: ReprocessingJob,
        progress: SliceProgress,
        definition: PipelineDefinition,
        gate: threading.BoundedSemaphore,
        cancel_event: threading.Event,
        abort_event: threading.Event,
    ) -> None:
        try:
            self._process_slice(job, progress, definition, gate, cancel_event, abort_event)
        except Exception:
            # Sibling slices stop at their next batch boundary
            abort_event.set()
            raise

    def _process_slice(
        self,
        job: ReprocessingJob,
        progress: SliceProgress,
        definition: PipelineDefinition,
        gate: threading.BoundedSemaphore,
        cancel_event: threading.Event,
        abort_event: threading.Event,
    ) -> None:
        log = get_job_logger(self.logger, job.job_id, progress.slice_id)
        consecutive_failures = 0

        while True:
            # Batch boundary: the only place cancellation is observed
            if cancel_event.is_set() or abort_event.is_set():
                log.info("stopping at batch boundary (cursor=%s)", progress.cursor)
                return

            page = self._read_batch(job, progress, log)

            updates: List[VectorUpdate] = []
            failed_ids: List[str] = []
            skipped = 0
            for record in page.records:
                if job.only_stale and record.pipeline_version(job.output_field) == definition.version \
                        and record.vector(job.output_field) is not None:
                    skipped += 1
                    continue
                try:
                    outcome = self.pipeline.vectorize_record(record, definition, inference_gate=gate)
                except Exception as e:
                    log.warning("record '%s' failed: %s", record.id, e)
                    failed_ids.append(record.id)
                    consecutive_failures += 1
                    if self.max_consecutive_failures and consecutive_failures >= self.max_consecutive_failures:
                        # Cursor stays put so a resume replays the whole batch
                        with self.job_store.lock:
                            for record_id in failed_ids:
                                progress.record_failure(record_id)
                            self.job_store.save(job)
                        raise SystemicFault(
                            f"{consecutive_failures} consecutive record failures; last: {e}"
                        ) from e
                    continue

                consecutive_failures = 0
                if outcome.skipped:
                    skipped += 1
                    continue
                updates.append(VectorUpdate(record.id, outcome.vector, outcome.pipeline_version))

            written = self._write_batch(job, progress, updates, failed_ids, log)

            with self.job_store.lock:
                progress.seen += len(page.records)
                progress.updated += written
                progress.skipped += skipped
                for record_id in failed_ids:
                    progress.record_failure(record_id)
                progress.batches += 1
                progress.cursor = page.next_cursor
                progress.done = page.next_cursor is None
                self.job_store.save(job)

            log.debug(
                "batch %d: seen=%d updated=%d failed=%d skipped=%d",
                progress.batches,
                len(page.records),
                written,
                len(failed_ids),
                skipped,
            )

            if progress.done:
                log.info(
                    "done: seen=%d updated=%d failed=%d skipped=%d",
                    progress.seen,
                    progress.updated,
                    progress.failed,
                    progress.skipped,
                )
                return

    def _read_batch(self, job: ReprocessingJob, progress: SliceProgress, log: logging.LoggerAdapter) -> RecordPage:
        try:
            return self.store_retry.call(
                lambda: self.store.read_batch(
                    job.collection,
                    filters=job.filters or None,
                    slice_id=progress.slice_id,
                    slice_count=job.slice_count,
                    cursor=progress.cursor,
                    limit=job.batch_size,
                ),
                description="batch read",
                logger=log,
            )
        except TransientFault as e:
            raise SystemicFault(f"store unreadable: {e}") from e
        except (KeyError, ValueError) as e:
            raise SystemicFault(f"store rejected read: {e}") from e

    def _write_batch(
        self,
        job: ReprocessingJob,
        progress: SliceProgress,
        updates: List[VectorUpdate],
        failed_ids: List[str],
        log: logging.LoggerAdapter,
    ) -> int:
        if not updates:
            return 0
        try:
            return self.store_retry.call(
                lambda: self.store.update_vectors(job.collection, job.output_field, updates),
                description="batch write",
                logger=log,
            )
        except TransientFault as e:
            # Whole batch marked failed; a later pass picks these records up again
            log.error("batch write failed, %d record(s) marked failed: %s", len(updates), e)
            failed_ids.extend(u.record_id for u in updates)
            return 0
        except (KeyError, ValueError) as e:
            raise SystemicFault(f"store rejected write: {e}") from e

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _finish(self, job: ReprocessingJob, status: JobStatus) -> None:
        job.status = status
        job.finished_at = datetime.now(timezone.utc).isoformat()
        self.job_store.save(job)
        self.logger.info(
            "Job %s %s: seen=%d updated=%d failed=%d skipped=%d%s",
            job.job_id,
            status.value,
            job.seen,
            job.updated,
            job.failed,
            job.skipped,
            f" error={job.error}" if job.error else "",
        )

    def _check_vector_field(self, definition: PipelineDefinition) -> None:
        dim = self.store.vector_field_dimension(self.collection_name, definition.output_field)
        if dim is None:
            raise ValidationFault(
                f"vector field '{definition.output_field}' is not declared in '{self.collection_name}'; "
                "register the pipeline first"
            )
        if dim != definition.target_dimension:
            raise ValidationFault(
                f"vector field '{definition.output_field}' has dimension {dim}, "
                f"pipeline v{definition.version} produces {definition.target_dimension}"
            )

    def _cancel_event(self, job_id: str) -> threading.Event:
        with self._lock:
            event = self._cancel_events.get(job_id)
            if event is None:
                event = threading.Event()
                self._cancel_events[job_id] = event
            return event

    def _is_active(self, job_id: str) -> bool:
        with self._lock:
            if job_id in self._running:
                return True
            future = self._futures.get(job_id)
        return future is not None and not future.done()
