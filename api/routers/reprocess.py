# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: reprocess router
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends, Response

from api.dependencies import get_reprocessor
from api.fault_mapping import to_http_exception
from api.schemas.reprocess import JobListResponse, JobResponse, ReprocessRequest, ResumeRequest
from reprocess.BulkReprocessor import BulkReprocessor
from reprocess.ReprocessingJob import ReprocessingJob

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reprocess", tags=["reprocess"])


def _to_response(job: ReprocessingJob) -> JobResponse:
    return JobResponse(**job.to_dict())


@router.post("", response_model=JobResponse, status_code=202)
def submit_job(
    req: ReprocessRequest,
    svc: BulkReprocessor = Depends(get_reprocessor),
) -> JobResponse:
    logger.info(
        "POST /reprocess output_field=%s version=%s wait=%s",
        req.output_field,
        req.pipeline_version,
        req.wait,
    )
    try:
        job = svc.submit(
            req.output_field,
            pipeline_version=req.pipeline_version,
            filters=req.filters,
            batch_size=req.batch_size,
            slice_count=req.slice_count,
            only_stale=req.only_stale,
            wait=req.wait,
        )
        return _to_response(job)
    except Exception as e:
        logger.exception("Reprocessing submit failed: %s", e)
        raise to_http_exception(e)


@router.get("", response_model=JobListResponse)
def list_jobs(svc: BulkReprocessor = Depends(get_reprocessor)) -> JobListResponse:
    return JobListResponse(jobs=[_to_response(j) for j in svc.list_jobs()])


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: str, svc: BulkReprocessor = Depends(get_reprocessor)) -> JobResponse:
    try:
        return _to_response(svc.get(job_id))
    except Exception as e:
        logger.exception("Job lookup failed for %s: %s", job_id, e)
        raise to_http_exception(e)


@router.post("/{job_id}/cancel", response_model=JobResponse)
def cancel_job(job_id: str, svc: BulkReprocessor = Depends(get_reprocessor)) -> JobResponse:
    logger.info("POST /reprocess/%s/cancel", job_id)
    try:
        return _to_response(svc.cancel(job_id))
    except Exception as e:
        logger.exception("Cancel failed for %s: %s", job_id, e)
        raise to_http_exception(e)


@router.post("/{job_id}/resume", response_model=JobResponse, status_code=202)
def resume_job(
    job_id: str,
    req: ResumeRequest | None = None,
    svc: BulkReprocessor = Depends(get_reprocessor),
) -> JobResponse:
    wait = req.wait if req is not None else False
    logger.info("POST /reprocess/%s/resume wait=%s", job_id, wait)
    try:
        return _to_response(svc.resume(job_id, wait=wait))
    except Exception as e:
        logger.exception("Resume failed for %s: %s", job_id, e)
        raise to_http_exception(e)


@router.delete("/{job_id}", status_code=204)
def clear_job(job_id: str, svc: BulkReprocessor = Depends(get_reprocessor)) -> Response:
    logger.info("DELETE /reprocess/%s", job_id)
    try:
        svc.clear(job_id)
    except Exception as e:
        logger.exception("Clear failed for %s: %s", job_id, e)
        raise to_http_exception(e)
    return Response(status_code=204)
