# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: records router
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_ingest_service
from api.fault_mapping import to_http_exception
from api.schemas.records import IngestRequest, IngestResponse
from ingestion.IngestService import IngestService
from record.Record import Record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records", tags=["records"])


@router.post("", response_model=IngestResponse)
def ingest_records(
    req: IngestRequest,
    svc: IngestService = Depends(get_ingest_service),
) -> IngestResponse:
    logger.info("POST /records count=%d output_fields=%s", len(req.records), req.output_fields)
    try:
        result = svc.index_records(
            [Record(id=r.id, attributes=dict(r.attributes)) for r in req.records],
            output_fields=req.output_fields,
        )
    except Exception as e:
        logger.exception("Ingest failed: %s", e)
        raise to_http_exception(e)

    return IngestResponse(
        requested=result.requested,
        stored=result.stored,
        vectors_written=result.vectors_written,
        failed=result.failed,
        skipped=result.skipped,
    )
