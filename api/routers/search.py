# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: search router
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_search_gateway
from api.fault_mapping import to_http_exception
from api.schemas.search import SearchHitOut, SearchRequest, SearchResponse
from search.SearchGateway import SearchGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse)
def post_search(
    req: SearchRequest,
    svc: SearchGateway = Depends(get_search_gateway),
) -> SearchResponse:
    try:
        hits = svc.search(
            req.output_field,
            text=req.text,
            vector=req.vector,
            k=req.k,
            num_candidates=req.num_candidates,
            fields=req.fields,
            filters=req.filters,
            pipeline_version=req.pipeline_version,
        )
    except Exception as e:
        logger.exception("Search failed: %s", e)
        raise to_http_exception(e)

    return SearchResponse(
        output_field=req.output_field,
        k=req.k,
        results=[
            SearchHitOut(record_id=h.record_id, score=h.score, attributes=dict(h.attributes))
            for h in hits
        ],
    )
