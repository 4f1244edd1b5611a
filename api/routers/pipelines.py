# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: pipelines router
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_pipeline_service
from api.fault_mapping import to_http_exception
from api.schemas.pipelines import (
    PipelineActivateRequest,
    PipelineCreateRequest,
    PipelineResponse,
    PipelineVersionsResponse,
)
from pipeline.PipelineDefinition import PipelineDefinition
from services.PipelineService import PipelineService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pipelines", tags=["pipelines"])


def _to_response(definition: PipelineDefinition, active_version: int) -> PipelineResponse:
    return PipelineResponse(
        output_field=definition.output_field,
        source_fields=list(definition.source_fields),
        target_dimension=definition.target_dimension,
        version=definition.version,
        created_at=definition.created_at,
        active=definition.version == active_version,
    )


@router.post("", response_model=PipelineResponse, status_code=201)
def register_pipeline(
    req: PipelineCreateRequest,
    svc: PipelineService = Depends(get_pipeline_service),
) -> PipelineResponse:
    logger.info("POST /pipelines output_field=%s dim=%d", req.output_field, req.target_dimension)
    try:
        definition = svc.register(
            req.source_fields,
            req.target_dimension,
            req.output_field,
            activate=req.activate,
        )
        return _to_response(definition, svc.current(req.output_field).version)
    except Exception as e:
        logger.exception("Pipeline registration failed: %s", e)
        raise to_http_exception(e)


@router.get("/{output_field}", response_model=PipelineResponse)
def get_current_pipeline(
    output_field: str,
    svc: PipelineService = Depends(get_pipeline_service),
) -> PipelineResponse:
    try:
        definition = svc.current(output_field)
        return _to_response(definition, definition.version)
    except Exception as e:
        logger.exception("Pipeline lookup failed for '%s': %s", output_field, e)
        raise to_http_exception(e)


@router.get("/{output_field}/versions", response_model=PipelineVersionsResponse)
def list_pipeline_versions(
    output_field: str,
    svc: PipelineService = Depends(get_pipeline_service),
) -> PipelineVersionsResponse:
    try:
        active = svc.current(output_field).version
        return PipelineVersionsResponse(
            output_field=output_field,
            active_version=active,
            versions=[_to_response(d, active) for d in svc.versions(output_field)],
        )
    except Exception as e:
        logger.exception("Listing versions failed for '%s': %s", output_field, e)
        raise to_http_exception(e)


@router.post("/{output_field}/activate", response_model=PipelineResponse)
def activate_pipeline(
    output_field: str,
    req: PipelineActivateRequest,
    svc: PipelineService = Depends(get_pipeline_service),
) -> PipelineResponse:
    logger.info("POST /pipelines/%s/activate version=%d", output_field, req.version)
    try:
        definition = svc.activate(output_field, req.version)
        return _to_response(definition, definition.version)
    except Exception as e:
        logger.exception("Activation failed for '%s' v%d: %s", output_field, req.version, e)
        raise to_http_exception(e)
