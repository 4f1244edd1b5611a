# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: pipelines.py
# -----------------------------------------------------------------------------
from typing import List

from pydantic import BaseModel, Field

class PipelineCreateRequest(BaseModel):
    source_fields: List[str]
    target_dimension: int
    output_field: str
    activate: bool = True

class PipelineActivateRequest(BaseModel):
    version: int = Field(..., ge=1)

class PipelineResponse(BaseModel):
    output_field: str
    source_fields: List[str]
    target_dimension: int
    version: int
    created_at: str
    active: bool = False

class PipelineVersionsResponse(BaseModel):
    output_field: str
    active_version: int
    versions: List[PipelineResponse]
