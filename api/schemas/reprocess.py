# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: reprocess.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

class ReprocessRequest(BaseModel):
    output_field: str = Field(..., min_length=1)
    pipeline_version: Optional[int] = Field(None, ge=1)
    filters: Optional[Dict[str, Any]] = None
    batch_size: Optional[int] = None
    slice_count: Optional[int] = None
    only_stale: bool = False
    # HTTP callers poll by default
    wait: bool = False

class ResumeRequest(BaseModel):
    wait: bool = False

class SliceProgressOut(BaseModel):
    slice_id: int
    seen: int
    updated: int
    failed: int
    skipped: int
    batches: int
    cursor: Optional[str] = None
    done: bool
    error: Optional[str] = None
    failed_ids: List[str] = Field(default_factory=list)

class JobTotals(BaseModel):
    seen: int
    updated: int
    failed: int
    skipped: int

class JobResponse(BaseModel):
    job_id: str
    collection: str
    output_field: str
    pipeline_version: int
    batch_size: int
    slice_count: int
    filters: Dict[str, Any] = Field(default_factory=dict)
    only_stale: bool
    status: str
    slices: List[SliceProgressOut]
    totals: JobTotals
    error: Optional[str] = None
    cancel_requested: bool = False
    created_at: str
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    updated_at: str

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
