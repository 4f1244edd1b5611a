# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: search.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

class SearchRequest(BaseModel):
    output_field: str = Field(..., min_length=1)
    text: Optional[str] = None
    vector: Optional[List[float]] = None
    k: int = 10
    num_candidates: int = 100
    fields: Optional[List[str]] = None
    filters: Optional[Dict[str, Any]] = None
    pipeline_version: Optional[int] = Field(None, ge=1)

class SearchHitOut(BaseModel):
    record_id: str
    score: float
    attributes: Dict[str, Any] = Field(default_factory=dict)

class SearchResponse(BaseModel):
    output_field: str
    k: int
    results: List[SearchHitOut]
