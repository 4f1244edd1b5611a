# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: records.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

class RecordIn(BaseModel):
    id: str = Field(..., min_length=1)
    attributes: Dict[str, Any] = Field(default_factory=dict)

class IngestRequest(BaseModel):
    records: List[RecordIn] = Field(..., min_length=1)
    output_fields: Optional[List[str]] = None

class IngestResponse(BaseModel):
    requested: int
    stored: int
    vectors_written: int
    failed: Dict[str, List[str]] = Field(default_factory=dict)
    skipped: Dict[str, List[str]] = Field(default_factory=dict)
