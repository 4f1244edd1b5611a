# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: fault_mapping.py
# -----------------------------------------------------------------------------
from fastapi import HTTPException

from errors.Faults import Fault, JobStateError, SystemicFault, TransientFault, ValidationFault


def to_http_exception(e: Exception) -> HTTPException:
    """Translate a core exception into the HTTPException a router raises."""
    if isinstance(e, HTTPException):
        return e
    if isinstance(e, ValidationFault):
        return HTTPException(status_code=400, detail=e.describe())
    if isinstance(e, KeyError):
        # str(KeyError) wraps the message in quotes
        message = e.args[0] if e.args else "not found"
        return HTTPException(status_code=404, detail=f"not_found: {message}")
    if isinstance(e, JobStateError):
        return HTTPException(status_code=409, detail=e.describe())
    if isinstance(e, (TransientFault, SystemicFault)):
        return HTTPException(status_code=503, detail=e.describe())
    if isinstance(e, Fault):
        return HTTPException(status_code=500, detail=e.describe())
    return HTTPException(status_code=500, detail=f"internal: {e}")
