# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Any, Dict


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise RuntimeError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Record collection + vector field schema
# -----------------------------------------------------------------------------
COLLECTION_DEFAULT = _env("RVI_COLLECTION", "records")

# Similarity metric and index options are passed through to the store untouched
VECTOR_METRIC = _env("RVI_VECTOR_METRIC", "cosine").lower()
VECTOR_INDEX_OPTIONS: Dict[str, Any] = {
    "hnsw:M": _env_int("RVI_HNSW_M", 16),
    "hnsw:construction_ef": _env_int("RVI_HNSW_CONSTRUCTION_EF", 100),
    "hnsw:search_ef": _env_int("RVI_HNSW_SEARCH_EF", 100),
}


# -----------------------------------------------------------------------------
# Inference client
# -----------------------------------------------------------------------------
INFERENCE_DEFAULTS: Dict[str, Any] = {
    "timeout_seconds": _env_float("RVI_INFERENCE_TIMEOUT", 10.0),
    "max_attempts": _env_int("RVI_INFERENCE_MAX_ATTEMPTS", 5),
    "initial_delay": _env_float("RVI_INFERENCE_BACKOFF_INITIAL", 0.8),
    "backoff_factor": _env_float("RVI_INFERENCE_BACKOFF_FACTOR", 1.7),
    "max_delay": _env_float("RVI_INFERENCE_BACKOFF_MAX", 30.0),
}

# zero_vector | skip | fail
EMPTY_TEXT_POLICY = _env("RVI_EMPTY_TEXT_POLICY", "zero_vector").lower()


# -----------------------------------------------------------------------------
# Storage engine retries
# -----------------------------------------------------------------------------
STORE_RETRY_DEFAULTS: Dict[str, Any] = {
    "max_attempts": _env_int("RVI_STORE_MAX_ATTEMPTS", 4),
    "initial_delay": _env_float("RVI_STORE_BACKOFF_INITIAL", 0.5),
    "backoff_factor": _env_float("RVI_STORE_BACKOFF_FACTOR", 2.0),
    "max_delay": _env_float("RVI_STORE_BACKOFF_MAX", 20.0),
}


# -----------------------------------------------------------------------------
# Bulk reprocessing
# -----------------------------------------------------------------------------
REPROCESS_DEFAULTS: Dict[str, Any] = {
    "batch_size": _env_int("RVI_REPROCESS_BATCH_SIZE", 1000),
    "slice_count": _env_int("RVI_REPROCESS_SLICES", os.cpu_count() or 1),
    # 0 -> one in-flight inference call per slice
    "max_inflight_inference": _env_int("RVI_REPROCESS_MAX_INFLIGHT", 0),
    # 0 disables escalation on consecutive record failures
    "max_consecutive_failures": _env_int("RVI_REPROCESS_MAX_CONSECUTIVE_FAILURES", 100),
    "async_runners": _env_int("RVI_REPROCESS_ASYNC_RUNNERS", 2),
}


# -----------------------------------------------------------------------------
# Search defaults
# -----------------------------------------------------------------------------
SEARCH_DEFAULTS: Dict[str, Any] = {
    "k": _env_int("RVI_SEARCH_K", 10),
    "num_candidates": _env_int("RVI_SEARCH_NUM_CANDIDATES", 100),
}


# -----------------------------------------------------------------------------
# Control-plane state snapshots (blank -> in-memory only)
# -----------------------------------------------------------------------------
PIPELINE_STATE_FILE = _env("RVI_PIPELINE_STATE_FILE", "")
JOB_STATE_FILE = _env("RVI_JOB_STATE_FILE", "")


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if not COLLECTION_DEFAULT:
    raise RuntimeError("COLLECTION_DEFAULT resolved to empty value")

if EMPTY_TEXT_POLICY not in ("zero_vector", "skip", "fail"):
    raise RuntimeError(f"RVI_EMPTY_TEXT_POLICY must be zero_vector|skip|fail, got {EMPTY_TEXT_POLICY!r}")

if REPROCESS_DEFAULTS["batch_size"] < 1:
    raise RuntimeError("RVI_REPROCESS_BATCH_SIZE must be >= 1")

if SEARCH_DEFAULTS["num_candidates"] < SEARCH_DEFAULTS["k"]:
    raise RuntimeError("RVI_SEARCH_NUM_CANDIDATES must be >= RVI_SEARCH_K")
