# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Description: slicing.py
# -----------------------------------------------------------------------------
"""
Stable slice assignment for bulk reprocessing.

Every record id hashes (crc32) into one of BUCKET_COUNT buckets at write time.
Slice i of S owns the buckets b with b % S == i, so slices are disjoint and
together cover every record exactly once. Adapters that can only filter on
stored values (Chroma) keep the bucket as a record field.
"""
import zlib
from typing import List

BUCKET_COUNT = 1024
BUCKET_FIELD = "_bucket"


def bucket_of(record_id: str) -> int:
    return zlib.crc32(str(record_id).encode("utf-8")) % BUCKET_COUNT


def check_slice(slice_id: int, slice_count: int) -> None:
    if not 1 <= slice_count <= BUCKET_COUNT:
        raise ValueError(f"slice_count must be in 1..{BUCKET_COUNT}, got {slice_count}")
    if not 0 <= slice_id < slice_count:
        raise ValueError(f"slice_id must be in 0..{slice_count - 1}, got {slice_id}")


def slice_of(record_id: str, slice_count: int) -> int:
    return bucket_of(record_id) % slice_count


def buckets_for_slice(slice_id: int, slice_count: int) -> List[int]:
    check_slice(slice_id, slice_count)
    return [b for b in range(BUCKET_COUNT) if b % slice_count == slice_id]
