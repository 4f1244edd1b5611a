# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: Record
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Record:
    """
    One structured text record as held by the storage engine.

    attributes        client-supplied text attributes (mutable)
    vectors           output field -> derived fixed-length vector
    pipeline_versions output field -> Pipeline Definition version that produced it
    """

    id: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    vectors: Dict[str, List[float]] = field(default_factory=dict)
    pipeline_versions: Dict[str, int] = field(default_factory=dict)

    def vector(self, output_field: str) -> Optional[List[float]]:
        return self.vectors.get(output_field)

    def pipeline_version(self, output_field: str) -> Optional[int]:
        return self.pipeline_versions.get(output_field)

    def with_vector(self, output_field: str, vector: List[float], version: int) -> "Record":
        """Return a copy carrying the given vector for output_field."""
        return Record(
            id=self.id,
            attributes=dict(self.attributes),
            vectors={**self.vectors, output_field: list(vector)},
            pipeline_versions={**self.pipeline_versions, output_field: version},
        )

    def project(self, fields: Optional[List[str]]) -> Dict[str, Any]:
        """Selected attributes only; None means all of them."""
        if fields is None:
            return dict(self.attributes)
        return {f: self.attributes[f] for f in fields if f in self.attributes}
