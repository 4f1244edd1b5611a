# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: PipelineDefinition
# -----------------------------------------------------------------------------
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from errors.Faults import ValidationFault

# Output fields end up inside store collection names and share their charset
OUTPUT_FIELD_PATTERN = re.compile(r"[A-Za-z0-9_](?:[A-Za-z0-9._-]*[A-Za-z0-9])?")


@dataclass(frozen=True)
class PipelineDefinition:
    """Versioned recipe for one output vector field."""

    output_field: str
    source_fields: Tuple[str, ...]
    target_dimension: int
    version: int = 0
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @staticmethod
    def validate(source_fields, target_dimension, output_field) -> Tuple[str, ...]:
        """Check a candidate definition and return the normalised composition list."""
        if isinstance(target_dimension, bool) or not isinstance(target_dimension, int):
            raise ValidationFault(f"target_dimension must be an int, got {target_dimension!r}")
        if target_dimension <= 0:
            raise ValidationFault(f"target_dimension must be > 0, got {target_dimension}")

        if not isinstance(output_field, str) or not output_field.strip():
            raise ValidationFault("output_field must be a non-empty string")
        if not OUTPUT_FIELD_PATTERN.fullmatch(output_field) or ".." in output_field:
            raise ValidationFault(
                f"output_field '{output_field}' may only contain letters, digits, '_', '-' or '.' "
                "and must end with a letter or digit"
            )

        if isinstance(source_fields, str):
            raise ValidationFault("source_fields must be a list of attribute names, not a string")
        fields = tuple(source_fields or ())
        if not fields:
            raise ValidationFault("source_fields must not be empty")
        for name in fields:
            if not isinstance(name, str) or not name.strip():
                raise ValidationFault(f"source_fields contains an invalid name: {name!r}")
        if len(set(fields)) != len(fields):
            raise ValidationFault(f"source_fields contains duplicates: {list(fields)}")
        if output_field in fields:
            raise ValidationFault(f"output_field '{output_field}' cannot also be a source field")
        return fields

    def to_dict(self) -> Dict[str, Any]:
        return {
            "output_field": self.output_field,
            "source_fields": list(self.source_fields),
            "target_dimension": self.target_dimension,
            "version": self.version,
            "created_at": self.created_at,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PipelineDefinition":
        return PipelineDefinition(
            output_field=data["output_field"],
            source_fields=tuple(data["source_fields"]),
            target_dimension=int(data["target_dimension"]),
            version=int(data["version"]),
            created_at=data.get("created_at") or datetime.now(timezone.utc).isoformat(),
        )
