# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: PipelineRegistry
# -----------------------------------------------------------------------------
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from errors.Faults import ValidationFault
from pipeline.PipelineDefinition import PipelineDefinition
from utility.json_state import load_json_state, save_json_state
from utility.logging_utils import get_class_logger


class PipelineRegistry:
    """
    Versioned Pipeline Definitions keyed by output field.

    Every registered version is kept; one of them is active per output field.
    The target dimension of an output field never changes once registered:
    a new dimension needs a new output field.
    """

    def __init__(self, *, path: Optional[Path] = None, logger: logging.Logger | None = None) -> None:
        self.path = path
        self.logger = logger or get_class_logger(self.__class__)
        self._lock = threading.RLock()
        self._versions: Dict[str, Dict[int, PipelineDefinition]] = {}
        self._active: Dict[str, int] = {}
        self._load()

    def register(
        self,
        source_fields: Sequence[str],
        target_dimension: int,
        output_field: str,
        *,
        activate: bool = True,
    ) -> PipelineDefinition:
        fields = PipelineDefinition.validate(source_fields, target_dimension, output_field)

        with self._lock:
            existing = self._versions.get(output_field, {})
            if existing:
                dims = {d.target_dimension for d in existing.values()}
                if target_dimension not in dims:
                    raise ValidationFault(
                        f"output_field '{output_field}' is fixed at dimension {sorted(dims)[0]}; "
                        f"register dimension {target_dimension} under a new output field"
                    )

            version = max(existing.keys(), default=0) + 1
            definition = PipelineDefinition(
                output_field=output_field,
                source_fields=fields,
                target_dimension=target_dimension,
                version=version,
            )
            self._versions.setdefault(output_field, {})[version] = definition
            if activate or output_field not in self._active:
                self._active[output_field] = version
            is_active = self._active[output_field] == version
            self._save()

        self.logger.info(
            "Registered pipeline '%s' v%d (fields=%s, dim=%d, active=%s)",
            output_field,
            version,
            list(fields),
            target_dimension,
            is_active,
        )
        return definition

    def current(self, output_field: str) -> PipelineDefinition:
        with self._lock:
            if output_field not in self._active:
                raise KeyError(f"No pipeline registered for output field '{output_field}'")
            return self._versions[output_field][self._active[output_field]]

    def get(self, output_field: str, version: int) -> PipelineDefinition:
        with self._lock:
            try:
                return self._versions[output_field][version]
            except KeyError:
                raise KeyError(
                    f"Pipeline '{output_field}' has no version {version}"
                ) from None

    def resolve(self, output_field: str, version: Optional[int] = None) -> PipelineDefinition:
        """Specific version when given, otherwise the active one."""
        if version is None:
            return self.current(output_field)
        return self.get(output_field, version)

    def activate(self, output_field: str, version: int) -> PipelineDefinition:
        with self._lock:
            definition = self.get(output_field, version)
            previous = self._active.get(output_field)
            self._active[output_field] = version
            self._save()

        self.logger.info("Activated pipeline '%s' v%d (was v%s)", output_field, version, previous)
        return definition

    def versions(self, output_field: str) -> List[PipelineDefinition]:
        with self._lock:
            if output_field not in self._versions:
                raise KeyError(f"No pipeline registered for output field '{output_field}'")
            return [self._versions[output_field][v] for v in sorted(self._versions[output_field])]

    def active_version(self, output_field: str) -> int:
        return self.current(output_field).version

    def output_fields(self) -> List[str]:
        with self._lock:
            return sorted(self._active)

    def active_definitions(self) -> List[PipelineDefinition]:
        with self._lock:
            return [self._versions[f][v] for f, v in sorted(self._active.items())]

    # -------------------------------------------------------------------------
    def _save(self) -> None:
        save_json_state(
            self.path,
            {
                "active": dict(self._active),
                "definitions": [
                    d.to_dict() for per_field in self._versions.values() for d in per_field.values()
                ],
            },
        )

    def _load(self) -> None:
        data = load_json_state(self.path)
        if not data:
            return
        for raw in data.get("definitions", []):
            definition = PipelineDefinition.from_dict(raw)
            self._versions.setdefault(definition.output_field, {})[definition.version] = definition
        for output_field, version in (data.get("active") or {}).items():
            if version in self._versions.get(output_field, {}):
                self._active[output_field] = int(version)
        self.logger.info(
            "Loaded %d pipeline output field(s) from %s", len(self._active), self.path
        )
