# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Description: json_state.py
# -----------------------------------------------------------------------------
import json
import os
from pathlib import Path
from typing import Any, Optional


def load_json_state(path: Optional[Path]) -> Optional[Any]:
    """Read a JSON snapshot; None when no path is configured or the file does not exist yet."""
    if path is None or not path.is_file():
        return None
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def save_json_state(path: Optional[Path], data: Any) -> None:
    """Write a JSON snapshot via temp file + rename so readers never see a torn file."""
    if path is None:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, sort_keys=True)
    os.replace(tmp, path)
