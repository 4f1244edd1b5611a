# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: VectorNormalizer
# -----------------------------------------------------------------------------
import math
from typing import List, Mapping, Tuple

import numpy as np

from errors.Faults import ValidationFault


class VectorNormalizer:
    """
    Turns a variable-size Weighted-Term Map into exactly D floats.

      1. rank entries by weight descending, ties by token (lexical)
      2. keep the top D weights in that order
      3. pad with 0.0 when there are fewer than D entries

    Map iteration order never matters. Index-time and query-time vectors
    must come from the same instance/rule so their scores are comparable.
    """

    def __init__(self, dtype=np.float64) -> None:
        self.dtype = dtype

    def ranked_terms(self, term_map: Mapping[str, float], target_dimension: int) -> List[Tuple[str, float]]:
        """The (token, weight) pairs that survive truncation, in vector order."""
        self._check_dimension(target_dimension)
        entries = []
        for token, weight in term_map.items():
            w = float(weight)
            if not math.isfinite(w) or w < 0.0:
                raise ValidationFault(f"weight for token {token!r} must be finite and >= 0, got {weight!r}")
            entries.append((str(token), w))

        entries.sort(key=lambda tw: (-tw[1], tw[0]))
        return entries[:target_dimension]

    def normalize(self, term_map: Mapping[str, float], target_dimension: int) -> List[float]:
        kept = self.ranked_terms(term_map, target_dimension)

        arr = np.zeros(target_dimension, dtype=self.dtype)
        if kept:
            arr[: len(kept)] = [w for _, w in kept]
        return arr.tolist()

    def zeros(self, target_dimension: int) -> List[float]:
        self._check_dimension(target_dimension)
        return np.zeros(target_dimension, dtype=self.dtype).tolist()

    @staticmethod
    def _check_dimension(target_dimension: int) -> None:
        if isinstance(target_dimension, bool) or not isinstance(target_dimension, int) or target_dimension <= 0:
            raise ValidationFault(f"target_dimension must be a positive int, got {target_dimension!r}")
