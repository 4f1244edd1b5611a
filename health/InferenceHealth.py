# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-20
# Description: InferenceHealth
# -----------------------------------------------------------------------------
import logging
import time
from typing import Optional

from inference.InferenceClient import InferenceClient
from normalizer.VectorNormalizer import VectorNormalizer
from utility.logging_utils import get_logger


class InferenceHealth:
    """
    Smoke test for the sparse inference service.

    Verifies:
      - the inference call completes successfully
      - the response parses into a non-empty Weighted-Term Map
      - the map normalizes to the expected dimension (if provided)
    """

    def __init__(
        self,
        client: InferenceClient,
        expected_dim: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self.expected_dim = expected_dim
        self.normalizer = VectorNormalizer()
        self.logger = logger or get_logger(__name__)

    def run(self, test_text: str = "inference service healthcheck") -> bool:
        self.logger.info("Running inference healthcheck")
        try:
            start = time.time()
            term_map = self.client.infer(test_text)
            elapsed_ms = (time.time() - start) * 1000.0

            if not term_map:
                self.logger.error("Inference returned an empty term map for non-empty text.")
                return False

            self.logger.info("Inference call succeeded in %.1f ms. Returned %d term(s)", elapsed_ms, len(term_map))

            if self.expected_dim is not None:
                vector = self.normalizer.normalize(term_map, self.expected_dim)
                if len(vector) != self.expected_dim:
                    self.logger.warning("Dimension mismatch: expected %d, got %d.", self.expected_dim, len(vector))
                    return False

            self.logger.info("Inference healthcheck PASSED.")
            return True

        except Exception as e:
            self.logger.exception("Inference healthcheck FAILED: %s", e)
            return False
