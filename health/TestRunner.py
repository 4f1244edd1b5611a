# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-20
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Dict, Optional

from health.InferenceHealth import InferenceHealth
from health.StoreHealth import StoreHealth
from utility.logging_utils import get_class_logger


class TestRunner:
    """
    Orchestrates all smoke tests and reports a consolidated result.

    Tests included:
      - StoreHealth     (storage engine reachable, collection countable)
      - InferenceHealth (inference service answers with a term map)
    """

    # Not a pytest test class
    __test__ = False

    def __init__(
        self,
        store_health: StoreHealth,
        inference_health: InferenceHealth,
        logger: Optional[logging.Logger] = None,
    ):
        self.store_health = store_health
        self.inference_health = inference_health
        self.logger = logger or get_class_logger(self.__class__)

    # -------------------------------------------------------------------------
    def run_all(self, run_inference: bool = True) -> Dict[str, bool]:
        """
        Run all configured smoke tests.

        :param run_inference: If False, skips the (billable) inference call.
        :return: Dict mapping test names to True/False.
        """
        self.logger.info("Starting smoke test suite (run_inference=%s)", run_inference)

        results: Dict[str, bool] = {}

        try:
            ok_store = self.store_health.check()
            results["store_health"] = ok_store
            self._log_result("StoreHealth", ok_store)
        except Exception as e:
            self.logger.exception("StoreHealth.check() raised an exception: %s", e)
            results["store_health"] = False

        if run_inference:
            try:
                ok_inference = self.inference_health.run()
                results["inference_health"] = ok_inference
                self._log_result("InferenceHealth", ok_inference)
            except Exception as e:
                self.logger.exception("InferenceHealth.run() raised an exception: %s", e)
                results["inference_health"] = False

        self._log_summary(results)
        return results

    # -------------------------------------------------------------------------
    def _log_result(self, name: str, ok: bool) -> None:
        if ok:
            self.logger.info("%s: PASS", name)
        else:
            self.logger.error("%s: FAIL", name)

    def _log_summary(self, results: Dict[str, bool]) -> None:
        total = len(results)
        passed = sum(1 for v in results.values() if v)
        failed = total - passed

        self.logger.info("Smoke test summary: %d total, %d passed, %d failed", total, passed, failed)

        for name, ok in results.items():
            status = "PASS" if ok else "FAIL"
            self.logger.info("  %s: %s", name, status)
