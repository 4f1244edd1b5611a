# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Description: HttpInferenceClient
# -----------------------------------------------------------------------------
import logging
import math
from typing import Any, Dict, Optional

import requests

from errors.Faults import (
    InferenceRejectedError,
    InferenceResponseError,
    InferenceUnavailableError,
)
from inference.InferenceClient import WeightedTermMap
from utility.logging_utils import get_class_logger

RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class HttpInferenceClient:
    """
    Calls the sparse-encoding inference service over HTTP.

    Request:  POST <endpoint>  {"text": "<canonical text>"}
    Response: one of
      {"tok": 0.7, ...}
      {"weights": {"tok": 0.7, ...}}
      {"inference_results": [{"output": [{"dataAsMap": {"response": [{"tok": 0.7}]}}]}]}

    Retries are not done here; every failure is raised as a classified fault
    and the caller's RetryPolicy decides.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: str = "",
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if not endpoint:
            raise ValueError("endpoint must not be empty")
        self.endpoint = endpoint.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.logger = logger or get_class_logger(self.__class__)

        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

        self.logger.info(
            "HttpInferenceClient initialised endpoint='%s' timeout=%.1fs",
            self.endpoint,
            self.timeout_seconds,
        )

    def infer(self, text: str) -> WeightedTermMap:
        # Empty/short text is a valid input with an empty answer
        if not text or not text.strip():
            return {}

        try:
            r = self.session.post(
                self.endpoint,
                json={"text": text},
                headers=self.headers,
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            raise InferenceUnavailableError(f"inference timed out after {self.timeout_seconds}s: {e}") from e
        except requests.exceptions.RequestException as e:
            raise InferenceUnavailableError(f"inference request failed: {e}") from e

        if r.status_code in RETRYABLE_STATUS:
            raise InferenceUnavailableError(f"inference service returned HTTP {r.status_code}")
        if r.status_code >= 400:
            raise InferenceRejectedError(
                f"inference service rejected request: HTTP {r.status_code} {r.text[:200]!r}"
            )

        try:
            body = r.json()
        except ValueError as e:
            raise InferenceResponseError(f"inference response is not JSON: {e}") from e

        term_map = self.parse_term_map(body)
        self.logger.debug("Inference returned %d term(s) for %d chars", len(term_map), len(text))
        return term_map

    def test_connection(self) -> bool:
        try:
            self.infer("health check")
            return True
        except Exception as e:
            self.logger.error("Inference connection failed: %s", e)
            return False

    @staticmethod
    def parse_term_map(body: Any) -> WeightedTermMap:
        raw = HttpInferenceClient._extract(body)
        if not isinstance(raw, dict):
            raise InferenceResponseError(f"expected a token->weight object, got {type(raw).__name__}")

        out: Dict[str, float] = {}
        for token, weight in raw.items():
            if isinstance(weight, bool) or not isinstance(weight, (int, float)):
                raise InferenceResponseError(f"weight for {token!r} is not a number: {weight!r}")
            w = float(weight)
            if not math.isfinite(w) or w < 0.0:
                raise InferenceResponseError(f"weight for {token!r} must be finite and >= 0, got {w}")
            out[str(token)] = w
        return out

    @staticmethod
    def _extract(body: Any) -> Any:
        if not isinstance(body, dict):
            return body

        if "inference_results" in body:
            try:
                return body["inference_results"][0]["output"][0]["dataAsMap"]["response"][0]
            except (KeyError, IndexError, TypeError) as e:
                raise InferenceResponseError(f"unexpected inference_results shape: {e}") from e

        if "weights" in body and isinstance(body["weights"], dict):
            return body["weights"]

        return body
