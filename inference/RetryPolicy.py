# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: RetryPolicy
# -----------------------------------------------------------------------------
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple, Type, TypeVar

from errors.Faults import TransientFault
from utility.logging_utils import get_logger

T = TypeVar("T")

_logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for transient faults."""

    max_attempts: int = 5
    initial_delay: float = 0.8
    backoff_factor: float = 1.7
    max_delay: float = 30.0
    retry_on: Tuple[Type[BaseException], ...] = (TransientFault,)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")

    @staticmethod
    def from_settings(defaults: Dict[str, Any], **overrides) -> "RetryPolicy":
        kwargs = {
            "max_attempts": defaults["max_attempts"],
            "initial_delay": defaults["initial_delay"],
            "backoff_factor": defaults["backoff_factor"],
            "max_delay": defaults["max_delay"],
        }
        kwargs.update(overrides)
        return RetryPolicy(**kwargs)

    def delays(self):
        """Delays slept between attempts (max_attempts - 1 of them)."""
        delay = self.initial_delay
        for _ in range(self.max_attempts - 1):
            yield min(delay, self.max_delay)
            delay *= self.backoff_factor

    def call(
        self,
        fn: Callable[[], T],
        *,
        description: str = "call",
        logger: logging.Logger | None = None,
    ) -> T:
        log = logger or _logger
        delays = self.delays()
        for attempt in range(1, self.max_attempts + 1):
            try:
                return fn()
            except self.retry_on as e:
                if attempt == self.max_attempts:
                    log.warning("%s failed after %d attempt(s): %s", description, attempt, e)
                    raise
                delay = next(delays)
                log.warning(
                    "%s failed (attempt %d/%d), retrying in %.2fs: %s",
                    description,
                    attempt,
                    self.max_attempts,
                    delay,
                    e,
                )
                self.sleep(delay)

        # Unreachable and include for type checkers
        raise RuntimeError(f"{description}: retry loop exited without result")
