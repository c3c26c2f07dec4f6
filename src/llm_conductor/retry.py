"""Bounded retry with exponential backoff.

The outbound call is wrapped so that it returns a ``Result`` instead of
raising. ``RetryPolicy.run`` only looks at that result:

    Attempting -> Success
    Attempting -> Waiting -> Attempting      (retryable error, budget left)
    Attempting -> Exhausted                  (fatal error, or budget spent)
"""

import logging
import random
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from .errors import LLMConductorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Result:
    """Outcome of one wrapped call: a value or a classified error."""

    value: Any = None
    error: Optional[LLMConductorError] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RetryState:
    """Call-scoped retry bookkeeping."""

    attempt: int = 1
    next_delay: float = 0.0


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with a capped delay and attempt count.

    Attributes:
        max_retries: Retries after the first attempt (attempts = max_retries + 1)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single wait, in seconds
        backoff_factor: Multiplier applied per retry
        jitter: Apply +/-10% random jitter to each delay
        sleep: Blocking sleep function (replaced in tests)
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0
    jitter: bool = True
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    @classmethod
    def from_configuration(cls, configuration, **overrides) -> "RetryPolicy":
        """Build a policy from the retry settings of a Configuration."""
        settings = {
            "max_retries": configuration.max_retries,
            "base_delay": configuration.retry_delay,
            "max_delay": configuration.max_retry_delay,
        }
        settings.update(overrides)
        return cls(**settings)

    @property
    def max_attempts(self) -> int:
        return max(self.max_retries, 0) + 1

    def compute_delay(self, attempt: int) -> float:
        """Delay to wait after the given (1-based) failed attempt."""
        delay = self.base_delay * (self.backoff_factor ** (attempt - 1))
        delay = min(delay, self.max_delay)
        if self.jitter:
            delay += delay * random.uniform(-0.1, 0.1)  # noqa: S311
        return min(max(delay, 0.0), self.max_delay)

    def run(self, attempt_fn: Callable[[], Result], label: str = "") -> Result:
        """Call ``attempt_fn`` until it succeeds, fails fatally, or the budget is spent.

        Args:
            attempt_fn: Performs one outbound call and returns its Result
            label: Vendor/model label used in log messages

        Returns:
            The final Result, with ``attempts`` set
        """
        state = RetryState()

        while True:
            result = attempt_fn()

            if result.ok:
                return replace(result, attempts=state.attempt)

            error = result.error
            if not error.retryable:
                logger.debug(f"{label} failed with fatal {error.kind.value} error: {error}")
                return replace(result, attempts=state.attempt)

            if state.attempt >= self.max_attempts:
                logger.error(
                    f"{label} gave up after {state.attempt} attempts "
                    f"({error.kind.value}): {error}"
                )
                return replace(result, attempts=state.attempt)

            state.next_delay = self.compute_delay(state.attempt)
            logger.warning(
                f"{label} {error.kind.value} (attempt {state.attempt}/{self.max_attempts}), "
                f"retrying in {state.next_delay:.1f}s"
            )
            self.sleep(state.next_delay)
            state.attempt += 1
