"""
Retry policy for URL extraction as an explicit state machine.

`next_state` is a pure function from (state, outcome) to the next state
and the delay before it, so the policy can be tested without sleeping.
`run_with_retry` drives it with an injectable sleep.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from .models import ErrorType, IngestionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attempting:
    attempt: int


@dataclass(frozen=True)
class Succeeded:
    result: IngestionResult


@dataclass(frozen=True)
class FailedTerminal:
    result: IngestionResult


@dataclass(frozen=True)
class FailedRetryable:
    """A retryable failure with attempts left; the next state is Attempting(attempt + 1)."""

    attempt: int
    result: IngestionResult | None = None
    exception: BaseException | None = None


RetryState = Attempting | Succeeded | FailedTerminal | FailedRetryable


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 2
    retry_delay: float = 1.0

    def delay_for(self, attempt: int) -> float:
        """Linear backoff: the wait after attempt n is retry_delay * n."""
        return self.retry_delay * attempt


def exhausted_result(attempts: int, last: FailedRetryable) -> IngestionResult:
    if last.result is not None and last.result.error is not None:
        last_error = last.result.error.message
    elif last.exception is not None:
        last_error = str(last.exception)
    else:
        last_error = "Unknown error"

    return IngestionResult.fail(
        ErrorType.NETWORK,
        f"Failed to extract recipe after {attempts} attempts",
        {"lastError": last_error, "attempts": attempts},
        adapter=last.result.adapter if last.result else None,
    )


def next_state(
    state: Attempting,
    policy: RetryPolicy,
    result: IngestionResult | None = None,
    exception: BaseException | None = None,
) -> tuple[RetryState, float]:
    """
    Transition out of an attempt given its outcome.

    Returns the new state and how long to wait before acting on it.
    Success and non-network failures end immediately. Network failures
    and raised exceptions become FailedRetryable while attempts remain,
    otherwise FailedTerminal with a summary network error.
    """
    if exception is None and result is not None:
        if result.success:
            return Succeeded(result), 0.0
        if result.error is None or not result.error.retryable:
            return FailedTerminal(result), 0.0

    failure = FailedRetryable(state.attempt, result=result, exception=exception)
    if state.attempt >= policy.max_retries:
        return FailedTerminal(exhausted_result(state.attempt, failure)), 0.0

    return failure, policy.delay_for(state.attempt)


def run_with_retry(
    operation: Callable[[], IngestionResult],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> IngestionResult:
    """Run `operation` until it succeeds, fails terminally or runs out of attempts."""
    state: RetryState = Attempting(1)

    while True:
        if isinstance(state, Attempting):
            try:
                result = operation()
            except Exception as e:
                logger.warning(f"Extraction attempt {state.attempt} raised: {e}")
                state, delay = next_state(state, policy, exception=e)
            else:
                state, delay = next_state(state, policy, result=result)
            if delay:
                sleep(delay)
        elif isinstance(state, FailedRetryable):
            logger.info(f"Retrying extraction (attempt {state.attempt + 1}/{policy.max_retries})")
            state = Attempting(state.attempt + 1)
        elif isinstance(state, Succeeded):
            return state.result
        else:
            return state.result
