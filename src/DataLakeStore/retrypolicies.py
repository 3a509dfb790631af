# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.retrypolicies",
#   "purpose": "Retry decisions consulted after each failed attempt",
#   "sections": [
#     {
#       "id": "retrypolicy",
#       "name": "RetryPolicy",
#       "anchor": "class-retrypolicy",
#       "kind": "class"
#     },
#     {
#       "id": "noretrypolicy",
#       "name": "NoRetryPolicy",
#       "anchor": "class-noretrypolicy",
#       "kind": "class"
#     },
#     {
#       "id": "exponentialbackoffpolicy",
#       "name": "ExponentialBackoffPolicy",
#       "anchor": "class-exponentialbackoffpolicy",
#       "kind": "class"
#     },
#     {
#       "id": "nonidempotentretrypolicy",
#       "name": "NonIdempotentRetryPolicy",
#       "anchor": "class-nonidempotentretrypolicy",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Retry policies for the transport's retry loop.

A policy is any object with ``should_retry(status_code, error) -> bool``. The
transport calls it once per failed attempt with the attempt's HTTP status
(``0`` when no response was received) and the local exception, if any.
Policies may keep state, such as a retry counter, so a fresh instance should
be used per logical call.

Backoff delays come from a Tenacity wait strategy
(:class:`tenacity.wait_exponential` by default); the policy asks it for the
delay of the upcoming retry and sleeps that long itself.

Example:
    >>> policy = ExponentialBackoffPolicy(max_retries=2, sleep=lambda _: None)
    >>> policy.should_retry(503, None), policy.should_retry(503, None), policy.should_retry(503, None)
    (True, True, False)
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol, runtime_checkable

import tenacity
from tenacity import RetryCallState

LOGGER = logging.getLogger(__name__)

SleepFn = Callable[[float], None]


@runtime_checkable
class RetryPolicy(Protocol):
    """Decide whether a failed attempt should be followed by another one."""

    def should_retry(self, status_code: int, error: Optional[BaseException]) -> bool:
        ...


def _backoff_wait(interval_seconds: float, factor: float) -> tenacity.wait.wait_base:
    """``interval * factor ** n`` before the (n+1)-th retry."""
    return tenacity.wait_exponential(multiplier=interval_seconds, exp_base=factor, min=0)


def _delay_before_retry(wait: tenacity.wait.wait_base, retry_number: int) -> float:
    # wait strategies read the number of the attempt that just failed
    retry_state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})
    retry_state.attempt_number = retry_number
    return float(wait(retry_state))


class NoRetryPolicy:
    """Never retries; substituted when a caller supplies no policy."""

    def should_retry(self, status_code: int, error: Optional[BaseException]) -> bool:
        return False


def _is_transient_status(status_code: int) -> bool:
    if status_code in (501, 505):
        return False
    return status_code >= 500 or status_code in (401, 408, 429)


class ExponentialBackoffPolicy:
    """Retry transient failures with a growing wait between attempts.

    Local (network) errors, 5xx other than 501/505, 408, 429 and 401 are
    retried. 401 is included because a token may have been refreshed by the
    caller between attempts. Any other 3xx/4xx is final.

    Args:
        max_retries: Retries allowed after the first attempt.
        interval_seconds: Wait before the first retry.
        factor: Multiplier applied to the wait after every retry.
        wait: Tenacity wait strategy replacing the exponential schedule.
        sleep: Callable used to wait; replaced in tests.
    """

    def __init__(
        self,
        max_retries: int = 4,
        interval_seconds: float = 1.0,
        factor: float = 4.0,
        *,
        wait: Optional[tenacity.wait.wait_base] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.retry_count = 0
        self.wait = wait or _backoff_wait(interval_seconds, factor)
        self._sleep = sleep or time.sleep

    def should_retry(self, status_code: int, error: Optional[BaseException]) -> bool:
        if error is None and not _is_transient_status(status_code):
            return False
        if self.retry_count >= self.max_retries:
            return False
        self.retry_count += 1
        delay = _delay_before_retry(self.wait, self.retry_count)
        LOGGER.debug(
            "Backing off %.2fs before retry %d/%d (status=%s, error=%s)",
            delay,
            self.retry_count,
            self.max_retries,
            status_code,
            type(error).__name__ if error is not None else None,
        )
        self._sleep(delay)
        return True


class NonIdempotentRetryPolicy:
    """Retry policy for operations whose side effects must not be repeated.

    Only failures where the service is known not to have acted are retried:
    a single retry on 401 (stale token) and backoff retries on 429
    (throttled). Network errors and 5xx are never retried because the
    request may already have been applied.
    """

    def __init__(
        self,
        max_throttle_retries: int = 4,
        interval_seconds: float = 1.0,
        factor: float = 4.0,
        *,
        wait: Optional[tenacity.wait.wait_base] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.max_throttle_retries = max_throttle_retries
        self.retry_count_401 = 0
        self.retry_count_429 = 0
        self.wait = wait or _backoff_wait(interval_seconds, factor)
        self._sleep = sleep or time.sleep

    def should_retry(self, status_code: int, error: Optional[BaseException]) -> bool:
        if status_code == 401 and self.retry_count_401 == 0:
            self.retry_count_401 += 1
            return True
        if status_code == 429 and self.retry_count_429 < self.max_throttle_retries:
            self.retry_count_429 += 1
            self._sleep(_delay_before_retry(self.wait, self.retry_count_429))
            return True
        return False


__all__ = [
    "ExponentialBackoffPolicy",
    "NoRetryPolicy",
    "NonIdempotentRetryPolicy",
    "RetryPolicy",
    "SleepFn",
]
