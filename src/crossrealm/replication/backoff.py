"""Linear backoff between transfer attempts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


DEFAULT_BACKOFF_STEP_SECONDS = 3.0


def linear_backoff(attempt_number: int, step_seconds: float = DEFAULT_BACKOFF_STEP_SECONDS) -> timedelta:
    """
    Wait before the attempt following ``attempt_number``.

    delay = attempt_number * step_seconds (no jitter, no cap; the attempt
    budget bounds the total wait).

    Args:
        attempt_number: 1-based number of the attempt that just failed
        step_seconds: Delay unit

    Returns:
        Delay as a timedelta

    Raises:
        ValueError: If attempt_number is not positive
    """
    if attempt_number < 1:
        raise ValueError(f"attempt_number must be >= 1, got {attempt_number}")
    return timedelta(seconds=attempt_number * step_seconds)


@dataclass(frozen=True)
class RetryScheduled:
    """Planned retry: the attempt that failed and how long to wait."""

    failed_attempt: int
    delay: timedelta

    @property
    def next_attempt(self) -> int:
        return self.failed_attempt + 1


def schedule_retry(failed_attempt: int, step_seconds: float = DEFAULT_BACKOFF_STEP_SECONDS) -> RetryScheduled:
    return RetryScheduled(
        failed_attempt=failed_attempt,
        delay=linear_backoff(failed_attempt, step_seconds),
    )
