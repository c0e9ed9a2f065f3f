"""
Bounded retry around Object Transfer.

The controller is an explicit state machine::

    Attempting(1) --success--> Succeeded
    Attempting(n) --failure, n < max--> [sleep backoff(n)] --> Attempting(n + 1)
    Attempting(n) --failure, n == max--> Exhausted

Each attempt yields a fresh ``TransferAttempt`` that is folded into the next
state immediately; no result is shared across loop iterations. Every
``TransferError`` is retryable under this policy.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from ..result import Failure, Result, Success
from .backoff import DEFAULT_BACKOFF_STEP_SECONDS, RetryScheduled, schedule_retry
from .errors import ReplicationExhausted, TransferError
from .models import TransferAttempt


_logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5

Sleep = Callable[[float], Awaitable[None]]


class Transfer(Protocol):
    """Anything that can run one transfer attempt (``ObjectTransfer`` in production)."""

    async def transfer(self, source_bucket: str, key: str) -> Result[None, TransferError]: ...


@dataclass(frozen=True)
class Attempting:
    """About to run attempt ``attempt_number``."""

    attempt_number: int


@dataclass(frozen=True)
class Succeeded:
    attempts: int


@dataclass(frozen=True)
class Exhausted:
    attempts: int
    cause: TransferError


RetryState = Attempting | Succeeded | Exhausted


def next_state(
    attempt: TransferAttempt, max_attempts: int, step_seconds: float = DEFAULT_BACKOFF_STEP_SECONDS
) -> tuple[RetryState, RetryScheduled | None]:
    """Fold one attempt into the next state and the wait that precedes it (if any)."""
    match attempt.outcome:
        case Success():
            return Succeeded(attempts=attempt.attempt_number), None
        case Failure(cause) if attempt.attempt_number >= max_attempts:
            return Exhausted(attempts=attempt.attempt_number, cause=cause), None
        case Failure(_):
            plan = schedule_retry(attempt.attempt_number, step_seconds)
            return Attempting(attempt_number=plan.next_attempt), plan
    raise AssertionError("Unreachable: outcome is Success or Failure")


class RetryController:
    """Drives a transfer until it succeeds or the attempt budget runs out.

    Args:
        transfer: Object Transfer to drive
        max_attempts: Attempt budget (configuration, 5 by default)
        backoff_step_seconds: Linear backoff unit
        sleep: Awaitable sleep; injectable so tests can observe the schedule
    """

    def __init__(
        self,
        transfer: Transfer,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_step_seconds: float = DEFAULT_BACKOFF_STEP_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._transfer = transfer
        self.max_attempts = max_attempts
        self.backoff_step_seconds = backoff_step_seconds
        self._sleep = sleep

    async def with_retry(
        self, source_bucket: str, key: str, max_attempts: int | None = None
    ) -> Result[None, ReplicationExhausted]:
        budget = self.max_attempts if max_attempts is None else max_attempts
        state: RetryState = Attempting(attempt_number=1)

        while isinstance(state, Attempting):
            attempt = TransferAttempt(
                attempt_number=state.attempt_number,
                outcome=await self._transfer.transfer(source_bucket, key),
            )
            state, plan = next_state(attempt, budget, self.backoff_step_seconds)
            if plan is not None and isinstance(attempt.outcome, Failure):
                _logger.warning(
                    f"Attempt {plan.failed_attempt}/{budget} for {source_bucket}/{key} failed: "
                    f"{attempt.outcome.error}. Retrying in {plan.delay.total_seconds():g}s"
                )
                await self._sleep(plan.delay.total_seconds())

        match state:
            case Succeeded(attempts=attempts):
                if attempts > 1:
                    _logger.info(f"Replicated {source_bucket}/{key} after {attempts} attempts")
                return Success(None)
            case Exhausted(attempts=attempts, cause=cause):
                _logger.error(
                    f"Could not replicate {source_bucket}/{key} in {attempts} attempts: {cause}"
                )
                return Failure(ReplicationExhausted(key=key, attempts=attempts, cause=cause))
        raise AssertionError("Unreachable: loop exits only in a terminal state")
