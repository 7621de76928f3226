"""Bounded polling of eventually consistent checks."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from contract_flow_tester.configuration.runtime_settings import PollPolicy
from contract_flow_tester.failures import VerificationTimeoutError

logger = logging.getLogger(__name__)


def poll_until(
    predicate: Callable[[], bool],
    *,
    timeout_ms: int,
    description: str,
    policy: PollPolicy | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Evaluate `predicate` until it returns True or `timeout_ms` elapses.

    The first evaluation happens immediately. Later evaluations wait with a capped
    exponential back-off and never sleep past the deadline; one last evaluation
    runs once the deadline is reached. Exceptions raised by the predicate are not
    caught.

    Args:
      predicate: Check to evaluate; False means "not yet".
      timeout_ms: Overall time budget in milliseconds.
      description: Human-readable name of the check used in the timeout message.
      policy: Back-off settings; defaults to `PollPolicy()`.
      clock: Monotonic clock in seconds.
      sleep: Function used to wait between evaluations.

    Returns:
      The number of evaluations performed.

    Raises:
      VerificationTimeoutError: If the predicate never returned True in time.
    """
    resolved_policy = policy or PollPolicy()
    timeout_seconds = timeout_ms / 1000.0
    interval_seconds = resolved_policy.initial_interval_ms / 1000.0
    max_interval_seconds = resolved_policy.max_interval_ms / 1000.0
    started = clock()
    attempts = 0
    while True:
        attempts += 1
        if predicate():
            logger.debug("%s converged after %d evaluation(s)", description, attempts)
            return attempts
        remaining = timeout_seconds - (clock() - started)
        if remaining <= 0:
            raise VerificationTimeoutError(
                f"{description} did not hold within {timeout_ms} ms "
                f"({attempts} evaluation(s))."
            )
        sleep(min(interval_seconds, remaining))
        interval_seconds = min(interval_seconds * resolved_policy.multiplier, max_interval_seconds)
