"""Polling utilities for the cluster DNS scenario.

Every wait condition of the scenario (pods running, service responding,
DNS resolvable, pod scheduled, log output) is expressed through
wait_for_condition(), a single time-bounded poll loop.

Functions:
    wait_for_condition: Poll until a condition is true or timeout

Example:
    from cluster_dns_e2e.fixtures.polling import wait_for_condition

    wait_for_condition(
        lambda: pod_phase("dns-frontend") != "Pending",
        timeout=300.0,
        interval=2.0,
        description="pod dns-frontend in dnsexample0 to leave Pending",
    )
"""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from cluster_dns_e2e.errors import ScenarioError

logger = structlog.get_logger(__name__)


class PollingTimeoutError(TimeoutError):
    """Raised when a polling operation times out.

    Attributes:
        description: What was being waited for
        timeout: How long we waited
        last_error: Last exception encountered during polling (if any)
    """

    def __init__(
        self,
        description: str,
        timeout: float,
        last_error: Exception | None = None,
    ) -> None:
        self.description = description
        self.timeout = timeout
        self.last_error = last_error
        message = f"Timeout waiting for {description} after {timeout:.1f}s"
        if last_error:
            message += f" (last error: {last_error})"
        super().__init__(message)


def wait_for_condition(
    condition: Callable[[], bool],
    timeout: float = 30.0,
    interval: float = 0.5,
    description: str = "condition",
) -> bool:
    """Poll until condition is True or timeout.

    The condition is evaluated at least once. Exceptions raised by the
    condition count as "not yet" and are kept as ``last_error`` so the
    eventual timeout message says why the condition kept failing. A
    ScenarioError raised by the condition is fatal and propagates at once.

    Args:
        condition: Callable returning True when the condition is met.
        timeout: Maximum wait time in seconds. Defaults to 30.0.
        interval: Poll interval in seconds. Defaults to 0.5.
        description: Description for error messages. Defaults to "condition".

    Returns:
        True once the condition is met.

    Raises:
        PollingTimeoutError: If condition not met within timeout.
        ScenarioError: If the condition raised one.
    """
    start_time = time.monotonic()
    last_error: Exception | None = None
    attempts = 0

    while True:
        attempts += 1
        try:
            if condition():
                logger.debug(
                    "condition_met",
                    description=description,
                    attempts=attempts,
                    elapsed=round(time.monotonic() - start_time, 2),
                )
                return True
        except ScenarioError:
            raise
        except Exception as e:  # noqa: BLE001
            last_error = e

        elapsed = time.monotonic() - start_time
        if elapsed >= timeout:
            logger.warning(
                "condition_timeout",
                description=description,
                attempts=attempts,
                timeout=timeout,
                last_error=str(last_error) if last_error else None,
            )
            raise PollingTimeoutError(description, timeout, last_error)

        # Sleep for interval, but don't exceed remaining time
        remaining = timeout - elapsed
        sleep_time = min(interval, remaining)
        if sleep_time > 0:
            time.sleep(sleep_time)


__all__ = [
    "PollingTimeoutError",
    "wait_for_condition",
]
