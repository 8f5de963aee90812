"""Bounded retry loop around a caller-supplied operation.

Per invocation the loop moves through:

    attempting -> succeeded
    attempting -> classifying -> retrying -> attempting   (after backoff sleep)
                              -> exhausted                 (network, no retries left)
                              -> non_retryable             (anything else)

Only network failures are retried. A non-network failure propagates on the
spot and untouched. When retries run out, the last error is re-raised with
the attempt count attached (Result operations get it wrapped in RetryExhausted),
so the caller can tell "never worked" from "network-flaky, then gave up".

Usage:
    result = run_with_retry(
        lambda: deployer.deploy(artifact),
        config.retry,
        console=console,
        label="deployment",
    )
"""

from __future__ import annotations

import contextlib
import time
from collections.abc import Callable
from dataclasses import dataclass

from relkit.core.result import Err, Result
from relkit.output.console import ConsoleProtocol, NullConsole

from .classify import ErrorKind, classify, network_cause, normalize_error
from .errors import NetworkCause
from .policy import RetryConfig, compute_delay, should_retry

__all__ = [
    "ErrorCallback",
    "RetryAttemptRecord",
    "RetryExhausted",
    "exhausted_attempts",
    "run_result_with_retry",
    "run_with_retry",
]


_ATTEMPTS_ATTR = "retry_attempts"


@dataclass(frozen=True, slots=True)
class RetryAttemptRecord:
    """What happened on one failed attempt. Passed to the error callback.

    Attributes:
        attempt: 1-based attempt number that failed.
        max_retries: Configured retry budget.
        elapsed_ms: Time since the first attempt started.
        kind: Classification of the failure.
        cause: Network cause, when kind is NETWORK.
        delay_ms: Backoff before the next attempt, None if the loop stops here.
        error: The raw error (exception or Err payload).
    """

    attempt: int
    max_retries: int
    elapsed_ms: int
    kind: ErrorKind
    cause: NetworkCause | None
    delay_ms: int | None
    error: object

    @property
    def will_retry(self) -> bool:
        return self.delay_ms is not None


ErrorCallback = Callable[[RetryAttemptRecord], None]


@dataclass(frozen=True, slots=True)
class RetryExhausted[E]:
    """Err payload returned once a Result operation ran out of network retries.

    Attributes:
        error: The last failure, as the operation returned it.
        attempts: Number of attempts made, the first one included.
    """

    error: E
    attempts: int

    def __str__(self) -> str:
        return f"{self.error} (retry exhausted after {self.attempts} attempts)"


def exhausted_attempts(error: object) -> int | None:
    """Attempt count carried by a failure that exhausted its retries.

    Works for exceptions re-raised by run_with_retry and for the
    RetryExhausted payload of run_result_with_retry.
    """
    if isinstance(error, RetryExhausted):
        return error.attempts
    value = getattr(error, _ATTEMPTS_ATTR, None)
    return value if isinstance(value, int) else None


def _describe(error: object) -> str:
    normalized = normalize_error(error)
    if normalized is None or not normalized.message:
        return type(error).__name__
    return normalized.message


class _RetryLoop:
    """Bookkeeping shared by the exception and Result flavours of the loop."""

    def __init__(
        self,
        config: RetryConfig,
        *,
        label: str,
        console: ConsoleProtocol | None,
        on_error: ErrorCallback | None,
        sleep: Callable[[float], None],
        clock: Callable[[], float],
    ) -> None:
        self.config = config
        self.label = label
        self.console: ConsoleProtocol = console or NullConsole()
        self.on_error = on_error
        self.sleep = sleep
        self.clock = clock
        self.started = clock()

    def elapsed_ms(self) -> int:
        return int((self.clock() - self.started) * 1000)

    def failed(self, error: object, attempt: int) -> bool:
        """Handle a failed attempt. Sleeps and returns True if the loop should go on."""
        kind = classify(error)
        retry = should_retry(error, attempt, self.config)
        delay = compute_delay(attempt, self.config) if retry else None

        if self.on_error is not None:
            self.on_error(
                RetryAttemptRecord(
                    attempt=attempt,
                    max_retries=self.config.max_retries,
                    elapsed_ms=self.elapsed_ms(),
                    kind=kind,
                    cause=network_cause(error),
                    delay_ms=delay,
                    error=error,
                )
            )

        if kind is not ErrorKind.NETWORK:
            self.console.debug(f"{self.label}: non-retryable failure: {_describe(error)}")
            return False

        if delay is None:
            self.console.error(
                f"{self.label}: maximum retry attempts ({self.config.max_retries}) reached, "
                f"giving up after {attempt} attempts: {_describe(error)}"
            )
            return False

        self.console.warning(
            f"{self.label}: network error detected "
            f"(attempt {attempt}/{self.config.max_retries}): {_describe(error)}"
        )
        self.console.info(f"Retrying in {delay / 1000:g}s with exponential backoff...")
        self.sleep(delay / 1000)
        return True

    def succeeded(self, attempts: int) -> None:
        if attempts > 1:
            self.console.success(
                f"{self.label} succeeded after {attempts} attempts "
                f"({self.elapsed_ms() / 1000:.1f}s total retry time)"
            )


def run_with_retry[T](
    operation: Callable[[], T],
    config: RetryConfig,
    *,
    label: str = "operation",
    console: ConsoleProtocol | None = None,
    on_error: ErrorCallback | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """Run operation, retrying network failures with exponential backoff.

    Args:
        operation: No-argument callable; failures are raised exceptions.
        config: Retry policy.
        label: Name used in console messages.
        console: Where retry telemetry goes (silent if None).
        on_error: Called with a RetryAttemptRecord after every failed attempt.
        sleep: Backoff sleep, in seconds.
        clock: Monotonic clock, in seconds.

    Returns:
        The value returned by the first successful attempt.

    Raises:
        Exception: A non-network failure, re-raised as is; or the last
            network failure once retries are exhausted, with a note and a
            ``retry_attempts`` attribute carrying the attempt count.
    """
    loop = _RetryLoop(
        config, label=label, console=console, on_error=on_error, sleep=sleep, clock=clock
    )
    attempt = 1
    while True:
        try:
            value = operation()
        except Exception as error:
            if loop.failed(error, attempt):
                attempt += 1
                continue
            if classify(error) is ErrorKind.NETWORK:
                error.add_note(f"retry exhausted after {attempt} attempts")
                with contextlib.suppress(AttributeError, TypeError):
                    setattr(error, _ATTEMPTS_ATTR, attempt)
            raise
        loop.succeeded(attempt)
        return value


def run_result_with_retry[T, E](
    operation: Callable[[], Result[T, E]],
    config: RetryConfig,
    *,
    label: str = "operation",
    console: ConsoleProtocol | None = None,
    on_error: ErrorCallback | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Result[T, E | RetryExhausted[E]]:
    """Result flavour of run_with_retry.

    The Err payload of each attempt is classified like an exception would be.
    The first Ok is returned. A non-network Err is returned unchanged; the
    last network Err is returned wrapped in RetryExhausted with the attempt
    count.
    """
    loop = _RetryLoop(
        config, label=label, console=console, on_error=on_error, sleep=sleep, clock=clock
    )
    attempt = 1
    while True:
        result = operation()
        if isinstance(result, Err):
            if loop.failed(result.error, attempt):
                attempt += 1
                continue
            if classify(result.error) is ErrorKind.NETWORK:
                return Err(RetryExhausted(result.error, attempt))
            return result
        loop.succeeded(attempt)
        return result
