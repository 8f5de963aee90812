"""Classification-aware retry for network-facing operations.

Usage:
    from relkit.retry import DEFAULT_NETWORK_RETRY_CONFIG, run_with_retry

    result = run_with_retry(deploy, DEFAULT_NETWORK_RETRY_CONFIG, console=console)
"""

from relkit.retry.classify import (
    NETWORK_ERROR_CODES,
    NETWORK_ERROR_MESSAGES,
    ErrorKind,
    NormalizedError,
    classify,
    network_cause,
    normalize_error,
)
from relkit.retry.errors import DomainError, NetworkCause, NetworkError
from relkit.retry.policy import (
    DEFAULT_NETWORK_RETRY_CONFIG,
    RetryConfig,
    compute_delay,
    should_retry,
)
from relkit.retry.runner import (
    ErrorCallback,
    RetryAttemptRecord,
    RetryExhausted,
    exhausted_attempts,
    run_result_with_retry,
    run_with_retry,
)

__all__ = [
    # classify
    "ErrorKind",
    "NETWORK_ERROR_CODES",
    "NETWORK_ERROR_MESSAGES",
    "NormalizedError",
    "classify",
    "network_cause",
    "normalize_error",
    # errors
    "DomainError",
    "NetworkCause",
    "NetworkError",
    # policy
    "DEFAULT_NETWORK_RETRY_CONFIG",
    "RetryConfig",
    "compute_delay",
    "should_retry",
    # runner
    "ErrorCallback",
    "RetryAttemptRecord",
    "RetryExhausted",
    "exhausted_attempts",
    "run_result_with_retry",
    "run_with_retry",
]
