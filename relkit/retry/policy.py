"""Retry eligibility and exponential backoff timing.

All durations are integer milliseconds.
"""

from __future__ import annotations

import math
import random

from relkit.core.config import DEFAULT_NETWORK_RETRY_CONFIG, RetryConfig

from .classify import ErrorKind, classify

__all__ = [
    "DEFAULT_NETWORK_RETRY_CONFIG",
    "JITTER_RATIO",
    "RetryConfig",
    "compute_delay",
    "should_retry",
]

# Jitter spreads a delay uniformly over +/- this fraction of its capped value.
JITTER_RATIO = 0.25


def should_retry(error: object, attempt: int, config: RetryConfig) -> bool:
    """True iff error is a network failure and attempt is within max_retries.

    Args:
        error: The failure from the attempt that just ran.
        attempt: 1-based number of that attempt.
        config: Retry policy.
    """
    if classify(error) is not ErrorKind.NETWORK:
        return False
    return attempt <= config.max_retries


def _base_delay(attempt: int, config: RetryConfig) -> float:
    if config.initial_delay == 0:
        return 0.0
    try:
        growth = config.backoff_multiplier ** (attempt - 1)
    except OverflowError:
        return float(config.max_delay)
    return config.initial_delay * growth


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_delay(attempt: int, config: RetryConfig, *, rng: random.Random | None = None) -> int:
    """Delay in milliseconds before the retry that follows ``attempt``.

    ``initial_delay * backoff_multiplier ** (attempt - 1)``, capped at
    ``max_delay``. With jitter, the capped value moves by up to +/-25% and is
    then floored back at ``initial_delay``, so near the first attempts the
    distribution is skewed upward.

    Args:
        attempt: 1-based attempt number.
        config: Retry policy.
        rng: Random source for jitter (module-level generator if None).

    Raises:
        ValueError: If attempt is less than 1.
    """
    if attempt < 1:
        raise ValueError(f"attempt is 1-based, got {attempt}")

    delay = min(_base_delay(attempt, config), float(config.max_delay))

    if config.enable_jitter:
        uniform = (rng or random).random()
        jitter = (uniform - 0.5) * 2 * (delay * JITTER_RATIO)
        delay = max(float(config.initial_delay), delay + jitter)

    return _round_half_up(delay)
