"""Exception types understood by the retry classifier.

Most wrapped operations raise whatever their library raises (OSError,
URLError, ...) and are classified from errno codes and messages. These two
types let a caller state the classification explicitly.
"""

from __future__ import annotations

from typing import Literal

__all__ = ["DomainError", "NetworkCause", "NetworkError"]

NetworkCause = Literal[
    "reset",
    "refused",
    "timeout",
    "dns",
    "unreachable",
    "broken_pipe",
    "aborted",
]


class NetworkError(ConnectionError):
    """A transient transport failure. Always eligible for retry."""

    def __init__(self, message: str, cause: NetworkCause = "reset") -> None:
        super().__init__(message)
        self.cause: NetworkCause = cause


class DomainError(Exception):
    """A validation or business-rule failure from the wrapped operation.

    Never retried, even when its message happens to mention a network phrase.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
