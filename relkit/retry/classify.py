"""Failure classification: network (transient) versus everything else.

Errors reach the classifier in many shapes: plain strings from a log line,
exceptions, mappings decoded from JSON, or the error dataclasses returned in
``Err``. ``normalize_error`` is the single conversion point; the rest of the
module only ever looks at a NormalizedError.
"""

from __future__ import annotations

import errno
import socket
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, auto

from .errors import DomainError, NetworkCause, NetworkError

__all__ = [
    "ErrorKind",
    "NETWORK_ERROR_CODES",
    "NETWORK_ERROR_MESSAGES",
    "NormalizedError",
    "classify",
    "network_cause",
    "normalize_error",
]


class ErrorKind(Enum):
    NETWORK = auto()
    OTHER = auto()

    def __str__(self) -> str:
        return self.name.lower()


_CODE_CAUSES: dict[str, NetworkCause] = {
    "ECONNRESET": "reset",
    "ECONNREFUSED": "refused",
    "ETIMEDOUT": "timeout",
    "ENOTFOUND": "dns",
    "EAI_AGAIN": "dns",
    "EPIPE": "broken_pipe",
    "ECONNABORTED": "aborted",
    "ENETDOWN": "unreachable",
    "ENETUNREACH": "unreachable",
    "EHOSTDOWN": "unreachable",
    "EHOSTUNREACH": "unreachable",
}

# Checked in order; the first phrase found decides the cause.
_PHRASE_CAUSES: tuple[tuple[str, NetworkCause], ...] = (
    ("socket hang up", "reset"),
    ("connection reset", "reset"),
    ("socket disconnected", "reset"),
    ("connection closed", "reset"),
    ("network timeout", "timeout"),
    ("connection timeout", "timeout"),
    ("request timeout", "timeout"),
    ("socket timeout", "timeout"),
    ("network is unreachable", "unreachable"),
    ("host is unreachable", "unreachable"),
    ("host is down", "unreachable"),
    ("name resolution failure", "dns"),
    ("temporary failure in name resolution", "dns"),
)

# Builtin exceptions raised without an errno (e.g. ``raise ConnectionResetError()``).
_EXCEPTION_CODES: tuple[tuple[type[OSError], str], ...] = (
    (ConnectionResetError, "ECONNRESET"),
    (ConnectionRefusedError, "ECONNREFUSED"),
    (ConnectionAbortedError, "ECONNABORTED"),
    (BrokenPipeError, "EPIPE"),
    (TimeoutError, "ETIMEDOUT"),
)

NETWORK_ERROR_CODES = frozenset(_CODE_CAUSES)
NETWORK_ERROR_MESSAGES = tuple(phrase for phrase, _ in _PHRASE_CAUSES)


@dataclass(frozen=True, slots=True)
class NormalizedError:
    """An error reduced to what the classifier reads.

    Attributes:
        message: Human-readable text (may be empty).
        code: OS/network error code such as "ECONNRESET", if one is known.
    """

    message: str
    code: str | None = None


def _exception_code(error: BaseException) -> str | None:
    code = getattr(error, "code", None)
    if isinstance(code, str) and code:
        return code

    if isinstance(error, socket.gaierror):
        return "EAI_AGAIN" if error.errno == socket.EAI_AGAIN else "ENOTFOUND"

    if isinstance(error, OSError):
        if isinstance(error.errno, int) and error.errno > 0:
            name = errno.errorcode.get(error.errno)
            if name:
                return name
        # urllib.error.URLError wraps the socket error in ``reason``
        reason = getattr(error, "reason", None)
        if isinstance(reason, BaseException) and reason is not error:
            nested = _exception_code(reason)
            if nested:
                return nested
        for exc_type, name in _EXCEPTION_CODES:
            if isinstance(error, exc_type):
                return name

    return None


def _exception_message(error: BaseException) -> str:
    text = str(error)
    reason = getattr(error, "reason", None)
    if reason is not None and str(reason) not in text:
        text = f"{text} {reason}".strip()
    return text


def normalize_error(error: object) -> NormalizedError | None:
    """Convert any supported error shape into a NormalizedError.

    Returns None for None (nothing to classify).
    """
    if error is None:
        return None
    if isinstance(error, NormalizedError):
        return error
    if isinstance(error, str):
        return NormalizedError(message=error)
    if isinstance(error, BaseException):
        return NormalizedError(message=_exception_message(error), code=_exception_code(error))
    if isinstance(error, Mapping):
        message = error.get("message")
        code = error.get("code")
        return NormalizedError(
            message=message if isinstance(message, str) else "",
            code=code if isinstance(code, str) and code else None,
        )

    # Error dataclasses (HttpError, ProcessError, GitError, ...)
    code = getattr(error, "code", None)
    message = getattr(error, "message", None)
    if not isinstance(message, str):
        stderr = getattr(error, "stderr", None)
        message = stderr if isinstance(stderr, str) and stderr else str(error)
    return NormalizedError(message=message, code=code if isinstance(code, str) and code else None)


def network_cause(error: object) -> NetworkCause | None:
    """Return why an error counts as a network failure, or None if it does not."""
    if isinstance(error, DomainError):
        return None
    if isinstance(error, NetworkError):
        return error.cause

    normalized = normalize_error(error)
    if normalized is None:
        return None

    if normalized.code:
        cause = _CODE_CAUSES.get(normalized.code.upper())
        if cause:
            return cause

    text = normalized.message.lower()
    if not text:
        return None

    for phrase, cause in _PHRASE_CAUSES:
        if phrase in text:
            return cause

    # Messages that embed the code, e.g. "connect ECONNREFUSED 10.0.0.1:443"
    for code, cause in _CODE_CAUSES.items():
        if code.lower() in text:
            return cause

    return None


def classify(error: object) -> ErrorKind:
    """Classify an error as NETWORK (transient) or OTHER (permanent)."""
    if network_cause(error) is None:
        return ErrorKind.OTHER
    return ErrorKind.NETWORK
