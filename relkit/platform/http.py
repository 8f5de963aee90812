"""HTTP client abstraction for artifact downloads.

This module provides:
- HttpClient: Protocol for downloads (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Scripted implementation for testing
"""

from __future__ import annotations

import errno
import os
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from relkit.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for transport errors)
        message: Human-readable error message
        code: OS-level error code for transport errors (e.g. "ECONNRESET")
    """

    url: str
    status: int
    message: str
    code: str | None = None

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def _os_code(error: BaseException) -> str | None:
    if isinstance(error, TimeoutError):
        return "ETIMEDOUT"
    if isinstance(error, OSError) and isinstance(error.errno, int) and error.errno > 0:
        return errno.errorcode.get(error.errno)
    return None


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP downloads."""

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Download URL to dest.

        Returns:
            Ok with dest path, or Err with HttpError
        """
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates.

    Downloads go to ``<dest>.part`` and are renamed into place once complete,
    so an interrupted download never leaves a truncated archive behind.
    """

    def __init__(self, timeout: float = 60.0, user_agent: str = "relkit/0.1.0") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        partial = dest.with_name(dest.name + ".part")
        try:
            req = urllib.request.Request(url, headers={"User-Agent": self.user_agent})
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(partial, "wb") as f:
                    while chunk := response.read(8192):
                        f.write(chunk)
            os.replace(partial, dest)
            return Ok(dest)

        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            reason = e.reason
            code = _os_code(reason) if isinstance(reason, BaseException) else None
            return Err(HttpError(url=url, status=0, message=str(reason), code=code))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out", code="ETIMEDOUT"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e), code=_os_code(e)))
        finally:
            partial.unlink(missing_ok=True)


class MockHttpClient:
    """Mock HTTP client for testing.

    Each URL gets a queue of responses consumed one per call; the last one
    repeats. This makes "fails twice, then succeeds" easy to script.

    Usage:
        client = MockHttpClient()
        client.set_download(url, HttpError(url, 0, "socket hang up"), b"payload")
    """

    def __init__(self) -> None:
        self._responses: dict[str, list[bytes | HttpError]] = {}
        self.calls: list[str] = []

    def set_download(self, url: str, *responses: bytes | HttpError) -> None:
        self._responses[url] = list(responses)

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self.calls.append(url)

        queue = self._responses.get(url)
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)
