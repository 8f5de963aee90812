"""Process and HTTP adapters."""

from relkit.platform.http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from relkit.platform.process import ProcessError, run, run_bytes

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "ProcessError",
    "run",
    "run_bytes",
]
