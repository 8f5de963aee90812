"""Download versioned artifacts from a registry into the artifact directory.

Registry downloads are the network-facing half of artifact resolution, so
every download runs inside the retry loop. Once an archive is on disk the
ArtifactLocator picks it up like any locally built artifact.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from relkit.core.config import DEFAULT_ARTIFACT_MARKER, Config
from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, NullConsole
from relkit.platform.http import HttpClient, HttpError
from relkit.retry.policy import DEFAULT_NETWORK_RETRY_CONFIG, RetryConfig
from relkit.retry.runner import ErrorCallback, RetryExhausted, run_result_with_retry

from .model import ArchiveFormat, format_artifact_name

__all__ = ["ArtifactFetcher", "FetchError"]

# A registry failure, or the last network failure once retries ran out.
type FetchError = HttpError | RetryExhausted[HttpError]


class ArtifactFetcher:
    """Fetch ``<component>_<marker>_artifact_<version>.<ext>`` from a registry.

    Registry names are lowercase, so component names are lowercased.
    """

    def __init__(
        self,
        http: HttpClient,
        registry_url: str,
        *,
        marker: str = DEFAULT_ARTIFACT_MARKER,
        retry: RetryConfig = DEFAULT_NETWORK_RETRY_CONFIG,
        console: ConsoleProtocol | None = None,
        on_error: ErrorCallback | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._http = http
        self.registry_url = registry_url.rstrip("/")
        self.marker = marker
        self.retry = retry
        self._console: ConsoleProtocol = console or NullConsole()
        self._on_error = on_error
        self._sleep = sleep

    @classmethod
    def from_config(
        cls, http: HttpClient, config: Config, *, console: ConsoleProtocol | None = None
    ) -> ArtifactFetcher | None:
        """Fetcher for the configured registry, or None if no registry is set."""
        if config.artifacts.registry_url is None:
            return None
        return cls(
            http,
            config.artifacts.registry_url,
            marker=config.artifacts.marker,
            retry=config.retry,
            console=console,
        )

    def artifact_url(self, component: str, version: str, extension: ArchiveFormat = "tgz") -> str:
        name = format_artifact_name(component.lower(), version, self.marker, extension)
        return f"{self.registry_url}/{name}"

    def fetch(
        self,
        component: str,
        version: str,
        dest_dir: Path,
        *,
        extension: ArchiveFormat = "tgz",
    ) -> Result[Path, FetchError]:
        """Download one artifact archive into dest_dir, retrying network failures."""
        url = self.artifact_url(component, version, extension)
        dest = dest_dir / url.rsplit("/", 1)[-1]
        self._console.info(f"Fetching {component} {version} from {url}")

        return run_result_with_retry(
            lambda: self._http.download(url, dest),
            self.retry,
            label=f"fetch {component}",
            console=self._console,
            on_error=self._on_error,
            sleep=self._sleep,
        )

    def fetch_or_skip(
        self,
        component: str,
        version: str,
        dest_dir: Path,
        *,
        continue_on_missing: bool,
        extension: ArchiveFormat = "tgz",
    ) -> Result[Path | None, FetchError]:
        """Like fetch, but a failed fetch becomes Ok(None) when continue_on_missing is set.

        The caller then sees no archive in the directory and applies the
        missing-artifact policy.
        """
        result = self.fetch(component, version, dest_dir, extension=extension)
        if isinstance(result, Ok):
            return Ok(result.value)

        self._console.warning(
            f"Artifact for {component} not found in the registry provided, "
            "this might result in deployment failures"
        )
        self._console.debug(str(result.error))
        if continue_on_missing:
            return Ok(None)
        return Err(result.error)
