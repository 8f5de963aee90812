"""Typed configuration loading and access.

The pipeline reads an optional ``relkit.toml``:

    [artifacts]
    marker = "sfpowerscripts"
    scratch_root = ".relkit/unpacked_artifacts"
    skip_on_missing = false
    registry_url = "https://artifacts.example.com/releases"

    [retry]
    max_retries = 5
    initial_delay_ms = 5000
    max_delay_ms = 300000
    backoff_multiplier = 2.0
    enable_jitter = true

    [git]
    timeout_seconds = 30.0

Every key is optional; missing keys fall back to the defaults below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_float, get_int, get_str, get_table

__all__ = [
    "ArtifactsConfig",
    "Config",
    "ConfigError",
    "GitConfig",
    "RetryConfig",
    "load_config",
    "load_config_or_default",
    "DEFAULT_ARTIFACT_MARKER",
    "DEFAULT_SCRATCH_ROOT",
    "DEFAULT_GIT_TIMEOUT_SECONDS",
    "DEFAULT_NETWORK_RETRY_CONFIG",
]

# Literal embedded in every artifact archive name produced by the packaging step.
DEFAULT_ARTIFACT_MARKER = "sfpowerscripts"

DEFAULT_SCRATCH_ROOT = ".relkit/unpacked_artifacts"

DEFAULT_GIT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ArtifactsConfig:
    """Artifact discovery and extraction settings."""

    marker: str = DEFAULT_ARTIFACT_MARKER
    scratch_root: str = DEFAULT_SCRATCH_ROOT
    skip_on_missing: bool = False
    registry_url: str | None = None


@dataclass(frozen=True, slots=True)
class GitConfig:
    timeout_seconds: float = DEFAULT_GIT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Retry policy for one class of remote operation.

    Attributes:
        max_retries: Retries allowed after the first attempt.
        initial_delay: Delay in milliseconds before the first retry, and the jitter floor.
        max_delay: Cap applied to the exponential delay before jitter.
        backoff_multiplier: Growth factor per attempt.
        enable_jitter: Randomize delays to avoid synchronized retry storms.
    """

    max_retries: int = 5
    initial_delay: int = 5_000
    max_delay: int = 300_000
    backoff_multiplier: float = 2.0
    enable_jitter: bool = True

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.max_delay < self.initial_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= initial_delay ({self.initial_delay})"
            )
        if self.backoff_multiplier <= 1:
            raise ValueError(f"backoff_multiplier must be > 1, got {self.backoff_multiplier}")


DEFAULT_NETWORK_RETRY_CONFIG = RetryConfig()


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    artifacts: ArtifactsConfig = field(default_factory=ArtifactsConfig)
    retry: RetryConfig = DEFAULT_NETWORK_RETRY_CONFIG
    git: GitConfig = field(default_factory=GitConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If the retry section describes an invalid policy.
        """
        artifacts: StrDict = get_table(data, "artifacts") or {}
        retry: StrDict = get_table(data, "retry") or {}
        git: StrDict = get_table(data, "git") or {}
        timeout = get_float(git, "timeout_seconds")

        defaults = DEFAULT_NETWORK_RETRY_CONFIG
        max_retries = get_int(retry, "max_retries")
        initial_delay = get_int(retry, "initial_delay_ms")
        max_delay = get_int(retry, "max_delay_ms")
        multiplier = get_float(retry, "backoff_multiplier")
        jitter = get_bool(retry, "enable_jitter")
        skip = get_bool(artifacts, "skip_on_missing")

        return cls(
            artifacts=ArtifactsConfig(
                marker=get_str(artifacts, "marker") or DEFAULT_ARTIFACT_MARKER,
                scratch_root=get_str(artifacts, "scratch_root") or DEFAULT_SCRATCH_ROOT,
                skip_on_missing=skip if skip is not None else False,
                registry_url=get_str(artifacts, "registry_url"),
            ),
            retry=RetryConfig(
                max_retries=max_retries if max_retries is not None else defaults.max_retries,
                initial_delay=initial_delay if initial_delay is not None else defaults.initial_delay,
                max_delay=max_delay if max_delay is not None else defaults.max_delay,
                backoff_multiplier=multiplier if multiplier is not None else defaults.backoff_multiplier,
                enable_jitter=jitter if jitter is not None else defaults.enable_jitter,
            ),
            git=GitConfig(
                timeout_seconds=timeout if timeout is not None else DEFAULT_GIT_TIMEOUT_SECONDS,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to relkit.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Config:
    """Load config from file, or return the defaults if it cannot be loaded."""
    result = load_config(path)
    if isinstance(result, Ok):
        return result.value
    return Config()
