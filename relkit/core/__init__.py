"""Core types: Result, config."""

from .result import Err, Ok, Result, is_err, is_ok
from .config import Config, ConfigError, RetryConfig, load_config, load_config_or_default

__all__ = [
    # config
    "Config",
    "ConfigError",
    "RetryConfig",
    "load_config",
    "load_config_or_default",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
