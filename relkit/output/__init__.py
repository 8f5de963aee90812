"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    NullConsole,
    OutputRecord,
    RichConsole,
    Style,
)

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "NullConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]
