"""relkit: artifact resolution, revision diffing and network retry for release pipelines."""

__version__ = "0.1.0"
