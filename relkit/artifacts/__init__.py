"""Versioned artifact discovery, extraction and registry download.

Usage:
    from relkit.artifacts import ArtifactLocator

    locator = ArtifactLocator(Path(".relkit/unpacked_artifacts"))
    match locator.fetch_artifacts(Path("artifacts"), "core"):
        case Ok(artifacts):
            for artifact in artifacts:
                print(artifact.metadata_file_path)
        case Err(error):
            print(error.pretty())
"""

from relkit.artifacts.extractor import ArchiveExtractor, ExtractResult, archive_format
from relkit.artifacts.fetcher import ArtifactFetcher
from relkit.artifacts.locator import ArtifactLocator
from relkit.artifacts.model import (
    Artifact,
    ArtifactError,
    ArtifactName,
    format_artifact_name,
    parse_artifact_name,
)
from relkit.artifacts.semver import SemVer, parse_version

__all__ = [
    # extractor
    "ArchiveExtractor",
    "ExtractResult",
    "archive_format",
    # fetcher
    "ArtifactFetcher",
    # locator
    "ArtifactLocator",
    # model
    "Artifact",
    "ArtifactError",
    "ArtifactName",
    "format_artifact_name",
    "parse_artifact_name",
    # semver
    "SemVer",
    "parse_version",
]
