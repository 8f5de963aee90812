from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

ArtifactErrorKind = Literal[
    "directory_not_found",
    "artifact_not_found",
    "corrupt_artifact",
    "missing_artifact_file",
    "ambiguous_version",
    "unsupported_format",
    "extraction_failed",
]

ArchiveFormat = Literal["zip", "tgz"]

# Fixed internal layout of every artifact archive.
ARTIFACT_METADATA_FILE = "artifact_metadata.json"
SOURCE_DIRECTORY = "source"
CHANGELOG_FILE = "changelog.json"
TARBALL_ROOT = "package"

ARCHIVE_EXTENSIONS: tuple[ArchiveFormat, ...] = ("zip", "tgz")


@dataclass(frozen=True, slots=True)
class ArtifactError:
    """Error from locating, extracting or validating an artifact.

    ``missing_artifact_file`` is reported separately from ``corrupt_artifact``
    so the absent path can be named, but both mean the archive is corrupt.
    """

    kind: ArtifactErrorKind
    message: str
    path: Path | None = None
    hint: str | None = None

    @property
    def is_corrupt(self) -> bool:
        return self.kind in ("corrupt_artifact", "missing_artifact_file")

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class Artifact:
    """An extracted artifact. All three paths existed when it was resolved."""

    metadata_file_path: Path
    source_directory_path: Path
    changelog_file_path: Path

    @property
    def root(self) -> Path:
        return self.metadata_file_path.parent

    def paths(self) -> tuple[Path, Path, Path]:
        return (self.metadata_file_path, self.source_directory_path, self.changelog_file_path)

    @classmethod
    def under(cls, root: Path) -> Artifact:
        """Expected artifact paths for an archive root folder."""
        return cls(
            metadata_file_path=root / ARTIFACT_METADATA_FILE,
            source_directory_path=root / SOURCE_DIRECTORY,
            changelog_file_path=root / CHANGELOG_FILE,
        )


@dataclass(frozen=True, slots=True)
class ArtifactName:
    """Parts of ``[<component>_]<marker>_artifact[-_]<version>.(zip|tgz)``."""

    component: str | None
    version: str | None
    extension: ArchiveFormat
    stem: str  # "<component>_<marker>_artifact", the zip root folder


def _name_pattern(marker: str) -> re.Pattern[str]:
    return re.compile(
        r"^(?P<stem>(?:(?P<component>.+)_)?"
        + re.escape(marker)
        + r"_artifact)(?:[-_](?P<version>.+?))?\.(?P<ext>zip|tgz)$"
    )


def parse_artifact_name(name: str, marker: str) -> ArtifactName | None:
    """Split an archive file name into its parts, or None if it does not follow the convention."""
    m = _name_pattern(marker).match(name)
    if m is None:
        return None
    ext: ArchiveFormat = "zip" if m.group("ext") == "zip" else "tgz"
    return ArtifactName(
        component=m.group("component"),
        version=m.group("version"),
        extension=ext,
        stem=m.group("stem"),
    )


def format_artifact_name(
    component: str | None, version: str, marker: str, extension: ArchiveFormat
) -> str:
    prefix = f"{component}_" if component else ""
    return f"{prefix}{marker}_artifact_{version}.{extension}"
