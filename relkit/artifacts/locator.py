"""Versioned artifact discovery and resolution.

Artifacts produced by the packaging step are archives named

    [<component>_]<marker>_artifact[-_]<version>.(zip|tgz)

A zip holds ``<component>_<marker>_artifact/`` at its top level; a tarball
holds ``package/``. Either folder contains ``artifact_metadata.json``,
``source/`` and ``changelog.json``.

Several builds may resolve artifacts from the same directory at once. Each
resolve extracts into its own freshly created ``<scratch_root>/<uuid4 hex>``
folder, so no two calls ever write to the same path. Scratch folders are
left in place for an end-of-run sweep.
"""

from __future__ import annotations

from collections.abc import Sequence
from fnmatch import fnmatchcase
from pathlib import Path
from uuid import uuid4

from relkit.core.config import DEFAULT_ARTIFACT_MARKER, Config
from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, NullConsole

from .extractor import ArchiveExtractor, archive_format
from .model import (
    ARCHIVE_EXTENSIONS,
    ARTIFACT_METADATA_FILE,
    CHANGELOG_FILE,
    SOURCE_DIRECTORY,
    TARBALL_ROOT,
    Artifact,
    ArtifactError,
    parse_artifact_name,
)
from .semver import SemVer, parse_version

__all__ = ["ArtifactLocator"]


class ArtifactLocator:
    """Find, disambiguate and unpack artifact archives.

    Attributes:
        scratch_root: Parent of the per-call extraction folders
        marker: Literal that identifies artifact archives in file names
    """

    def __init__(
        self,
        scratch_root: Path,
        *,
        marker: str = DEFAULT_ARTIFACT_MARKER,
        extractor: ArchiveExtractor | None = None,
        console: ConsoleProtocol | None = None,
    ) -> None:
        self.scratch_root = scratch_root
        self.marker = marker
        self._extractor = extractor or ArchiveExtractor()
        self._console: ConsoleProtocol = console or NullConsole()

    @classmethod
    def from_config(
        cls, config: Config, base: Path, *, console: ConsoleProtocol | None = None
    ) -> ArtifactLocator:
        """Build a locator whose scratch root is resolved against base."""
        return cls(
            base / config.artifacts.scratch_root,
            marker=config.artifacts.marker,
            console=console,
        )

    # -------------------------------------------------------------------------
    # Discovery
    # -------------------------------------------------------------------------

    def _glob_patterns(self, name_filter: str | None) -> list[str]:
        prefix = f"{name_filter}_" if name_filter else ""
        return [f"*{prefix}{self.marker}_artifact*.{ext}" for ext in ARCHIVE_EXTENSIONS]

    def find_artifacts(
        self, directory: Path, name_filter: str | None = None
    ) -> Result[list[Path], ArtifactError]:
        """Recursively find artifact archives under directory.

        Without a filter every matching archive is returned, sorted by path.
        With a filter and several matches, only the one with the highest
        semantic version is returned.

        Returns:
            Ok(list of archive paths, possibly empty), or Err with
            ``directory_not_found``, ``corrupt_artifact`` (a match without a
            parseable version) or ``ambiguous_version`` (a tie at the top).
        """
        if not directory.is_dir():
            return Err(
                ArtifactError(
                    kind="directory_not_found",
                    message=f"Artifact directory {directory.resolve()} does not exist",
                    path=directory,
                )
            )

        patterns = self._glob_patterns(name_filter)
        archives = sorted(
            path
            for path in directory.rglob("*")
            if path.is_file() and any(fnmatchcase(path.name, p) for p in patterns)
        )
        self._console.debug(f"Artifacts: {[str(a) for a in archives]}")

        if name_filter and len(archives) > 1:
            self._console.info(f"Found more than one artifact for {name_filter}")
            latest = self._select_latest(archives)
            if isinstance(latest, Err):
                return latest
            self._console.info(f"Using latest artifact {latest.value}")
            return Ok([latest.value])

        return Ok(archives)

    def _version_of(self, archive: Path) -> SemVer | None:
        parsed = parse_artifact_name(archive.name, self.marker)
        if parsed is None or parsed.version is None:
            return None
        return parse_version(parsed.version)

    def _select_latest(self, archives: Sequence[Path]) -> Result[Path, ArtifactError]:
        versioned: list[tuple[SemVer, Path]] = []
        for archive in archives:
            version = self._version_of(archive)
            if version is None:
                return Err(
                    ArtifactError(
                        kind="corrupt_artifact",
                        message=f"Corrupted artifact detected with no version number: {archive.name}",
                        path=archive,
                    )
                )
            versioned.append((version, archive))

        top_key = max(v.precedence_key() for v, _ in versioned)
        top = [(v, a) for v, a in versioned if v.precedence_key() == top_key]
        if len(top) > 1:
            names = ", ".join(a.name for _, a in top)
            return Err(
                ArtifactError(
                    kind="ambiguous_version",
                    message=f"Several artifacts share the latest version {top[0][0]}: {names}",
                    path=top[0][1],
                    hint="Remove the duplicate archives or pass a more specific directory.",
                )
            )
        return Ok(top[0][1])

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _zip_root_candidates(self, archive: Path) -> list[str]:
        parsed = parse_artifact_name(archive.name, self.marker)
        if parsed is None:
            return []
        # "<component>_<marker>_artifact" is what the packager writes; the
        # shorter "<component>_<marker>" is accepted for older archives.
        return [parsed.stem, parsed.stem.removesuffix("_artifact")]

    def resolve_artifact(self, archive: Path) -> Result[Artifact, ArtifactError]:
        """Extract archive into a fresh scratch folder and validate its layout.

        Returns:
            Ok(Artifact) whose three paths exist, or Err. A missing member is
            ``missing_artifact_file`` naming the first absent path.
        """
        fmt = archive_format(archive)
        if fmt is None:
            return Err(
                ArtifactError(
                    kind="unsupported_format",
                    message=f"Unhandled artifact format {archive.name}, neither tar or zip file",
                    path=archive,
                )
            )

        dest = self.scratch_root / uuid4().hex
        self._console.debug(f"Extracting {archive} to {dest}")
        extracted = self._extractor.extract(archive, dest)
        if isinstance(extracted, Err):
            return extracted

        if fmt == "tgz":
            roots = [TARBALL_ROOT]
        else:
            roots = self._zip_root_candidates(archive)
            if not roots:
                return Err(
                    ArtifactError(
                        kind="corrupt_artifact",
                        message=f"Failed to fetch artifact file paths for {archive}",
                        path=archive,
                    )
                )

        root = next((r for r in roots if (dest / r).is_dir()), roots[0])
        required = [f"{root}/{m}" for m in (ARTIFACT_METADATA_FILE, SOURCE_DIRECTORY, CHANGELOG_FILE)]
        verified = self._extractor.verify_members(dest, required)
        if isinstance(verified, Err):
            return verified

        return Ok(Artifact.under(dest / root))

    def fetch_artifacts(
        self, directory: Path, name_filter: str | None = None
    ) -> Result[list[Artifact], ArtifactError]:
        """Find archives then resolve each one. The first failure aborts."""
        found = self.find_artifacts(directory, name_filter)
        if isinstance(found, Err):
            return found

        artifacts: list[Artifact] = []
        for archive in found.value:
            resolved = self.resolve_artifact(archive)
            if isinstance(resolved, Err):
                return resolved
            artifacts.append(resolved.value)
        return Ok(artifacts)

    def missing_artifact_policy(
        self, artifacts: Sequence[object], skip_on_missing: bool
    ) -> Result[bool, ArtifactError]:
        """Decide what an empty search result means.

        Returns:
            Ok(True) when nothing was found and skipping is allowed (the caller
            should skip), Ok(False) when artifacts were found, Err with
            ``artifact_not_found`` when nothing was found and skipping is not
            allowed.
        """
        if artifacts:
            return Ok(False)
        if not skip_on_missing:
            return Err(
                ArtifactError(
                    kind="artifact_not_found",
                    message="Artifact not found, please check the inputs",
                )
            )
        self._console.info("Skipping task as artifact is missing and skip on missing is enabled")
        return Ok(True)
