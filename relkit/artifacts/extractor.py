"""Archive extraction for artifact archives.

Extracts .zip and .tgz/.tar.gz archives into a directory that must not exist
yet, skipping members that would escape it (absolute paths, "..", links),
then checks that the members the caller requires are present.
"""

from __future__ import annotations

import shutil
import stat
import tarfile
import zipfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from relkit.core.result import Err, Ok, Result

from .model import ArchiveFormat, ArtifactError

__all__ = ["ArchiveExtractor", "ExtractResult", "archive_format"]


@dataclass(frozen=True, slots=True)
class ExtractResult:
    """Result of an extraction.

    Attributes:
        dest: Directory the archive was extracted into
        files_count: Number of regular files written
    """

    dest: Path
    files_count: int


def archive_format(archive: Path) -> ArchiveFormat | None:
    """Archive type by file name, or None if unsupported."""
    # Path.suffixes is unreliable for names like "core_x_artifact_1.2.3.zip"
    name = archive.name.lower()
    if name.endswith(".zip"):
        return "zip"
    if name.endswith((".tgz", ".tar.gz")):
        return "tgz"
    return None


class ArchiveExtractor:
    """Extract an artifact archive and verify its required members.

    Usage:
        extractor = ArchiveExtractor()
        result = extractor.extract(archive, scratch / token, required=["package/changelog.json"])
    """

    def extract(
        self,
        archive: Path,
        dest: Path,
        *,
        required: Sequence[str] = (),
    ) -> Result[ExtractResult, ArtifactError]:
        """Extract archive into dest, which is created and must not already exist.

        Args:
            archive: Path to a .zip or .tgz archive
            dest: Fresh extraction directory
            required: Member paths (relative to dest) that must exist afterwards

        Returns:
            Ok with ExtractResult, or Err with ArtifactError. A missing required
            member is reported as ``missing_artifact_file`` naming the first
            absent path.
        """
        if not archive.is_file():
            return Err(
                ArtifactError(kind="artifact_not_found", message="Archive not found", path=archive)
            )

        fmt = archive_format(archive)
        if fmt is None:
            return Err(
                ArtifactError(
                    kind="unsupported_format",
                    message=f"Unhandled artifact format {archive.name}, neither tar or zip file",
                    path=archive,
                )
            )

        try:
            dest.mkdir(parents=True, exist_ok=False)
        except FileExistsError:
            return Err(
                ArtifactError(
                    kind="extraction_failed",
                    message=f"Extraction directory already exists: {dest}",
                    path=dest,
                )
            )
        except OSError as e:
            return Err(ArtifactError(kind="extraction_failed", message=f"IO error: {e}", path=dest))

        if fmt == "zip":
            result = self._extract_zip(archive, dest)
        else:
            result = self._extract_tar(archive, dest)
        if isinstance(result, Err):
            return result

        missing = self.verify_members(dest, required)
        if isinstance(missing, Err):
            return missing
        return result

    def verify_members(self, root: Path, members: Sequence[str]) -> Result[None, ArtifactError]:
        """Check members exist under root, in order. Err names the first absent path."""
        for member in members:
            path = root / member
            if not path.exists():
                return Err(
                    ArtifactError(
                        kind="missing_artifact_file",
                        message=f"Artifact filepath {path} does not exist",
                        path=path,
                    )
                )
        return Ok(None)

    def _safe_relative_path(self, member_name: str) -> Path | None:
        """Return a sanitized relative extraction path, or None if unsafe."""
        normalized = member_name.replace("\\", "/")
        if normalized.startswith("/"):
            return None

        parts = PurePosixPath(normalized).parts
        if not parts:
            return None
        if any(part in {"", ".", ".."} for part in parts):
            return None
        if parts[0].endswith(":"):
            return None

        return Path(*parts)

    def _is_within_root(self, root: Path, target: Path) -> bool:
        try:
            return target.resolve().is_relative_to(root.resolve())
        except OSError:
            return False

    def _extract_tar(self, archive: Path, dest: Path) -> Result[ExtractResult, ArtifactError]:
        try:
            files_count = 0
            with tarfile.open(archive, "r:*") as tar:
                for member in tar.getmembers():
                    rel_path = self._safe_relative_path(member.name)
                    if rel_path is None:
                        continue
                    full_path = dest / rel_path
                    if not self._is_within_root(dest, full_path):
                        continue

                    if member.isdir():
                        full_path.mkdir(parents=True, exist_ok=True)
                        continue
                    # Symlinks, hardlinks, devices and fifos are never extracted
                    if not member.isreg():
                        continue

                    src = tar.extractfile(member)
                    if src is None:
                        continue

                    full_path.parent.mkdir(parents=True, exist_ok=True)
                    with src, open(full_path, "wb") as out:
                        shutil.copyfileobj(src, out)
                    files_count += 1

            return Ok(ExtractResult(dest=dest, files_count=files_count))

        except tarfile.TarError as e:
            return Err(
                ArtifactError(
                    kind="corrupt_artifact", message=f"Tar extraction failed: {e}", path=archive
                )
            )
        except OSError as e:
            return Err(ArtifactError(kind="extraction_failed", message=f"IO error: {e}", path=archive))

    def _extract_zip(self, archive: Path, dest: Path) -> Result[ExtractResult, ArtifactError]:
        try:
            files_count = 0
            with zipfile.ZipFile(archive, "r") as zf:
                for info in zf.infolist():
                    rel_path = self._safe_relative_path(info.filename)
                    if rel_path is None:
                        continue
                    full_path = dest / rel_path
                    if not self._is_within_root(dest, full_path):
                        continue

                    # Directory entries matter: "source/" may be empty
                    if info.is_dir():
                        full_path.mkdir(parents=True, exist_ok=True)
                        continue

                    file_type_bits = (info.external_attr >> 16) & 0o170000
                    if file_type_bits == stat.S_IFLNK:
                        continue

                    full_path.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(info) as src, open(full_path, "wb") as out:
                        shutil.copyfileobj(src, out)
                    files_count += 1

            return Ok(ExtractResult(dest=dest, files_count=files_count))

        except zipfile.BadZipFile as e:
            return Err(
                ArtifactError(kind="corrupt_artifact", message=f"Invalid zip file: {e}", path=archive)
            )
        except OSError as e:
            return Err(ArtifactError(kind="extraction_failed", message=f"IO error: {e}", path=archive))
