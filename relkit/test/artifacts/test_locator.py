"""Tests for relkit.artifacts.locator module."""

from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from relkit.artifacts.locator import ArtifactLocator
from relkit.artifacts.model import Artifact, format_artifact_name, parse_artifact_name
from relkit.core.config import ArtifactsConfig, Config
from relkit.core.result import Err, Ok
from relkit.output.console import MockConsole

ARTIFACT_FILES = {
    "artifact_metadata.json": b'{"package_name": "core", "package_version_number": "1.0.0"}',
    "changelog.json": b'{"releases": []}',
    "source/sfdx-project.json": b"{}",
}


def make_zip_artifact(
    directory: Path,
    component: str,
    version: str,
    *,
    files: dict[str, bytes] | None = None,
    root: str | None = None,
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{component}_sfpowerscripts_artifact_{version}.zip"
    prefix = root if root is not None else f"{component}_sfpowerscripts_artifact"
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in (files if files is not None else ARTIFACT_FILES).items():
            zf.writestr(f"{prefix}/{name}", content)
    return path


def make_tgz_artifact(
    directory: Path, component: str, version: str, *, files: dict[str, bytes] | None = None
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{component}_sfpowerscripts_artifact_{version}.tgz"
    with tarfile.open(path, "w:gz") as tar:
        for name, content in (files if files is not None else ARTIFACT_FILES).items():
            info = tarfile.TarInfo(name=f"package/{name}")
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return path


@pytest.fixture
def console() -> MockConsole:
    return MockConsole()


@pytest.fixture
def locator(tmp_path: Path, console: MockConsole) -> ArtifactLocator:
    return ArtifactLocator(tmp_path / "scratch", console=console)


class TestArtifactNames:
    """Archive naming convention."""

    def test_parse_with_component(self) -> None:
        parsed = parse_artifact_name("core_sfpowerscripts_artifact_1.10.0-3.zip", "sfpowerscripts")
        assert parsed is not None
        assert parsed.component == "core"
        assert parsed.version == "1.10.0-3"
        assert parsed.extension == "zip"
        assert parsed.stem == "core_sfpowerscripts_artifact"

    def test_parse_component_with_underscores(self) -> None:
        parsed = parse_artifact_name("my_pkg_sfpowerscripts_artifact-2.0.0.tgz", "sfpowerscripts")
        assert parsed is not None
        assert parsed.component == "my_pkg"
        assert parsed.version == "2.0.0"

    def test_parse_without_version(self) -> None:
        parsed = parse_artifact_name("core_sfpowerscripts_artifact.zip", "sfpowerscripts")
        assert parsed is not None
        assert parsed.version is None

    def test_parse_foreign_name(self) -> None:
        assert parse_artifact_name("core.zip", "sfpowerscripts") is None

    def test_format(self) -> None:
        assert format_artifact_name("core", "1.0.0", "sfpowerscripts", "tgz") == (
            "core_sfpowerscripts_artifact_1.0.0.tgz"
        )


class TestFindArtifacts:
    """Discovery and latest-version selection."""

    def test_missing_directory(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        result = locator.find_artifacts(tmp_path / "nope")
        assert isinstance(result, Err)
        assert result.error.kind == "directory_not_found"

    def test_empty_directory(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        (tmp_path / "artifacts").mkdir()
        assert locator.find_artifacts(tmp_path / "artifacts") == Ok([])

    def test_all_artifacts_recursively(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        a = make_zip_artifact(artifacts, "core", "1.0.0")
        b = make_tgz_artifact(artifacts / "nested", "ui", "2.0.0")
        (artifacts / "README.md").write_text("not an artifact")

        result = locator.find_artifacts(artifacts)

        assert result == Ok(sorted([a, b]))

    def test_filter_selects_highest_version(
        self, locator: ArtifactLocator, console: MockConsole, tmp_path: Path
    ) -> None:
        artifacts = tmp_path / "artifacts"
        make_zip_artifact(artifacts, "core", "1.2.0")
        latest = make_zip_artifact(artifacts, "core", "1.10.0")
        make_zip_artifact(artifacts, "core", "1.9.3")
        make_zip_artifact(artifacts, "ui", "9.0.0")

        result = locator.find_artifacts(artifacts, "core")

        assert result == Ok([latest])
        assert console.find("Found more than one artifact for core")
        assert console.find(f"Using latest artifact {latest}")

    def test_filter_with_single_match(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        only = make_tgz_artifact(artifacts, "core", "1.0.0")
        make_tgz_artifact(artifacts, "ui", "1.0.0")

        assert locator.find_artifacts(artifacts, "core") == Ok([only])

    def test_release_beats_prerelease(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        make_zip_artifact(artifacts, "core", "2.0.0-4")
        release = make_zip_artifact(artifacts, "core", "2.0.0")

        assert locator.find_artifacts(artifacts, "core") == Ok([release])

    def test_unversioned_match_is_corrupt(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        make_zip_artifact(artifacts, "core", "1.0.0")
        (artifacts / "core_sfpowerscripts_artifact_latest.zip").write_bytes(b"")

        result = locator.find_artifacts(artifacts, "core")

        assert isinstance(result, Err)
        assert result.error.kind == "corrupt_artifact"
        assert "no version number" in result.error.message

    def test_tie_at_latest_is_ambiguous(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        make_zip_artifact(artifacts, "core", "1.0.0")
        make_zip_artifact(artifacts, "core", "2.0.0")
        make_tgz_artifact(artifacts, "core", "2.0.0")

        result = locator.find_artifacts(artifacts, "core")

        assert isinstance(result, Err)
        assert result.error.kind == "ambiguous_version"
        assert "2.0.0" in result.error.message

    def test_tie_below_latest_is_fine(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        make_zip_artifact(artifacts, "core", "1.0.0")
        make_tgz_artifact(artifacts, "core", "1.0.0")
        latest = make_zip_artifact(artifacts, "core", "3.0.0")

        assert locator.find_artifacts(artifacts, "core") == Ok([latest])

    def test_custom_marker(self, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        artifacts.mkdir()
        archive = artifacts / "core_pkg_artifact_1.0.0.zip"
        archive.write_bytes(b"")
        make_zip_artifact(artifacts, "core", "2.0.0")

        locator = ArtifactLocator(tmp_path / "scratch", marker="pkg")
        assert locator.find_artifacts(artifacts) == Ok([archive])


class TestResolveArtifact:
    """Extraction into per-call scratch folders."""

    def test_zip_layout(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        archive = make_zip_artifact(tmp_path / "artifacts", "core", "1.0.0")

        result = locator.resolve_artifact(archive)

        assert isinstance(result, Ok)
        artifact = result.value
        assert artifact.root.name == "core_sfpowerscripts_artifact"
        assert artifact.metadata_file_path.is_file()
        assert artifact.source_directory_path.is_dir()
        assert artifact.changelog_file_path.is_file()
        assert artifact.root.parent.parent == tmp_path / "scratch"

    def test_tgz_layout(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        archive = make_tgz_artifact(tmp_path / "artifacts", "core", "1.0.0")

        result = locator.resolve_artifact(archive)

        assert isinstance(result, Ok)
        assert result.value.root.name == "package"
        assert all(path.exists() for path in result.value.paths())

    def test_legacy_zip_root(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        archive = make_zip_artifact(
            tmp_path / "artifacts", "core", "1.0.0", root="core_sfpowerscripts"
        )

        result = locator.resolve_artifact(archive)

        assert isinstance(result, Ok)
        assert result.value.root.name == "core_sfpowerscripts"

    def test_missing_changelog_names_the_path(
        self, locator: ArtifactLocator, tmp_path: Path
    ) -> None:
        files = {k: v for k, v in ARTIFACT_FILES.items() if k != "changelog.json"}
        archive = make_tgz_artifact(tmp_path / "artifacts", "core", "1.0.0", files=files)

        result = locator.resolve_artifact(archive)

        assert isinstance(result, Err)
        assert result.error.kind == "missing_artifact_file"
        assert result.error.path is not None
        assert result.error.path.name == "changelog.json"
        assert str(result.error.path) in result.error.message
        assert result.error.is_corrupt

    def test_each_call_gets_its_own_folder(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        archive = make_zip_artifact(tmp_path / "artifacts", "core", "1.0.0")

        first = locator.resolve_artifact(archive)
        second = locator.resolve_artifact(archive)

        assert isinstance(first, Ok) and isinstance(second, Ok)
        assert first.value.root != second.value.root
        assert len(list((tmp_path / "scratch").iterdir())) == 2

    def test_unsupported_format(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        archive = tmp_path / "core_sfpowerscripts_artifact_1.0.0.rar"
        archive.write_bytes(b"x")

        result = locator.resolve_artifact(archive)

        assert isinstance(result, Err)
        assert result.error.kind == "unsupported_format"

    def test_artifact_under(self, tmp_path: Path) -> None:
        artifact = Artifact.under(tmp_path / "package")
        assert artifact.metadata_file_path == tmp_path / "package" / "artifact_metadata.json"
        assert artifact.source_directory_path == tmp_path / "package" / "source"
        assert artifact.changelog_file_path == tmp_path / "package" / "changelog.json"


class TestFetchArtifacts:
    def test_find_then_resolve(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        make_zip_artifact(artifacts, "core", "1.0.0")
        make_tgz_artifact(artifacts, "ui", "1.0.0")

        result = locator.fetch_artifacts(artifacts)

        assert isinstance(result, Ok)
        assert sorted(a.root.name for a in result.value) == [
            "core_sfpowerscripts_artifact",
            "package",
        ]

    def test_first_failure_aborts(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        make_zip_artifact(artifacts, "core", "1.0.0", files={"changelog.json": b"{}"})

        result = locator.fetch_artifacts(artifacts)

        assert isinstance(result, Err)
        assert result.error.kind == "missing_artifact_file"


class TestMissingArtifactPolicy:
    """What an empty search result means."""

    def test_found(self, locator: ArtifactLocator, tmp_path: Path) -> None:
        assert locator.missing_artifact_policy([tmp_path], skip_on_missing=False) == Ok(False)

    def test_missing_and_not_skippable(self, locator: ArtifactLocator) -> None:
        result = locator.missing_artifact_policy([], skip_on_missing=False)
        assert isinstance(result, Err)
        assert result.error.kind == "artifact_not_found"
        assert result.error.message == "Artifact not found, please check the inputs"

    def test_missing_and_skippable(self, locator: ArtifactLocator, console: MockConsole) -> None:
        assert locator.missing_artifact_policy([], skip_on_missing=True) == Ok(True)
        assert console.find("Skipping task as artifact is missing")


class TestFromConfig:
    def test_uses_configured_marker_and_scratch_root(self, tmp_path: Path) -> None:
        config = Config(artifacts=ArtifactsConfig(marker="pkg", scratch_root="work/unpacked"))

        locator = ArtifactLocator.from_config(config, tmp_path)

        assert locator.marker == "pkg"
        assert locator.scratch_root == tmp_path / "work" / "unpacked"
