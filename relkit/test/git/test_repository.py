"""Tests for git/repository.py."""

from __future__ import annotations

from pathlib import Path

import pytest

from relkit.core.config import Config, GitConfig
from relkit.core.result import Err, Ok, Result
from relkit.git import repository as repository_mod
from relkit.git.repository import Repository
from relkit.platform.process import ProcessError


class _FakeRun:
    """Records git invocations and replays a canned result."""

    def __init__(self, result: Result[str, ProcessError]) -> None:
        self.result = result
        self.calls: list[list[str]] = []
        self.timeouts: list[float | None] = []

    def __call__(self, cmd: list[str], cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        del cwd
        self.calls.append(cmd)
        self.timeouts.append(timeout)
        return self.result


def _failure(stderr: str, returncode: int = 128) -> Err[ProcessError]:
    return Err(ProcessError(command=("git",), returncode=returncode, stdout="", stderr=stderr))


class TestRepository:
    def test_from_config_timeout(self, tmp_path: Path) -> None:
        repo = Repository.from_config(tmp_path, Config(git=GitConfig(timeout_seconds=7.5)))
        assert repo.timeout == 7.5

    def test_ls_tree_command(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _FakeRun(Ok("listing"))
        monkeypatch.setattr(repository_mod, "run_process", fake)

        result = Repository(tmp_path, timeout=3).ls_tree("v1.0.0")

        assert result == Ok("listing")
        assert fake.calls == [["git", "-C", str(tmp_path), "ls-tree", "-r", "-z", "v1.0.0"]]
        assert fake.timeouts == [3]

    def test_diff_raw_command(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = _FakeRun(Ok(""))
        monkeypatch.setattr(repository_mod, "run_process", fake)

        Repository(tmp_path).diff_raw("a", "b")

        assert fake.calls[0][3:] == ["diff", "--raw", "-z", "-M", "--no-abbrev", "a", "b"]

    def test_error_carries_stderr(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            repository_mod, "run_process", _FakeRun(_failure("fatal: Not a valid object name x\n"))
        )

        result = Repository(tmp_path).ls_tree("x")

        assert isinstance(result, Err)
        assert result.error.command == "ls-tree"
        assert result.error.message == "fatal: Not a valid object name x"
        assert result.error.returncode == 128

    def test_error_fallback_message(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(repository_mod, "run_process", _FakeRun(_failure("", returncode=1)))

        result = Repository(tmp_path).rev_parse("nope")

        assert isinstance(result, Err)
        assert result.error.message == "unknown revision: nope"

    def test_rev_parse_strips(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(repository_mod, "run_process", _FakeRun(Ok("abc123\n")))
        assert Repository(tmp_path).rev_parse("HEAD") == Ok("abc123")

    def test_exists_outside_repo(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(repository_mod, "run_process", _FakeRun(_failure("not a git repository")))
        assert Repository(tmp_path).exists() is False

    def test_cat_blob(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[list[str]] = []

        def fake_run_bytes(cmd: list[str], cwd: Path, timeout: float | None = None) -> Result[bytes, ProcessError]:
            del cwd, timeout
            calls.append(cmd)
            return Ok(b"\x00\x01")

        monkeypatch.setattr(repository_mod, "run_bytes", fake_run_bytes)

        assert Repository(tmp_path).cat_blob("deadbeef") == Ok(b"\x00\x01")
        assert calls[0][3:] == ["cat-file", "-p", "deadbeef"]
