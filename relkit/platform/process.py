"""Subprocess execution with Result-based error handling.

Usage:
    result = run(["git", "ls-tree", "-r", "HEAD"], cwd=repo_path)
    match result:
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_bytes"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran or timed out).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def _completed(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
    *,
    text: bool,
) -> Result[subprocess.CompletedProcess[str] | subprocess.CompletedProcess[bytes], ProcessError]:
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=text,
            # git emits paths as UTF-8 regardless of locale
            encoding="utf-8" if text else None,
            errors="replace" if text else None,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        stdout = proc.stdout if text else proc.stdout.decode("utf-8", "replace")
        stderr = proc.stderr if text else proc.stderr.decode("utf-8", "replace")
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=stdout,
                stderr=stderr,
            )
        )
    return Ok(proc)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its decoded stdout or an error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).
    """
    result = _completed(cmd, cwd, env, timeout, text=True)
    if isinstance(result, Err):
        return result
    return Ok(str(result.value.stdout))


def run_bytes(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[bytes, ProcessError]:
    """Execute a command and return raw stdout.

    Used for blob content, which must be written out byte-for-byte.
    """
    result = _completed(cmd, cwd, env, timeout, text=False)
    if isinstance(result, Err):
        return result
    out = result.value.stdout
    return Ok(out if isinstance(out, bytes) else out.encode("utf-8"))
