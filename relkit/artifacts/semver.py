"""Semantic versions as embedded in artifact archive names.

Precedence follows semver 2.0: major.minor.patch compared numerically, a
pre-release sorts before the release it precedes, build metadata is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)

type PrereleaseId = int | str
type PrecedenceKey = tuple[int, int, int, int, tuple[tuple[int, int, str], ...]]


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[PrereleaseId, ...] = ()
    build: tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def precedence_key(self) -> PrecedenceKey:
        """Sort key implementing semver precedence.

        Numeric identifiers sort before alphanumeric ones, and a release sorts
        after all of its pre-releases.
        """
        ids = tuple(
            (0, ident, "") if isinstance(ident, int) else (1, 0, ident)
            for ident in self.prerelease
        )
        return (self.major, self.minor, self.patch, 0 if self.prerelease else 1, ids)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(str(i) for i in self.prerelease)
        return text


def parse_version(text: str) -> SemVer | None:
    """Parse "1.2.3", "v1.2.3", "1.2.3-4", "1.2.3-beta.1+build.7"; None if invalid."""
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None

    prerelease: tuple[PrereleaseId, ...] = ()
    if m.group(4):
        prerelease = tuple(int(p) if p.isdigit() else p for p in m.group(4).split("."))

    build: tuple[str, ...] = tuple(m.group(5).split(".")) if m.group(5) else ()
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)), prerelease, build)
