from __future__ import annotations

import re
from dataclasses import dataclass

from relkit.core.result import Err, Ok, Result

SNAPSHOT_QUALIFIER = "-SNAPSHOT"

_VERSION_RE = re.compile(
    r"^(?P<numbers>\d+(?:\.\d+)*)(?P<qualifier>[-+][0-9A-Za-z][0-9A-Za-z.+-]*)?$"
)


@dataclass(frozen=True, slots=True)
class VersionParseError:
    text: str
    message: str


@dataclass(frozen=True, slots=True)
class Version:
    """Numeric components plus an optional raw qualifier ("-SNAPSHOT", "-RC1")."""

    components: tuple[int, ...]
    qualifier: str | None = None

    @property
    def string(self) -> str:
        base = ".".join(str(c) for c in self.components)
        return base + (self.qualifier or "")

    def __str__(self) -> str:
        return self.string

    def without_qualifier(self) -> Version:
        return Version(self.components, None)

    def with_qualifier(self, qualifier: str) -> Version:
        return Version(self.components, qualifier or None)

    def bump_last(self) -> Version:
        *head, last = self.components
        return Version((*head, last + 1), None)


def parse(text: str) -> Result[Version, VersionParseError]:
    s = text.strip()
    if not s:
        return Err(VersionParseError(text=text, message="version is empty"))
    m = _VERSION_RE.match(s)
    if m is None:
        return Err(VersionParseError(text=text, message=f"invalid version format: {s!r}"))
    components = tuple(int(part) for part in m.group("numbers").split("."))
    return Ok(Version(components, m.group("qualifier")))


def propose_release(current: Version) -> Version:
    """Release version for a development version: the qualifier is dropped."""
    return current.without_qualifier()


def propose_next(release: Version, qualifier: str = SNAPSHOT_QUALIFIER) -> Version:
    """Next development version: bump the last component, mark as snapshot."""
    return release.bump_last().with_qualifier(qualifier)


def is_snapshot(text: str, qualifier: str = SNAPSHOT_QUALIFIER) -> bool:
    return text.strip().upper().endswith(qualifier.upper())
