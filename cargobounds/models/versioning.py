"""Version and manifest snapshot models."""

from __future__ import annotations

from functools import total_ordering
from pathlib import Path

from pydantic import BaseModel, ConfigDict


def prerelease_key(pre: tuple[str, ...]) -> tuple:
    # A release ranks above any of its pre-releases; numeric identifiers
    # rank below alphanumeric ones.
    if not pre:
        return (1,)
    return (0, tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in pre))


@total_ordering
class Version(BaseModel):
    """A semantic version, immutable once parsed.

    Build metadata is carried for display but ignored for ordering and
    equality, as semver requires.
    """

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = ()
    build: str = ""

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre)

    @property
    def line(self) -> tuple[int, int]:
        """The (major, minor) pair used for sampling."""
        return (self.major, self.minor)

    def sort_key(self) -> tuple:
        return (self.major, self.minor, self.patch, prerelease_key(self.pre))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + self.build
        return text


class PublishedVersion(BaseModel):
    """One entry of a registry's version listing, before parsing."""

    model_config = ConfigDict(frozen=True)

    num: str
    yanked: bool = False


class ManifestSnapshot(BaseModel):
    """The full original text of the manifest, captured once per process."""

    model_config = ConfigDict(frozen=True)

    path: Path
    content: str
