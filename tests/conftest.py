"""Shared test fixtures for cargo-bounds."""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit
from rich.console import Console

from cargobounds.core.manifest_store import ManifestStore
from cargobounds.core.semver import parse_version
from cargobounds.models.reports import TrialResult
from cargobounds.models.versioning import PublishedVersion, Version
from cargobounds.monitor.renderer import TrialRenderer

MANIFEST = """\
[package]
name = "demo"
version = "0.1.0"
edition = "2021"

[dependencies]
foo = "^1.2.0"   # keep this comment
bar = { version = "0.3", features = ["std"] }

[dependencies.baz]
version = "~2.1"
default-features = false
"""


def v(text: str) -> Version:
    """Shorthand for parsing a version in tests."""
    return parse_version(text)


def vs(*texts: str) -> list[Version]:
    return [parse_version(t) for t in texts]


class FakeProvider:
    """In-memory version listing, keyed by crate name."""

    def __init__(self, listings: dict[str, list[str | tuple[str, bool]]]) -> None:
        self._listings = listings
        self.requests: list[str] = []

    def list_versions(self, name: str) -> list[PublishedVersion]:
        self.requests.append(name)
        entries = []
        for item in self._listings[name]:
            num, yanked = item if isinstance(item, tuple) else (item, False)
            entries.append(PublishedVersion(num=num, yanked=yanked))
        return entries


class ManifestValidator:
    """Decides each trial from the version pinned in the on-disk manifest.

    ``verdict`` maps (dependency, version) to a result; the dependency is
    the one whose ``version`` key holds an exact ``=`` pin.
    """

    def __init__(
        self,
        path: Path,
        verdict: Callable[[str, Version], TrialResult],
    ) -> None:
        self.path = path
        self.verdict = verdict
        self.calls: list[tuple[str, Version]] = []

    def validate(self, on_output=None) -> TrialResult:
        document = tomlkit.parse(self.path.read_text())
        for name, entry in document["dependencies"].items():
            if isinstance(entry, str):
                continue
            pinned = str(entry["version"])
            if pinned.startswith("="):
                version = parse_version(pinned[1:])
                self.calls.append((name, version))
                if on_output is not None:
                    on_output(f"   Checking {name} v{version}")
                return self.verdict(name, version)
        raise AssertionError("no pinned dependency in manifest")


def passes_between(low: str, high: str) -> Callable[[str, Version], TrialResult]:
    """A verdict that passes exactly the versions in ``[low, high]``."""
    lo, hi = parse_version(low), parse_version(high)

    def verdict(name: str, version: Version) -> TrialResult:
        return TrialResult.SUCCESS if lo <= version <= hi else TrialResult.FAIL

    return verdict


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    """A Cargo.toml with a bare-string, an inline-table and a full-table entry."""
    path = tmp_path / "Cargo.toml"
    path.write_text(MANIFEST)
    return path


@pytest.fixture
def store(manifest_path: Path) -> ManifestStore:
    """A ManifestStore already checked out."""
    store = ManifestStore(manifest_path)
    store.checkout()
    return store


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def renderer(output: io.StringIO) -> TrialRenderer:
    """A renderer writing plain text into ``output``."""
    return TrialRenderer(Console(file=output, width=120, color_system=None))
