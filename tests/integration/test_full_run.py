"""End-to-end integration tests — guarded runs against a real shell validator.

These tests exercise the RestorationGuard, ManifestStore, BoundsOrchestrator,
CommandValidator, sampler, bisection and sanity walker working together on a
manifest in a temporary directory. Only the registry is faked.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cargobounds.core.manifest_store import ManifestStore, RestorationGuard
from cargobounds.core.orchestrator import BoundsOrchestrator
from cargobounds.core.validator import CommandValidator
from cargobounds.models.config import Granularity, MinimizeConfig, TestConfig
from conftest import FakeProvider, v

# CRLF line endings and a non-ASCII comment must survive byte-for-byte.
ORIGINAL = (
    "[package]\r\n"
    'name = "demo"\r\n'
    'version = "0.1.0"\r\n'
    "\r\n"
    "[dependencies]\r\n"
    'foo = "1.2"   # garantía\r\n'
    'bar = { version = "0.3", features = ["std"] }\r\n'
).encode("utf-8")

LISTINGS = {
    "foo": ["1.0.0", "1.2.0", "1.2.5", "1.3.0", "1.5.0", "2.0.0"],
    "bar": ["0.2.0", "0.3.0", "0.3.1", ("0.3.2", True), "0.4.0"],
}

# Logs every pin it sees; rejects any 2.x pin.
CHECK = "grep -o '\"=[0-9][0-9.]*\"' Cargo.toml >> trials.log; ! grep -q '\"=2\\.' Cargo.toml"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "Cargo.toml").write_bytes(ORIGINAL)
    return tmp_path


def _orchestrator(workspace: Path, store: ManifestStore, renderer) -> BoundsOrchestrator:
    def factory(command):
        return CommandValidator(command, cwd=workspace)

    return BoundsOrchestrator(store, FakeProvider(LISTINGS), factory, renderer)


def _trial_log(workspace: Path) -> list[str]:
    return (workspace / "trials.log").read_text().split()


class TestFullRun:
    """Full guarded runs: every trial is pinned, the manifest comes back intact."""

    def test_sanity_test_passes_and_restores(self, workspace, renderer):
        store = ManifestStore(workspace / "Cargo.toml")
        with RestorationGuard(store):
            summary = _orchestrator(workspace, store, renderer).sanity_test(
                TestConfig(granularity=Granularity.PATCH, command=CHECK)
            )

        assert summary.passed
        foo, bar = summary.reports
        assert [t.version for t in foo.trials] == [v("1.2.0"), v("1.2.5"), v("1.3.0"), v("1.5.0")]
        # The yanked 0.3.2 is never offered.
        assert [t.version for t in bar.trials] == [v("0.3.0"), v("0.3.1")]
        assert _trial_log(workspace) == [
            '"=1.2.0"', '"=1.2.5"', '"=1.3.0"', '"=1.5.0"', '"=0.3.0"', '"=0.3.1"'
        ]
        assert (workspace / "Cargo.toml").read_bytes() == ORIGINAL

    def test_minimize_discovers_range_and_restores(self, workspace, renderer):
        store = ManifestStore(workspace / "Cargo.toml")
        with RestorationGuard(store):
            summary = _orchestrator(workspace, store, renderer).minimize(
                MinimizeConfig(dependency="foo", command=CHECK)
            )

        (outcome,) = summary.outcomes
        assert outcome.bound == ">=1.0.0, <=1.5.0"
        assert outcome.sanity is not None and outcome.sanity.clean
        # Two probes per boundary, then one per release line in the range.
        assert len(_trial_log(workspace)) == 8
        assert (workspace / "Cargo.toml").read_bytes() == ORIGINAL

    def test_each_trial_pins_exactly_one_dependency(self, workspace, renderer):
        store = ManifestStore(workspace / "Cargo.toml")
        with RestorationGuard(store):
            _orchestrator(workspace, store, renderer).sanity_test(TestConfig(command=CHECK))

        # grep -o prints one line per pin, so one line per trial means one pin.
        log = _trial_log(workspace)
        assert len(log) == len(set(log))

    def test_failing_versions_are_reported(self, workspace, renderer):
        store = ManifestStore(workspace / "Cargo.toml")
        with RestorationGuard(store):
            summary = _orchestrator(workspace, store, renderer).sanity_test(
                TestConfig(
                    granularity=Granularity.MINOR,
                    command="! grep -q '\"=0\\.3\\.1\"' Cargo.toml",
                )
            )

        assert not summary.passed
        assert summary.failed_deps == 1
        assert summary.reports[1].failed_versions == [v("0.3.1")]
        assert (workspace / "Cargo.toml").read_bytes() == ORIGINAL

    def test_default_check_command_missing(self, workspace, renderer):
        """A check command that cannot start fails every trial without crashing."""
        store = ManifestStore(workspace / "Cargo.toml")

        def factory(command):
            return CommandValidator(
                command, cwd=workspace, default_command=("cargo-bounds-no-such-binary",)
            )

        with RestorationGuard(store):
            summary = BoundsOrchestrator(
                store, FakeProvider(LISTINGS), factory, renderer
            ).sanity_test(TestConfig(dependency="bar"))

        assert summary.failed_versions == 2
        assert (workspace / "Cargo.toml").read_bytes() == ORIGINAL
