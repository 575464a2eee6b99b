"""Adversarial tests — interrupted and crashing runs.

These tests verify that:
1. A SIGINT or SIGTERM mid-bisection restores the manifest and exits 1
2. A check still running when the signal arrives is killed, not orphaned
3. An exception raised by a validator restores the manifest and propagates
4. A manifest edited by the validator is still restored to the snapshot
5. Restoration happens exactly once, however the run ends
"""

from __future__ import annotations

import os
import signal
import threading
from pathlib import Path

import pytest

from cargobounds.core.manifest_store import ManifestStore, RestorationGuard
from cargobounds.core.orchestrator import BoundsOrchestrator
from cargobounds.core.validator import CommandValidator
from cargobounds.models.config import MinimizeConfig, TestConfig
from cargobounds.models.reports import TrialResult
from conftest import MANIFEST, FakeProvider

LISTINGS = {
    "foo": ["1.0.0", "1.1.0", "1.2.0", "1.2.5", "1.3.0", "1.5.0", "1.6.0", "1.7.0", "2.0.0"],
    "bar": ["0.3.0", "0.3.1"],
    "baz": ["2.1.0", "2.1.3"],
}


class SabotagingValidator:
    """Passes its first trials, then sabotages the run on the next one."""

    def __init__(self, path: Path, after: int, sabotage) -> None:
        self.path = path
        self.after = after
        self.sabotage = sabotage
        self.pinned: list[str] = []

    def validate(self, on_output=None) -> TrialResult:
        self.pinned.append(self.path.read_text())
        if len(self.pinned) > self.after:
            self.sabotage()
        return TrialResult.SUCCESS


def _run_minimize(manifest_path: Path, validator, renderer) -> None:
    store = ManifestStore(manifest_path)
    orchestrator = BoundsOrchestrator(
        store, FakeProvider(LISTINGS), lambda command: validator, renderer
    )
    with RestorationGuard(store):
        orchestrator.minimize(MinimizeConfig(dependency="foo"))


class TestSignalDuringSearch:
    """A signal arriving during bisection must leave the original manifest."""

    @pytest.mark.parametrize("signum", [signal.SIGINT, signal.SIGTERM])
    def test_signal_restores_and_exits(self, manifest_path, renderer, signum):
        validator = SabotagingValidator(
            manifest_path, after=3, sabotage=lambda: signal.raise_signal(signum)
        )
        with pytest.raises(SystemExit) as excinfo:
            _run_minimize(manifest_path, validator, renderer)

        assert excinfo.value.code == 1
        assert manifest_path.read_text() == MANIFEST
        # The run really was mid-search: the manifest held a pin when interrupted.
        assert '"=' in validator.pinned[-1]

    def test_signal_kills_running_check(self, manifest_path, tmp_path):
        validator = CommandValidator(
            "echo $$ > pid; echo checking >&2; exec sleep 30", cwd=tmp_path
        )
        main_thread = threading.main_thread().ident
        timer = threading.Timer(
            0.5, signal.pthread_kill, args=(main_thread, signal.SIGTERM)
        )

        with pytest.raises(SystemExit) as excinfo:
            with RestorationGuard(ManifestStore(manifest_path)):
                timer.start()
                validator.validate()
        timer.join()

        assert excinfo.value.code == 1
        assert manifest_path.read_text() == MANIFEST
        pid = int((tmp_path / "pid").read_text())
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)

    def test_previous_handler_back_after_signal(self, manifest_path, renderer):
        before = signal.getsignal(signal.SIGINT)
        validator = SabotagingValidator(
            manifest_path, after=1, sabotage=lambda: signal.raise_signal(signal.SIGINT)
        )
        with pytest.raises(SystemExit):
            _run_minimize(manifest_path, validator, renderer)
        assert signal.getsignal(signal.SIGINT) is before


class TestCrashDuringRun:
    """Exceptions escaping a trial must not leave a pinned manifest behind."""

    def test_validator_exception_propagates_after_restore(self, manifest_path, renderer):
        def explode():
            raise RuntimeError("validator crashed")

        validator = SabotagingValidator(manifest_path, after=2, sabotage=explode)
        with pytest.raises(RuntimeError, match="validator crashed"):
            _run_minimize(manifest_path, validator, renderer)
        assert manifest_path.read_text() == MANIFEST

    def test_keyboard_interrupt_restores(self, manifest_path, renderer):
        def interrupt():
            raise KeyboardInterrupt

        validator = SabotagingValidator(manifest_path, after=0, sabotage=interrupt)
        with pytest.raises(KeyboardInterrupt):
            _run_minimize(manifest_path, validator, renderer)
        assert manifest_path.read_text() == MANIFEST

    def test_validator_rewriting_manifest_is_undone(self, manifest_path, renderer):
        def vandalize():
            manifest_path.write_text("[dependencies]\nfoo = '9'\n")

        validator = SabotagingValidator(manifest_path, after=0, sabotage=vandalize)
        store = ManifestStore(manifest_path)
        orchestrator = BoundsOrchestrator(
            store, FakeProvider(LISTINGS), lambda command: validator, renderer
        )
        with RestorationGuard(store):
            orchestrator.sanity_test(TestConfig(dependency="foo"))

        assert manifest_path.read_text() == MANIFEST

    def test_manifest_deleted_mid_run_is_recreated(self, manifest_path, renderer):
        validator = SabotagingValidator(
            manifest_path, after=0, sabotage=lambda: manifest_path.unlink()
        )
        store = ManifestStore(manifest_path)
        orchestrator = BoundsOrchestrator(
            store, FakeProvider(LISTINGS), lambda command: validator, renderer
        )
        with RestorationGuard(store) as guarded:
            orchestrator.sanity_test(TestConfig(dependency="bar"))
            assert guarded is store

        assert manifest_path.read_text() == MANIFEST
