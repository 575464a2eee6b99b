"""Shared wiring for the CLI commands: one guarded session per invocation."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console

from cargobounds.core.manifest import DependencyNotFoundError, ManifestStructureError
from cargobounds.core.manifest_store import ManifestError, ManifestStore, RestorationGuard
from cargobounds.core.orchestrator import BoundsOrchestrator
from cargobounds.core.validator import CommandValidator
from cargobounds.core.version_provider import CratesIoClient
from cargobounds.monitor.renderer import TrialRenderer

# Errors that abort the whole run.
FATAL_ERRORS = (ManifestError, ManifestStructureError, DependencyNotFoundError)


@contextmanager
def bounds_session(manifest_path: Path, console: Console) -> Iterator[BoundsOrchestrator]:
    """Check the manifest out, yield an orchestrator, restore on every exit."""
    store = ManifestStore(manifest_path)
    workdir = store.path.parent

    def validator_factory(command: str | None) -> CommandValidator:
        return CommandValidator(command, cwd=workdir)

    with RestorationGuard(store), CratesIoClient() as provider:
        yield BoundsOrchestrator(
            store,
            provider,
            validator_factory,
            TrialRenderer(console=console),
        )
