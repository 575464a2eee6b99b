"""One trial: pin a version, write the manifest, run the validator."""

from __future__ import annotations

import logging

from tomlkit import TOMLDocument

from cargobounds.core.manifest import pin_version
from cargobounds.core.manifest_store import ManifestStore
from cargobounds.core.validator import Validator
from cargobounds.models.reports import TrialResult
from cargobounds.models.versioning import Version
from cargobounds.monitor.renderer import TrialRenderer

logger = logging.getLogger(__name__)


class TrialRunner:
    """Runs single-version trials against the on-disk manifest.

    Each call fully determines the manifest written to disk from the
    document and version it is given, so repeating a call repeats its
    effect.

    Parameters
    ----------
    store:
        Where the pinned manifest is written.
    validator:
        The check that decides each trial.
    renderer:
        Progress display; a default console renderer if not provided.
    """

    def __init__(
        self,
        store: ManifestStore,
        validator: Validator,
        renderer: TrialRenderer | None = None,
    ) -> None:
        self._store = store
        self._validator = validator
        self._renderer = renderer or TrialRenderer()

    def run(self, document: TOMLDocument, dependency: str, version: Version) -> TrialResult:
        """Pin *dependency* to exactly *version* and validate.

        Raises ``ManifestStructureError`` if the dependency entry was not
        normalized to table form, and ``ManifestError`` if the manifest
        cannot be written. A validator failure is a ``FAIL`` result.
        """
        pin_version(document, dependency, version)
        self._store.write(document)

        with self._renderer.trial(version) as on_output:
            result = self._validator.validate(on_output)
        self._renderer.trial_finished(version, result)

        logger.info("Trial %s %s: %s", dependency, version, result.value)
        return result
