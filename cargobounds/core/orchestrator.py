"""Bounds orchestrator — the two operating modes.

``sanity_test`` checks that the versions inside each declared bound pass
the validator. ``minimize`` searches the widest passing range around each
declared bound. Neither mode persists anything to the manifest: callers run
them inside a ``RestorationGuard`` so every trial's rewrite is undone.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from tomlkit import TOMLDocument

from cargobounds.core.bisection import find_boundary
from cargobounds.core.constraint_filter import (
    NoMatchingVersionsError,
    filter_by_bound,
    locate_bound,
)
from cargobounds.core.manifest import (
    DependencyNotFoundError,
    dependency_names,
    normalize_dependency,
)
from cargobounds.core.manifest_store import ManifestStore
from cargobounds.core.sampler import sample_versions
from cargobounds.core.sanity_walker import walk_range
from cargobounds.core.semver import RequirementParseError, VersionParseError, VersionReq
from cargobounds.core.trial_runner import TrialRunner
from cargobounds.core.validator import Validator
from cargobounds.core.version_provider import (
    VersionFetchError,
    VersionProvider,
    fetch_versions,
)
from cargobounds.models.config import MinimizeConfig, TestConfig
from cargobounds.models.reports import (
    DependencyTestReport,
    MinimizeOutcome,
    MinimizeSummary,
    TestSummary,
    TrialRecord,
    TrialResult,
)
from cargobounds.models.versioning import Version
from cargobounds.monitor.renderer import TrialRenderer

logger = logging.getLogger(__name__)

# Problems that end the processing of one dependency but not the run.
DEPENDENCY_ERRORS = (
    RequirementParseError,
    VersionParseError,
    VersionFetchError,
    NoMatchingVersionsError,
)

ValidatorFactory = Callable[[str | None], Validator]


class BoundsOrchestrator:
    """Coordinates manifest, registry, validator and search engines.

    Parameters
    ----------
    store:
        The checked-out manifest.
    provider:
        Source of published versions.
    validator_factory:
        Builds the validator for a run from the operator's override
        command (None for the default check).
    renderer:
        Progress display.
    """

    def __init__(
        self,
        store: ManifestStore,
        provider: VersionProvider,
        validator_factory: ValidatorFactory,
        renderer: TrialRenderer | None = None,
    ) -> None:
        self.store = store
        self.provider = provider
        self._validator_factory = validator_factory
        self.renderer = renderer or TrialRenderer()

    # ------------------------------------------------------------------
    # Dependency selection
    # ------------------------------------------------------------------

    def select_dependencies(self, only: str | None = None) -> list[str]:
        """The dependencies to process: *only*, or every declared one."""
        names = dependency_names(self.store.document())
        if only is None:
            return names
        if only not in names:
            raise DependencyNotFoundError(f"dependency {only!r} not found")
        return [only]

    def _prepare(self, dependency: str) -> tuple[TOMLDocument, VersionReq]:
        """A fresh document from the snapshot, with *dependency* normalized."""
        document = self.store.document()
        bound = normalize_dependency(document, dependency)
        return document, bound

    def _fetch(self, dependency: str) -> list[Version]:
        with self.renderer.fetching(dependency):
            return fetch_versions(self.provider, dependency)

    # ------------------------------------------------------------------
    # Sanity test
    # ------------------------------------------------------------------

    def sanity_test(self, test_config: TestConfig) -> TestSummary:
        """Test sampled versions inside each declared bound."""
        runner = TrialRunner(
            self.store, self._validator_factory(test_config.command), self.renderer
        )
        reports = [
            self.sanity_test_dependency(runner, name, test_config)
            for name in self.select_dependencies(test_config.dependency)
        ]
        return TestSummary(reports=tuple(reports))

    def sanity_test_dependency(
        self, runner: TrialRunner, dependency: str, test_config: TestConfig
    ) -> DependencyTestReport:
        bound: VersionReq | None = None
        try:
            document, bound = self._prepare(dependency)
            self.renderer.dependency(dependency, bound.text)
            versions = sorted(filter_by_bound(self._fetch(dependency), bound))
            if not versions:
                raise NoMatchingVersionsError(f"no published version matches {bound.text!r}")
        except DEPENDENCY_ERRORS as exc:
            logger.error("Cannot test %s: %s", dependency, exc)
            self.renderer.error(dependency, str(exc))
            return DependencyTestReport(
                dependency=dependency,
                bound=bound.text if bound is not None else "",
                error=str(exc),
            )

        sample = sample_versions(versions, test_config.granularity)
        skipped = set(sample.skipped)
        trials: list[TrialRecord] = []
        for version in versions:
            if version in skipped:
                if test_config.print_skipped:
                    self.renderer.skipped(version)
                continue
            result = runner.run(document, dependency, version)
            trials.append(TrialRecord(dependency=dependency, version=version, result=result))

        return DependencyTestReport(
            dependency=dependency,
            bound=bound.text,
            trials=tuple(trials),
            skipped=sample.skipped,
        )

    # ------------------------------------------------------------------
    # Minimize
    # ------------------------------------------------------------------

    def minimize(self, minimize_config: MinimizeConfig) -> MinimizeSummary:
        """Find the widest passing range for each selected dependency."""
        runner = TrialRunner(
            self.store, self._validator_factory(minimize_config.command), self.renderer
        )
        outcomes = [
            self.minimize_dependency(runner, name, minimize_config)
            for name in self.select_dependencies(minimize_config.dependency)
        ]
        return MinimizeSummary(
            outcomes=tuple(outcomes), strict_sanity=minimize_config.strict_sanity
        )

    def minimize_dependency(
        self, runner: TrialRunner, dependency: str, minimize_config: MinimizeConfig
    ) -> MinimizeOutcome:
        bound: VersionReq | None = None
        try:
            document, bound = self._prepare(dependency)
            self.renderer.dependency(dependency, bound.text)
            versions = self._fetch(dependency)
            min_index, max_index = locate_bound(versions, bound)
        except DEPENDENCY_ERRORS as exc:
            logger.error("Cannot minimize %s: %s", dependency, exc)
            self.renderer.error(dependency, str(exc))
            return MinimizeOutcome(
                dependency=dependency,
                declared_bound=bound.text if bound is not None else "",
                error=str(exc),
            )

        def trial(version: Version) -> TrialResult:
            return runner.run(document, dependency, version)

        self.renderer.phase("Minimizing", versions[min_index])
        minimum = find_boundary(versions[: min_index + 1], TrialResult.SUCCESS, trial)
        self.renderer.found("Found min", minimum)

        self.renderer.phase("Maximizing", versions[max_index])
        maximum = find_boundary(versions[max_index:], TrialResult.FAIL, trial)
        self.renderer.found("Found max", maximum)

        outcome = MinimizeOutcome(
            dependency=dependency,
            declared_bound=bound.text,
            minimum=minimum,
            maximum=maximum,
        )
        self.renderer.discovered_bound(outcome.bound, sanity=not minimize_config.skip_sanity)
        if minimize_config.skip_sanity:
            return outcome

        sanity = walk_range(dependency, versions, minimum, maximum, trial)
        if not sanity.clean:
            self.renderer.anomalies(sanity.anomalies)
        return outcome.model_copy(update={"sanity": sanity})
