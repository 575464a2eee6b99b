"""Trial and run report models — outputs of the two operating modes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from cargobounds.models.versioning import Version


class TrialResult(str, Enum):
    """Outcome of one validator run against one pinned version."""

    SUCCESS = "success"
    FAIL = "fail"


class TrialRecord(BaseModel):
    """A single trial: which version was pinned and what it produced."""

    model_config = ConfigDict(frozen=True)

    dependency: str
    version: Version
    result: TrialResult


class DependencyTestReport(BaseModel):
    """Sanity-test results for one dependency."""

    model_config = ConfigDict(frozen=True)

    dependency: str
    bound: str
    trials: tuple[TrialRecord, ...] = ()
    skipped: tuple[Version, ...] = ()
    error: str = ""  # set when the dependency could not be processed

    @property
    def failed_versions(self) -> list[Version]:
        return [t.version for t in self.trials if t.result is TrialResult.FAIL]

    @property
    def failed(self) -> bool:
        return bool(self.error) or bool(self.failed_versions)


class TestSummary(BaseModel):
    """Aggregate of a sanity-test run across dependencies."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True)

    reports: tuple[DependencyTestReport, ...] = ()

    @property
    def failed_deps(self) -> int:
        return sum(1 for r in self.reports if r.failed)

    @property
    def failed_versions(self) -> int:
        return sum(len(r.failed_versions) for r in self.reports)

    @property
    def passed(self) -> bool:
        return self.failed_deps == 0

    def describe(self) -> str:
        return (
            f"{self.failed_deps} deps have failing versions in their bounds. "
            f"({self.failed_versions} versions failed in total)"
        )


class SanityReport(BaseModel):
    """Replay of a discovered range; failures are anomalies, not verdicts."""

    model_config = ConfigDict(frozen=True)

    trials: tuple[TrialRecord, ...] = ()

    @property
    def anomalies(self) -> list[Version]:
        return [t.version for t in self.trials if t.result is TrialResult.FAIL]

    @property
    def clean(self) -> bool:
        return not self.anomalies


class MinimizeOutcome(BaseModel):
    """The widest passing range found for one dependency."""

    model_config = ConfigDict(frozen=True)

    dependency: str
    declared_bound: str
    minimum: Version | None = None
    maximum: Version | None = None
    sanity: SanityReport | None = None
    error: str = ""

    @property
    def bound(self) -> str:
        """The discovered range as a Cargo requirement, e.g. ``>=1.0.0, <=1.4.0``."""
        if self.minimum is None or self.maximum is None:
            return ""
        return f">={self.minimum}, <={self.maximum}"


class MinimizeSummary(BaseModel):
    """Aggregate of a minimize run across dependencies."""

    model_config = ConfigDict(frozen=True)

    outcomes: tuple[MinimizeOutcome, ...] = ()
    strict_sanity: bool = False

    @property
    def failed_deps(self) -> int:
        failed = 0
        for outcome in self.outcomes:
            if outcome.error:
                failed += 1
            elif self.strict_sanity and outcome.sanity and not outcome.sanity.clean:
                failed += 1
        return failed

    @property
    def passed(self) -> bool:
        return self.failed_deps == 0
