"""cargo-bounds data models — all Pydantic v2, all frozen (immutable)."""

from cargobounds.models.config import Granularity, MinimizeConfig, TestConfig
from cargobounds.models.reports import (
    DependencyTestReport,
    MinimizeOutcome,
    MinimizeSummary,
    SanityReport,
    TestSummary,
    TrialRecord,
    TrialResult,
)
from cargobounds.models.versioning import ManifestSnapshot, PublishedVersion, Version

__all__ = [
    # versioning
    "Version",
    "PublishedVersion",
    "ManifestSnapshot",
    # config
    "Granularity",
    "TestConfig",
    "MinimizeConfig",
    # reports
    "TrialResult",
    "TrialRecord",
    "DependencyTestReport",
    "TestSummary",
    "SanityReport",
    "MinimizeOutcome",
    "MinimizeSummary",
]
