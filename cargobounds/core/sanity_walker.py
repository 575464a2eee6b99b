"""Replay trials across a discovered range to catch non-monotone results.

Bisection only probes O(log n) versions. A regression isolated inside the
range would go unseen, so one version per (major, minor) line between the
minimum and the maximum is tested again. Failures are reported as
anomalies; the discovered range itself is left unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from cargobounds.models.reports import SanityReport, TrialRecord, TrialResult
from cargobounds.models.versioning import Version

logger = logging.getLogger(__name__)


def sanity_candidates(
    sorted_versions: Sequence[Version],
    minimum: Version,
    maximum: Version,
) -> list[Version]:
    """The first version of every release line in ``[minimum, maximum]``, plus maximum."""
    candidates: list[Version] = []
    last_line: tuple[int, int] | None = None
    for version in sorted_versions:
        if version < minimum:
            continue
        if version > maximum:
            break
        if version.line != last_line or version == maximum:
            candidates.append(version)
            last_line = version.line
    return candidates


def walk_range(
    dependency: str,
    sorted_versions: Sequence[Version],
    minimum: Version,
    maximum: Version,
    trial: Callable[[Version], TrialResult],
) -> SanityReport:
    """Test every candidate in ascending order and collect the results."""
    records = [
        TrialRecord(dependency=dependency, version=version, result=trial(version))
        for version in sanity_candidates(sorted_versions, minimum, maximum)
    ]
    report = SanityReport(trials=tuple(records))
    if not report.clean:
        logger.warning(
            "Non-monotone results for %s inside %s..%s: %s",
            dependency, minimum, maximum, ", ".join(str(v) for v in report.anomalies),
        )
    return report
