"""Granularity-based sampling of the versions inside a bound.

Testing every release of every dependency is slow, so only one version per
release line is tested. The newest version is always tested so the declared
upper bound is always validated.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from cargobounds.models.config import Granularity
from cargobounds.models.versioning import Version

logger = logging.getLogger(__name__)


class Sample(BaseModel):
    """The outcome of one sampling pass: versions to test and versions skipped."""

    model_config = ConfigDict(frozen=True)

    selected: tuple[Version, ...] = ()
    skipped: tuple[Version, ...] = ()


def _same_line(
    version: Version,
    last: tuple[int, int] | None,
    granularity: Granularity,
) -> bool:
    """Whether *version* belongs to the release line last tested."""
    if last is None or version.major != last[0]:
        return False
    if granularity is Granularity.PATCH:
        return False
    if granularity is Granularity.MAJOR and version.major != 0:
        return True
    return version.minor == last[1]


def sample_versions(
    sorted_versions: Sequence[Version],
    granularity: Granularity = Granularity.MAJOR,
) -> Sample:
    """Pick the versions to test from an ascending version list.

    A version is selected when it opens a new major line, or a new minor
    line when the granularity (or a 0.x major) calls for it, or when it is
    the highest version in the list. Everything else is skipped.
    """
    if not sorted_versions:
        return Sample()

    newest = sorted_versions[-1]
    selected: list[Version] = []
    skipped: list[Version] = []
    last: tuple[int, int] | None = None

    for version in sorted_versions:
        if version != newest and _same_line(version, last, granularity):
            skipped.append(version)
            continue
        selected.append(version)
        last = version.line

    logger.debug(
        "Sampled %d of %d versions at %s granularity",
        len(selected), len(sorted_versions), granularity.value,
    )
    return Sample(selected=tuple(selected), skipped=tuple(skipped))
