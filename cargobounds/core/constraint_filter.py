"""Restrict a version listing to the versions a declared bound accepts."""

from __future__ import annotations

from collections.abc import Iterable

from cargobounds.core.semver import VersionReq
from cargobounds.models.versioning import Version


class NoMatchingVersionsError(ValueError):
    """Raised when a declared bound matches none of the published versions."""


def filter_by_bound(versions: Iterable[Version], bound: VersionReq) -> list[Version]:
    """Return the versions matched by *bound*, in their input order.

    Callers sort separately.
    """
    return [v for v in versions if bound.matches(v)]


def locate_bound(sorted_versions: list[Version], bound: VersionReq) -> tuple[int, int]:
    """Return the indices of the lowest and highest versions *bound* matches.

    Raises
    ------
    NoMatchingVersionsError
        If no version in the listing satisfies the bound.
    """
    indices = [i for i, v in enumerate(sorted_versions) if bound.matches(v)]
    if not indices:
        raise NoMatchingVersionsError(f"no published version matches {bound.text!r}")
    return indices[0], indices[-1]
