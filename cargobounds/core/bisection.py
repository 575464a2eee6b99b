"""Binary search for the boundary between passing and failing versions.

Compatibility is assumed monotone over the searched slice: every version on
one side of the boundary fails and every version on the other side passes.
The sanity walker re-checks that assumption afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from cargobounds.models.reports import TrialResult
from cargobounds.models.versioning import Version

logger = logging.getLogger(__name__)

Trial = Callable[[Version], TrialResult]


def find_boundary(
    sorted_versions: Sequence[Version],
    target_edge: TrialResult,
    trial: Trial,
) -> Version:
    """Return the boundary version of an ascending slice.

    ``target_edge`` names the result expected at the *top* of the slice:

    - ``SUCCESS``: failures below, passes above. Returns the lowest version
      that passes (used to find the minimum of a range).
    - ``FAIL``: passes below, failures above. Returns the highest version
      that passes (used to find the maximum of a range).

    The search narrows ``[low, top]`` until the two are adjacent, moving the
    bound on the side matching ``target_edge`` to each midpoint, then
    re-tests both ends. If both ends agree, the low end is returned for a
    ``SUCCESS`` edge and the top end for a ``FAIL`` edge.

    A single-version slice returns that version without a trial.
    """
    if not sorted_versions:
        raise ValueError("cannot search an empty version list")
    if len(sorted_versions) == 1:
        return sorted_versions[0]

    low = 0
    top = len(sorted_versions) - 1

    while top - low > 1:
        center = (low + top) // 2
        result = trial(sorted_versions[center])
        if result is target_edge:
            top = center
        else:
            low = center
        logger.debug(
            "Bisect %s: narrowed to [%s, %s]",
            target_edge.value, sorted_versions[low], sorted_versions[top],
        )

    low_result = trial(sorted_versions[low])
    top_result = trial(sorted_versions[top])

    if low_result is top_result:
        # Both ends agree, so the slice held no transition.
        boundary = top if target_edge is TrialResult.FAIL else low
    else:
        boundary = low if target_edge is TrialResult.FAIL else top

    logger.debug("Bisect %s: boundary at %s", target_edge.value, sorted_versions[boundary])
    return sorted_versions[boundary]
