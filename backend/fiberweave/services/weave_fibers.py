"""Split a fiber collection into the X- and Y-parallel sets used by the weave."""

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from .fiber import Fiber

logger = logging.getLogger(__name__)


def sort_fibers(fibers: Iterable[Fiber]) -> Tuple[List[Fiber], List[Fiber]]:
    """Return ``(xfibers, yfibers)`` drawn from ``fibers``.

    Only fibers parallel to the respective axis that carry at least one
    interval are kept.  Oblique and empty fibers are dropped silently.
    Both lists preserve the input order and reference the original
    fiber objects, so interval state set during construction is visible
    to the caller.
    """
    xfibers: List[Fiber] = []
    yfibers: List[Fiber] = []
    skipped = 0
    for f in fibers:
        if not f.intervals:
            skipped += 1
            continue
        if f.is_x_parallel():
            xfibers.append(f)
        elif f.is_y_parallel():
            yfibers.append(f)
        else:
            skipped += 1
    logger.debug(
        "sort_fibers: %d X-fibers, %d Y-fibers, %d skipped",
        len(xfibers), len(yfibers), skipped,
    )
    return xfibers, yfibers
