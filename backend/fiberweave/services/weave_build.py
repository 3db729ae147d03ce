"""
Weave graph construction.

Given X-parallel and Y-parallel fibers, build the graph in which every
overlap between an X-interval and a Y-interval becomes a crossing
vertex.  The construction runs in a single pass over the X-fibers:

1. The end-points of each X-interval are added to the graph as ``CL``
   vertices the first time the interval is visited.
2. Each Y-fiber whose anchor lies within the X-interval's x-range is
   examined; each of its intervals that spans the X-fiber's y is a
   crossing.  The Y-interval's end-points are added on first use.
3. A fresh ``INT`` vertex is created at the crossing and inserted into
   the ordered vertex sets of both intervals.
4. Along each interval the new vertex is spliced between its predecessor
   and successor: the edge joining those two (if any) is removed and two
   edges through the crossing are added in its place.

The result is a graph of axis-aligned edges where every vertex has at
most one neighbour in each compass direction.  Per-crossing logging is
enabled via the ``WEAVE_DEBUG`` environment variable.
"""

from __future__ import annotations

import logging
import os
import time
from typing import List, Optional

from .fiber import Fiber, Interval
from .geometry import Point
from .weave_graph import VertexType, WeaveGraph

logger = logging.getLogger(__name__)


def _add_endpoints(graph: WeaveGraph, fiber: Fiber, interval: Interval, axis: str) -> None:
    """Add the end-points of ``interval`` as CL vertices, once per interval."""
    if interval.in_weave:
        return
    for t in (interval.lower, interval.upper):
        p = fiber.point(t)
        v = graph.add_vertex(p, VertexType.CL)
        interval.intersections.insert(v, getattr(p, axis))
    interval.in_weave = True


def _splice(graph: WeaveGraph, interval: Interval, v: int, coord: float) -> None:
    """Insert ``v`` into ``interval`` and reroute the edge it falls on through it."""
    index = interval.intersections.insert(v, coord)
    below, above = interval.intersections.neighbors(index)
    graph.remove_edge(below, above)
    graph.add_edge(below, v)
    graph.add_edge(above, v)


def build_weave_graph(
    xfibers: List[Fiber],
    yfibers: List[Fiber],
    graph: Optional[WeaveGraph] = None,
) -> WeaveGraph:
    """Build the weave graph for the given X- and Y-fibers.

    Args:
        xfibers: X-parallel fibers, typically from ``sort_fibers``.
        yfibers: Y-parallel fibers, typically from ``sort_fibers``.
        graph: Graph to add to.  A new graph is created when omitted.

    Returns:
        The populated graph.

    Raises:
        MalformedTopologyError: If a crossing coincides with a point
            already on one of its intervals, or has no vertex on one side
            of it.  The graph is left partially built in that case and
            should be discarded.
    """
    if graph is None:
        graph = WeaveGraph()
    debug = bool(os.getenv("WEAVE_DEBUG"))
    start = time.perf_counter()
    crossings = 0
    for xf in xfibers:
        for xi in xf.intervals:
            _add_endpoints(graph, xf, xi, "x")
            x_lo = xf.point(xi.lower).x
            x_hi = xf.point(xi.upper).x
            xmin, xmax = min(x_lo, x_hi), max(x_lo, x_hi)
            for yf in yfibers:
                if not (xmin <= yf.anchor.x <= xmax):
                    continue
                for yi in yf.intervals:
                    y_lo = yf.point(yi.lower).y
                    y_hi = yf.point(yi.upper).y
                    if not (min(y_lo, y_hi) <= xf.anchor.y <= max(y_lo, y_hi)):
                        continue
                    _add_endpoints(graph, yf, yi, "y")
                    position = Point(yf.anchor.x, xf.anchor.y, xf.anchor.z)
                    v = graph.add_vertex(position, VertexType.INT)
                    _splice(graph, xi, v, position.x)
                    _splice(graph, yi, v, position.y)
                    crossings += 1
                    if debug:
                        logger.debug(
                            "crossing %d at (%.6f, %.6f, %.6f): %r x %r",
                            v, position.x, position.y, position.z, xi, yi,
                        )
    elapsed = time.perf_counter() - start
    logger.info(
        "Weave built: %d X-fibers, %d Y-fibers, %d crossings, %d vertices, %d edges in %.3f s",
        len(xfibers), len(yfibers), crossings, graph.num_vertices(), graph.num_edges(), elapsed,
    )
    return graph
