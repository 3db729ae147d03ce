"""
Conversions between weave objects and their data representations.

- ``fibers_from_inputs`` turns validated :class:`FiberInput` models into
  :class:`Fiber` objects ready to be added to a weave.
- ``weave_to_response`` packs the points, edges and loops of a weave
  into a :class:`WeaveResponse`.
- ``weave_to_arrays`` returns the same geometry as numpy arrays for
  numerical post-processing and plotting.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

import numpy as np

from ..api.models import FiberInput, WeaveEdge, WeaveLoop, WeavePoint, WeaveResponse
from .fiber import Fiber, Interval
from .geometry import Point
from .weave import Weave

logger = logging.getLogger(__name__)


def _point(p: WeavePoint) -> Point:
    return Point(p.x, p.y, p.z)


def _weave_point(p: Point) -> WeavePoint:
    return WeavePoint(x=p.x, y=p.y, z=p.z)


def fibers_from_inputs(inputs: Iterable[FiberInput]) -> List[Fiber]:
    """Build fibers from their data description.

    Raises:
        ValueError: If a fiber has coincident end-points or an interval
            has its bounds reversed.
    """
    fibers: List[Fiber] = []
    for spec in inputs:
        fiber = Fiber(_point(spec.p1), _point(spec.p2))
        for i in spec.intervals:
            fiber.add_interval(Interval(i.lower, i.upper))
        fibers.append(fiber)
    return fibers


def weave_to_response(weave: Weave) -> WeaveResponse:
    """Describe ``weave`` as a :class:`WeaveResponse`.

    Loops are only present after :meth:`Weave.face_traverse` has run.
    """
    return WeaveResponse(
        clPoints=[_weave_point(p) for p in weave.cl_points()],
        intPoints=[_weave_point(p) for p in weave.int_points()],
        edges=[WeaveEdge(p1=_weave_point(a), p2=_weave_point(b)) for a, b in weave.edges()],
        auxiliaryEdges=[WeaveEdge(p1=_weave_point(a), p2=_weave_point(b)) for a, b in weave.cl_edges()],
        loops=[WeaveLoop(points=[_weave_point(p) for p in loop]) for loop in weave.loops()],
        numVertices=weave.graph.num_vertices(),
        numEdges=weave.graph.num_edges(),
    )


def weave_to_arrays(weave: Weave) -> Dict[str, np.ndarray]:
    """Return the weave geometry as numpy arrays.

    Returns:
        A dict with ``cl_points`` of shape (N, 3), ``int_points`` of shape
        (M, 3) and ``edges`` of shape (E, 2, 3) holding the structural
        edges.
    """
    cl = np.array([p.as_tuple() for p in weave.cl_points()], dtype=float).reshape(-1, 3)
    internal = np.array([p.as_tuple() for p in weave.int_points()], dtype=float).reshape(-1, 3)
    edges = np.array(
        [(a.as_tuple(), b.as_tuple()) for a, b in weave.edges()], dtype=float
    ).reshape(-1, 2, 3)
    logger.debug(
        "weave_to_arrays: %d CL points, %d INT points, %d edges",
        len(cl), len(internal), len(edges),
    )
    return {"cl_points": cl, "int_points": internal, "edges": edges}
