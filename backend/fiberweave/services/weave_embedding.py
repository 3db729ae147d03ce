"""
Planar embedding and face traversal for weave graphs.

Every edge of a weave graph is axis-aligned, so the rotation system of a
vertex can be read straight off the compass: the neighbour to the North
comes first, then East, South and West.  This clockwise order is a valid
planar embedding only because the edges are axis-aligned; fibers at
arbitrary angles would need neighbours sorted by angle instead.

Faces are traced with the usual half-edge rule.  Arriving at ``v`` along
the half-edge ``u -> v``, the walk continues along ``v -> w`` where ``w``
follows ``u`` in the rotation of ``v``.  Every half-edge is used exactly
once, so the traversal always terminates.  The ``CL`` vertices met on a
face boundary, in walk order, form a closed tool-path loop.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from .weave_graph import MalformedTopologyError, VertexType, WeaveGraph

logger = logging.getLogger(__name__)

NORTH, EAST, SOUTH, WEST = range(4)

PlanarEmbedding = List[List[int]]


def _direction(graph: WeaveGraph, v: int, w: int) -> int:
    delta = graph.position(w) - graph.position(v)
    if delta.y > 0:
        return NORTH
    if delta.x > 0:
        return EAST
    if delta.y < 0:
        return SOUTH
    if delta.x < 0:
        return WEST
    raise MalformedTopologyError(f"zero-length edge between vertices {v} and {w}")


def build_embedding(graph: WeaveGraph) -> PlanarEmbedding:
    """Return the rotation system of ``graph``.

    Row ``v`` of the result lists the neighbours of ``v`` in North, East,
    South, West order, leaving out empty directions.

    Raises:
        MalformedTopologyError: If an edge has zero length or two edges
            of one vertex point in the same direction.
    """
    embedding: PlanarEmbedding = []
    for v in graph.vertices():
        slots: List[Optional[int]] = [None, None, None, None]
        for w in graph.neighbors(v):
            d = _direction(graph, v, w)
            if slots[d] is not None:
                raise MalformedTopologyError(
                    f"vertex {v} has two edges in direction {'NESW'[d]} (to {slots[d]} and {w})"
                )
            slots[d] = w
        embedding.append([w for w in slots if w is not None])
    return embedding


@dataclass
class Face:
    """One face of the embedded weave graph.

    Attributes:
        boundary: Vertices in the order the boundary walk leaves them.
        loop: The ``CL`` vertices of ``boundary``, in the same order.
    """

    boundary: List[int] = field(default_factory=list)
    loop: List[int] = field(default_factory=list)


def traverse_faces(graph: WeaveGraph, embedding: PlanarEmbedding) -> List[Face]:
    """Trace every face of ``graph`` under ``embedding``.

    Faces are started from half-edges in vertex order and then rotation
    order.  Isolated vertices belong to no face.
    """
    visited: Set[Tuple[int, int]] = set()
    faces: List[Face] = []
    for start in graph.vertices():
        for first in embedding[start]:
            if (start, first) in visited:
                continue
            face = Face()
            u, v = start, first
            while (u, v) not in visited:
                visited.add((u, v))
                face.boundary.append(u)
                if graph.vertex_type(u) == VertexType.CL:
                    face.loop.append(u)
                rotation = embedding[v]
                w = rotation[(rotation.index(u) + 1) % len(rotation)]
                u, v = v, w
            faces.append(face)
    logger.debug("traverse_faces: %d faces over %d half-edges", len(faces), len(visited))
    return faces
