"""
Undirected graph used to represent a weave.

The weave graph is an adjacency-list graph with stable integer vertex
handles.  Each vertex stores a :class:`~fiberweave.services.geometry.Point`
and a :class:`VertexType` tag; each undirected edge stores a single
boolean ``auxiliary`` flag that separates the structural weave edges
from capping edges.  The construction code in ``weave_build`` only ever
creates structural edges, the flag is carried so that downstream
consumers can add their own capping edges without a second graph type.

Vertex handles are dense indices into the arena (``0 .. n-1``) and are
never reused or renumbered, which lets intervals keep references to
vertices while edges are added and removed around them.

The module also defines :class:`MalformedTopologyError`, raised whenever
the weave bookkeeping detects input that violates the axis-aligned
assumptions of the algorithm.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .geometry import Point

logger = logging.getLogger(__name__)


class MalformedTopologyError(RuntimeError):
    """The fibers handed to the weave do not form a consistent topology.

    Raised when a crossing has no neighbour on one side within its
    interval, when two points on one interval share a coordinate, when an
    edge would join a vertex to itself and when the embedding finds a
    zero-length or doubly occupied edge direction.
    """


class VertexType(str, Enum):
    """Classification of weave vertices.

    ``CL`` vertices are interval end-points, i.e. real cutter-location
    points.  ``INT`` vertices are created from crossings only.  ``ADJ``
    and ``TWOADJ`` are reserved for downstream classification passes and
    are never assigned by this package.
    """

    CL = "CL"
    INT = "INT"
    ADJ = "ADJ"
    TWOADJ = "TWOADJ"


class WeaveGraph:
    """Adjacency-list graph with point-valued, typed vertices.

    Attributes:
        source_vertices: For a graph produced by :meth:`induced_subgraph`,
            maps each local vertex handle to the handle it had in the
            parent graph.  ``None`` for graphs built from scratch.
    """

    def __init__(self) -> None:
        self._positions: List[Point] = []
        self._types: List[VertexType] = []
        # neighbour handle -> auxiliary flag; insertion ordered
        self._adjacency: List[Dict[int, bool]] = []
        self._num_edges = 0
        self.source_vertices: Optional[List[int]] = None

    # ------------------------------------------------------------------
    # vertices

    def add_vertex(self, position: Point, vertex_type: VertexType) -> int:
        """Append a vertex and return its handle."""
        self._positions.append(position)
        self._types.append(vertex_type)
        self._adjacency.append({})
        return len(self._positions) - 1

    def num_vertices(self) -> int:
        return len(self._positions)

    def vertices(self) -> range:
        return range(len(self._positions))

    def position(self, v: int) -> Point:
        return self._positions[v]

    def vertex_type(self, v: int) -> VertexType:
        return self._types[v]

    def set_vertex_type(self, v: int, vertex_type: VertexType) -> None:
        self._types[v] = vertex_type

    def vertices_of_type(self, vertex_type: VertexType) -> List[int]:
        return [v for v, t in enumerate(self._types) if t == vertex_type]

    # ------------------------------------------------------------------
    # edges

    def add_edge(self, u: int, v: int, auxiliary: bool = False) -> bool:
        """Connect ``u`` and ``v``.

        The graph never holds parallel edges: adding an edge that already
        exists leaves the graph unchanged and returns ``False``.

        Raises:
            MalformedTopologyError: If ``u == v``.
        """
        if u == v:
            raise MalformedTopologyError(f"refusing to add self loop at vertex {u}")
        if v in self._adjacency[u]:
            return False
        self._adjacency[u][v] = auxiliary
        self._adjacency[v][u] = auxiliary
        self._num_edges += 1
        return True

    def remove_edge(self, u: int, v: int) -> bool:
        """Remove the edge between ``u`` and ``v`` if present."""
        if v not in self._adjacency[u]:
            return False
        del self._adjacency[u][v]
        del self._adjacency[v][u]
        self._num_edges -= 1
        return True

    def clear_vertex(self, v: int) -> None:
        """Remove every edge incident to ``v``."""
        for w in list(self._adjacency[v]):
            self.remove_edge(v, w)

    def has_edge(self, u: int, v: int) -> bool:
        return v in self._adjacency[u]

    def is_auxiliary(self, u: int, v: int) -> bool:
        return self._adjacency[u][v]

    def neighbors(self, v: int) -> List[int]:
        return list(self._adjacency[v])

    def degree(self, v: int) -> int:
        return len(self._adjacency[v])

    def num_edges(self) -> int:
        return self._num_edges

    def edges(self) -> Iterator[Tuple[int, int, bool]]:
        """Yield every undirected edge once as ``(u, v, auxiliary)``.

        Edges are reported from their lower handle, in vertex order and
        then in the order the edges were attached.
        """
        for u, adjacent in enumerate(self._adjacency):
            for v, auxiliary in adjacent.items():
                if u < v:
                    yield u, v, auxiliary

    # ------------------------------------------------------------------
    # copies

    def copy(self) -> "WeaveGraph":
        g = WeaveGraph()
        g._positions = list(self._positions)
        g._types = list(self._types)
        g._adjacency = [dict(adjacent) for adjacent in self._adjacency]
        g._num_edges = self._num_edges
        g.source_vertices = None if self.source_vertices is None else list(self.source_vertices)
        return g

    def induced_subgraph(self, vertices: Iterable[int]) -> "WeaveGraph":
        """Return a new graph holding only ``vertices`` and the edges between them.

        Vertices keep their relative order; the new graph's
        ``source_vertices`` records the handle each one had in the
        original graph this one descends from.
        """
        members = sorted(set(vertices))
        local = {v: i for i, v in enumerate(members)}
        g = WeaveGraph()
        for v in members:
            g.add_vertex(self._positions[v], self._types[v])
        for u, v, auxiliary in self.edges():
            if u in local and v in local:
                g.add_edge(local[u], local[v], auxiliary)
        if self.source_vertices is None:
            g.source_vertices = members
        else:
            g.source_vertices = [self.source_vertices[v] for v in members]
        return g

    def __repr__(self) -> str:
        return f"WeaveGraph(vertices={self.num_vertices()}, edges={self.num_edges()})"
