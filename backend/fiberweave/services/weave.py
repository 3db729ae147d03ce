"""
The weave: fibers in, tool-path topology out.

:class:`Weave` collects the fibers produced by the upstream sampling
passes and ties the weave services together::

    w = Weave()
    for f in fibers:
        w.add_fiber(f)
    w.build()
    for part in w.split_components():
        part.face_traverse()
        paths = part.loops()

``build`` sorts the fibers into X- and Y-sets and constructs the graph,
``split_components`` breaks the graph into independent regions and
``face_traverse`` embeds a region and traces its faces into ordered
loops of contact points.  The query helpers return plain positions for
plotting or for the export layer in ``weave_export``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .fiber import Fiber
from .geometry import Point
from .weave_build import build_weave_graph
from .weave_components import split_components
from .weave_embedding import PlanarEmbedding, build_embedding, traverse_faces
from .weave_fibers import sort_fibers
from .weave_graph import MalformedTopologyError, VertexType, WeaveGraph

logger = logging.getLogger(__name__)


class Weave:
    """Fibers and the weave graph built from them.

    Attributes:
        fibers: Every fiber added with :meth:`add_fiber`.
        xfibers: X-parallel fibers with intervals, set by :meth:`sort_fibers`.
        yfibers: Y-parallel fibers with intervals, set by :meth:`sort_fibers`.
        graph: The weave graph.  Owned exclusively by this weave.
    """

    def __init__(self, graph: Optional[WeaveGraph] = None) -> None:
        self.fibers: List[Fiber] = []
        self.xfibers: List[Fiber] = []
        self.yfibers: List[Fiber] = []
        self.graph = graph if graph is not None else WeaveGraph()
        self._built = graph is not None
        self._loops: List[List[int]] = []
        self._failure: Optional[MalformedTopologyError] = None

    def add_fiber(self, fiber: Fiber) -> None:
        self.fibers.append(fiber)

    def sort_fibers(self) -> None:
        self.xfibers, self.yfibers = sort_fibers(self.fibers)

    def build(self) -> WeaveGraph:
        """Sort the fibers and build the weave graph.

        The graph is built once; calling ``build`` again returns the
        existing graph unchanged.  Construction is all-or-nothing: on
        failure the weave keeps its empty graph, the intervals touched by
        the attempt are reset, and every later ``build`` raises again
        without doing any work.

        Raises:
            MalformedTopologyError: If the fibers are inconsistent.  See
                :func:`~fiberweave.services.weave_build.build_weave_graph`.
        """
        if self._failure is not None:
            raise MalformedTopologyError(
                f"weave build already failed: {self._failure}"
            ) from self._failure
        if self._built:
            logger.warning("Weave already built; ignoring repeated build()")
            return self.graph
        self.sort_fibers()
        if not self.xfibers or not self.yfibers:
            logger.warning(
                "Weave has %d X-fibers and %d Y-fibers; no crossings possible",
                len(self.xfibers), len(self.yfibers),
            )
        fresh = [i for f in self.xfibers + self.yfibers for i in f.intervals if not i.in_weave]
        try:
            graph = build_weave_graph(self.xfibers, self.yfibers)
        except MalformedTopologyError as exc:
            for interval in fresh:
                interval.reset()
            self._failure = exc
            logger.error("Weave build failed: %s", exc)
            raise
        self.graph = graph
        self._built = True
        return self.graph

    def split_components(self) -> List["Weave"]:
        """Return one new weave per connected component of the graph.

        Each sub-weave owns an independent graph containing only its own
        vertices and edges; this weave is left untouched.
        """
        return [Weave(graph=part) for part in split_components(self.graph)]

    def embedding(self) -> PlanarEmbedding:
        return build_embedding(self.graph)

    def face_traverse(self) -> List[List[Point]]:
        """Trace the faces of the graph and store their CL loops.

        Faces without any CL vertex do not yield a loop.

        Returns:
            The loops as lists of positions, see :meth:`loops`.
        """
        faces = traverse_faces(self.graph, self.embedding())
        self._loops = [face.loop for face in faces if face.loop]
        logger.info("Face traversal: %d faces, %d loops", len(faces), len(self._loops))
        return self.loops()

    # ------------------------------------------------------------------
    # queries

    def _points_of_type(self, vertex_type: VertexType) -> List[Point]:
        return [self.graph.position(v) for v in self.graph.vertices_of_type(vertex_type)]

    def cl_points(self) -> List[Point]:
        return self._points_of_type(VertexType.CL)

    def int_points(self) -> List[Point]:
        return self._points_of_type(VertexType.INT)

    def adj_points(self) -> List[Point]:
        return self._points_of_type(VertexType.ADJ)

    def two_adj_points(self) -> List[Point]:
        return self._points_of_type(VertexType.TWOADJ)

    def _edges(self, auxiliary: bool) -> List[Tuple[Point, Point]]:
        return [
            (self.graph.position(u), self.graph.position(v))
            for u, v, aux in self.graph.edges()
            if aux == auxiliary
        ]

    def edges(self) -> List[Tuple[Point, Point]]:
        """Structural weave edges as position pairs."""
        return self._edges(False)

    def cl_edges(self) -> List[Tuple[Point, Point]]:
        """Auxiliary (capping) edges as position pairs."""
        return self._edges(True)

    def loop_vertices(self) -> List[List[int]]:
        return [list(loop) for loop in self._loops]

    def loops(self) -> List[List[Point]]:
        return [[self.graph.position(v) for v in loop] for loop in self._loops]

    def __str__(self) -> str:
        return (
            "Weave\n"
            f"  {len(self.fibers)} fibers\n"
            f"  {len(self.xfibers)} X-fibers\n"
            f"  {len(self.yfibers)} Y-fibers\n"
            f"  {self.graph.num_vertices()} vertices "
            f"({len(self.graph.vertices_of_type(VertexType.CL))} CL)\n"
            f"  {self.graph.num_edges()} edges\n"
        )
