"""
Fibers and intervals: the input model of the weave.

A :class:`Fiber` is a straight scan-line from ``p1`` to ``p2``.  Upstream
drop-cutter and push-cutter passes sample a surface along many such
lines, running either parallel to the X axis or parallel to the Y axis,
and record along each one the :class:`Interval` ranges where the cutter
is in valid contact with the stock.  Interval bounds are fiber
parameters: ``fiber.point(t)`` maps a bound back to a 3D position.

While the weave graph is built, every interval remembers which graph
vertices lie on it in an :class:`IntersectionSet`, an ordered sequence of
``(vertex, coordinate)`` pairs.  When a new crossing is inserted the set
yields the vertices directly before and after it along the interval, and
these are the vertices whose connecting edge has to be split.

The ``in_weave`` flag on an interval records that its two end-points have
been added to the graph, so repeated crossings never create them twice.
"""

from __future__ import annotations

import bisect
from typing import Iterator, List, Optional, Tuple

from .geometry import Point
from .weave_graph import MalformedTopologyError

# Direction components smaller than this count as zero when classifying
# a fiber as X- or Y-parallel.
AXIS_TOLERANCE: float = 1e-9


class IntersectionSet:
    """Vertices on an interval, kept sorted by their coordinate along it."""

    def __init__(self) -> None:
        self._coords: List[float] = []
        self._vertices: List[int] = []

    def insert(self, vertex: int, coord: float) -> int:
        """Insert ``vertex`` at ``coord`` and return its position in the set.

        Raises:
            MalformedTopologyError: If another vertex already sits at
                ``coord``.
        """
        index = bisect.bisect_left(self._coords, coord)
        if index < len(self._coords) and self._coords[index] == coord:
            raise MalformedTopologyError(
                f"vertex {vertex} coincides with vertex {self._vertices[index]} at coordinate {coord}"
            )
        self._coords.insert(index, coord)
        self._vertices.insert(index, vertex)
        return index

    def neighbors(self, index: int) -> Tuple[int, int]:
        """Return the vertices directly before and after position ``index``.

        Raises:
            MalformedTopologyError: If the entry at ``index`` is the first
                or the last one, i.e. it lies on or outside the interval's
                end-points.
        """
        if index <= 0 or index >= len(self._coords) - 1:
            raise MalformedTopologyError(
                f"no predecessor/successor for coordinate {self._coords[index]} "
                f"(interval spans {self._coords[0]} .. {self._coords[-1]})"
            )
        return self._vertices[index - 1], self._vertices[index + 1]

    def coordinates(self) -> List[float]:
        return list(self._coords)

    def __len__(self) -> int:
        return len(self._coords)

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        return iter(zip(self._vertices, self._coords))


class Interval:
    """A contact range ``[lower, upper]`` along a fiber.

    Attributes:
        lower: Fiber parameter of the lower end-point.
        upper: Fiber parameter of the upper end-point.
        intersections: Graph vertices on this interval, ordered by
            coordinate.  Filled by the weave builder.
        in_weave: ``True`` once the end-points have been added to a
            weave graph.
    """

    def __init__(self, lower: float, upper: float) -> None:
        if lower > upper:
            raise ValueError(f"interval lower bound {lower} exceeds upper bound {upper}")
        self.lower = float(lower)
        self.upper = float(upper)
        self.intersections = IntersectionSet()
        self.in_weave = False

    @property
    def length(self) -> float:
        return self.upper - self.lower

    def is_empty(self) -> bool:
        return self.upper == self.lower

    def update(self, t: float) -> None:
        """Widen the interval so that it contains ``t``."""
        if t < self.lower:
            self.lower = float(t)
        elif t > self.upper:
            self.upper = float(t)

    def contains(self, t: float) -> bool:
        return self.lower <= t <= self.upper

    def overlaps(self, other: "Interval") -> bool:
        return not (other.upper < self.lower or other.lower > self.upper)

    def reset(self) -> None:
        """Forget any weave state so the interval can be woven again."""
        self.intersections = IntersectionSet()
        self.in_weave = False

    def __repr__(self) -> str:
        return f"Interval({self.lower}, {self.upper})"


class Fiber:
    """A scan-line from ``p1`` to ``p2`` carrying contact intervals.

    Raises:
        ValueError: If ``p1`` and ``p2`` coincide.
    """

    def __init__(self, p1: Point, p2: Point, intervals: Optional[List[Interval]] = None) -> None:
        self.p1 = p1
        self.p2 = p2
        self.dir = (p2 - p1).normalize()
        self._x_parallel = abs(self.dir.y) < AXIS_TOLERANCE and abs(self.dir.z) < AXIS_TOLERANCE
        self._y_parallel = abs(self.dir.x) < AXIS_TOLERANCE and abs(self.dir.z) < AXIS_TOLERANCE
        self.intervals: List[Interval] = []
        for interval in intervals or []:
            self.add_interval(interval)

    @property
    def anchor(self) -> Point:
        return self.p1

    def is_x_parallel(self) -> bool:
        return self._x_parallel

    def is_y_parallel(self) -> bool:
        return self._y_parallel

    def point(self, t: float) -> Point:
        """Return the position at fiber parameter ``t``."""
        return self.p1 + (self.p2 - self.p1) * t

    def add_interval(self, interval: Interval) -> None:
        """Add ``interval``, merging it with any interval it overlaps.

        Zero-length intervals are ignored.  An interval that lies inside
        an existing one leaves the fiber unchanged.

        Raises:
            ValueError: If the fiber already takes part in a weave.
        """
        if any(existing.in_weave for existing in self.intervals):
            raise ValueError("cannot add intervals to a fiber that has been woven")
        if interval.is_empty():
            return
        for existing in self.intervals:
            if existing.lower <= interval.lower and interval.upper <= existing.upper:
                return
        merged = interval
        kept: List[Interval] = []
        for existing in self.intervals:
            if merged.overlaps(existing):
                merged = Interval(min(merged.lower, existing.lower), max(merged.upper, existing.upper))
            else:
                kept.append(existing)
        kept.append(merged)
        kept.sort(key=lambda i: i.lower)
        self.intervals = kept

    def contains(self, t: float) -> bool:
        """Return True if ``t`` lies inside one of the fiber's intervals."""
        return any(i.contains(t) for i in self.intervals)

    def __repr__(self) -> str:
        return f"Fiber({self.p1} -> {self.p2}, {len(self.intervals)} intervals)"
