"""
Tests for fiber partitioning and weave graph construction.

The fibers used here run along the axes with unit direction, so an
interval's bounds are directly the x (or y) coordinates of its
end-points.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fiberweave.services.fiber import Fiber, Interval
from fiberweave.services.geometry import Point
from fiberweave.services.weave import Weave
from fiberweave.services.weave_build import build_weave_graph
from fiberweave.services.weave_embedding import build_embedding
from fiberweave.services.weave_fibers import sort_fibers
from fiberweave.services.weave_graph import MalformedTopologyError, VertexType, WeaveGraph


def x_fiber(y: float, *intervals: tuple[float, float], z: float = 0.0) -> Fiber:
    """Create an X-parallel fiber at height ``y`` with the given x-ranges."""
    return Fiber(Point(0.0, y, z), Point(1.0, y, z), [Interval(lo, hi) for lo, hi in intervals])


def y_fiber(x: float, *intervals: tuple[float, float], z: float = 0.0) -> Fiber:
    """Create a Y-parallel fiber at ``x`` with the given y-ranges."""
    return Fiber(Point(x, 0.0, z), Point(x, 1.0, z), [Interval(lo, hi) for lo, hi in intervals])


def xy(p: Point) -> tuple[float, float]:
    return (p.x, p.y)


def make_weave(*fibers: Fiber) -> Weave:
    w = Weave()
    for f in fibers:
        w.add_fiber(f)
    w.build()
    return w


def vertex_at(graph: WeaveGraph, x: float, y: float) -> int:
    matches = [v for v in graph.vertices() if xy(graph.position(v)) == (x, y)]
    assert len(matches) == 1, f"expected one vertex at ({x}, {y}), found {matches}"
    return matches[0]


def edge_set(w: Weave) -> set[frozenset[tuple[float, float]]]:
    return {frozenset({xy(a), xy(b)}) for a, b in w.edges()}


def test_sort_fibers_keeps_order_and_drops_unusable() -> None:
    """Oblique and interval-less fibers are skipped without error."""
    x1 = x_fiber(0.0, (0.0, 1.0))
    x2 = x_fiber(1.0, (0.0, 1.0))
    y1 = y_fiber(0.5, (0.0, 1.0))
    empty = x_fiber(2.0)
    oblique = Fiber(Point(0.0, 0.0, 0.0), Point(1.0, 1.0, 0.0), [Interval(0.0, 1.0)])
    xs, ys = sort_fibers([x2, empty, y1, oblique, x1])
    assert xs == [x2, x1]
    assert ys == [y1]
    assert xs[0] is x2


def test_single_crossing_scenario() -> None:
    """One X-interval crossed by one Y-interval gives a four-armed star."""
    w = make_weave(x_fiber(0.0, (0.0, 10.0)), y_fiber(5.0, (-1.0, 2.0)))
    assert w.int_points() == [Point(5.0, 0.0, 0.0)]
    assert sorted(xy(p) for p in w.cl_points()) == [(0.0, 0.0), (5.0, -1.0), (5.0, 2.0), (10.0, 0.0)]
    assert w.graph.num_edges() == 4
    assert w.cl_edges() == []
    assert edge_set(w) == {
        frozenset({(0.0, 0.0), (5.0, 0.0)}),
        frozenset({(5.0, 0.0), (10.0, 0.0)}),
        frozenset({(5.0, -1.0), (5.0, 0.0)}),
        frozenset({(5.0, 0.0), (5.0, 2.0)}),
    }
    v = vertex_at(w.graph, 5.0, 0.0)
    assert w.graph.degree(v) == 4


def test_two_crossings_on_shared_y_interval_replace_shortcut() -> None:
    """A second crossing on the Y-interval splits the edge the first one made."""
    w = make_weave(
        x_fiber(0.0, (0.0, 10.0)),
        x_fiber(1.0, (0.0, 10.0)),
        y_fiber(5.0, (-1.0, 2.0)),
    )
    assert sorted(xy(p) for p in w.int_points()) == [(5.0, 0.0), (5.0, 1.0)]
    # two end-points per interval, three intervals
    assert len(w.cl_points()) == 6
    assert w.graph.num_edges() == 7
    edges = edge_set(w)
    assert frozenset({(5.0, 0.0), (5.0, 2.0)}) not in edges
    assert frozenset({(5.0, 0.0), (5.0, 1.0)}) in edges
    assert frozenset({(5.0, 1.0), (5.0, 2.0)}) in edges
    assert frozenset({(0.0, 0.0), (10.0, 0.0)}) not in edges


def test_splice_removes_direct_edge_and_adds_two() -> None:
    """Inserting a crossing between adjacent points swaps one edge for two."""
    xf = x_fiber(0.0, (0.0, 10.0))
    y_first = y_fiber(3.0, (-1.0, 1.0))
    w = make_weave(xf, y_first)
    g = w.graph
    a = vertex_at(g, 3.0, 0.0)
    b = vertex_at(g, 10.0, 0.0)
    assert g.has_edge(a, b)
    before = g.num_edges()
    build_weave_graph([xf], [y_fiber(7.0, (-1.0, 1.0))], g)
    v = vertex_at(g, 7.0, 0.0)
    assert not g.has_edge(a, b)
    assert g.has_edge(a, v) and g.has_edge(v, b)
    # X-splice: -1 +2, Y-splice of the new Y-interval: +2
    assert g.num_edges() == before + 3


def test_endpoints_added_once_regardless_of_crossings() -> None:
    xf = x_fiber(0.0, (0.0, 10.0))
    ys = [y_fiber(x, (-1.0, 1.0)) for x in (2.0, 4.0, 6.0)]
    w = make_weave(xf, *ys)
    assert xf.intervals[0].in_weave
    assert all(yf.intervals[0].in_weave for yf in ys)
    cl = [xy(p) for p in w.cl_points()]
    assert len(cl) == 8
    assert len(set(cl)) == 8
    assert cl.count((0.0, 0.0)) == 1
    assert len(w.int_points()) == 3
    assert len(xf.intervals[0].intersections) == 5


def test_crossing_count_matches_overlapping_pairs() -> None:
    xfibers = [
        x_fiber(0.0, (0.0, 4.5), (5.5, 9.0)),
        x_fiber(2.0, (1.0, 8.5)),
        x_fiber(4.0, (6.5, 9.5)),
    ]
    yfibers = [
        y_fiber(1.5, (-1.0, 3.0)),
        y_fiber(3.0, (-1.0, 1.0), (1.5, 5.0)),
        y_fiber(7.0, (1.0, 5.0)),
        y_fiber(9.25, (-1.0, 0.5), (3.5, 4.5)),
    ]
    expected = 0
    for xf in xfibers:
        for xi in xf.intervals:
            for yf in yfibers:
                if not (xi.lower <= yf.anchor.x <= xi.upper):
                    continue
                for yi in yf.intervals:
                    if yi.lower <= xf.anchor.y <= yi.upper:
                        expected += 1
    w = make_weave(*xfibers, *yfibers)
    assert expected == 7
    assert len(w.int_points()) == expected
    # every X-interval is materialised, Y-intervals only when crossed
    assert len(w.cl_points()) == 2 * (4 + 5)


def test_degree_and_compass_slots_bounded() -> None:
    xfibers = [x_fiber(float(y), (0.0, 10.0)) for y in range(1, 5)]
    yfibers = [y_fiber(float(x), (0.0, 5.5)) for x in (2.0, 4.0, 6.0, 8.0)]
    w = make_weave(*xfibers, *yfibers)
    embedding = build_embedding(w.graph)
    for v in w.graph.vertices():
        assert w.graph.degree(v) <= 4
        assert len(embedding[v]) == w.graph.degree(v)
    assert len(w.int_points()) == 16


def test_construction_is_deterministic() -> None:
    def run() -> Weave:
        return make_weave(
            x_fiber(0.0, (0.0, 10.0)),
            x_fiber(2.0, (0.0, 4.0), (6.0, 10.0)),
            y_fiber(3.0, (-1.0, 3.0)),
            y_fiber(7.0, (-1.0, 3.0)),
        )

    first, second = run(), run()
    g1, g2 = first.graph, second.graph
    assert g1.num_vertices() == g2.num_vertices()
    assert g1.num_edges() == g2.num_edges()
    for v in g1.vertices():
        assert g1.vertex_type(v) == g2.vertex_type(v)
        assert g1.position(v).as_tuple() == pytest.approx(g2.position(v).as_tuple())
    assert list(g1.edges()) == list(g2.edges())


def test_crossing_on_interval_endpoint_fails_fast() -> None:
    """A Y-fiber through an X-interval's end-point is malformed input."""
    w = Weave()
    w.add_fiber(x_fiber(0.0, (0.0, 10.0)))
    w.add_fiber(y_fiber(0.0, (-1.0, 2.0)))
    with pytest.raises(MalformedTopologyError):
        w.build()
    assert w.graph.num_vertices() == 0
    with pytest.raises(MalformedTopologyError, match="already failed"):
        w.build()
    assert w.graph.num_vertices() == 0
    assert w.graph.num_edges() == 0


def test_failed_build_leaves_no_partial_graph(caplog: pytest.LogCaptureFixture) -> None:
    """A crossing that fails after earlier ones succeeded discards all of them."""
    xf = x_fiber(0.0, (0.0, 10.0))
    inner = y_fiber(5.0, (-1.0, 2.0))
    edge = y_fiber(10.0, (-1.0, 2.0))
    w = Weave()
    for f in (xf, inner, edge):
        w.add_fiber(f)
    with pytest.raises(MalformedTopologyError):
        w.build()
    assert w.graph.num_vertices() == 0
    assert w.cl_points() == []
    assert w.edges() == []
    assert "Weave build failed" in caplog.text
    for f in (xf, inner, edge):
        assert not f.intervals[0].in_weave
        assert len(f.intervals[0].intersections) == 0
    # the reset fibers weave cleanly once the bad one is left out
    retry = make_weave(xf, inner)
    assert retry.graph.num_vertices() == 5
    assert retry.int_points() == [Point(5.0, 0.0, 0.0)]


def test_y_interval_ending_on_x_fiber_fails_fast() -> None:
    w = Weave()
    w.add_fiber(x_fiber(0.0, (0.0, 10.0)))
    w.add_fiber(y_fiber(5.0, (0.0, 2.0)))
    with pytest.raises(MalformedTopologyError):
        w.build()


def test_empty_input_gives_empty_graph(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    w = make_weave(x_fiber(0.0), Fiber(Point(0.0, 0.0, 0.0), Point(1.0, 1.0, 0.0), [Interval(0.0, 1.0)]))
    assert w.graph.num_vertices() == 0
    assert w.graph.num_edges() == 0
    assert w.face_traverse() == []
    assert "no crossings possible" in caplog.text


def test_repeated_build_is_a_noop(caplog: pytest.LogCaptureFixture) -> None:
    w = make_weave(x_fiber(0.0, (0.0, 10.0)), y_fiber(5.0, (-1.0, 2.0)))
    caplog.set_level(logging.WARNING)
    g = w.build()
    assert g is w.graph
    assert g.num_vertices() == 5
    assert "already built" in caplog.text


def test_build_logs_summary_and_debug_crossings(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("WEAVE_DEBUG", "1")
    caplog.set_level(logging.DEBUG, logger="fiberweave.services.weave_build")
    make_weave(x_fiber(0.0, (0.0, 10.0)), y_fiber(5.0, (-1.0, 2.0)))
    assert "Weave built" in caplog.text
    assert "1 crossings" in caplog.text
    assert "crossing 4 at" in caplog.text


def test_crossing_inherits_x_fiber_height() -> None:
    w = make_weave(x_fiber(1.0, (0.0, 2.0), z=-0.25), y_fiber(1.0, (0.0, 2.0), z=3.0))
    assert w.int_points() == [Point(1.0, 1.0, -0.25)]
    assert all(t in (VertexType.CL, VertexType.INT) for t in map(w.graph.vertex_type, w.graph.vertices()))


def test_auxiliary_edges_and_reserved_types_are_reported_separately() -> None:
    """Capping edges and ADJ/TWOADJ tags added downstream stay out of the weave queries."""
    w = make_weave(x_fiber(0.0, (0.0, 10.0)), y_fiber(5.0, (-1.0, 2.0)))
    g = w.graph
    a = vertex_at(g, 0.0, 0.0)
    top = vertex_at(g, 5.0, 2.0)
    assert g.add_edge(a, top, auxiliary=True)
    assert not g.add_edge(a, top)
    assert g.is_auxiliary(a, top)
    assert len(w.edges()) == 4
    assert [(xy(p), xy(q)) for p, q in w.cl_edges()] == [((0.0, 0.0), (5.0, 2.0))]
    g.set_vertex_type(top, VertexType.ADJ)
    g.set_vertex_type(vertex_at(g, 5.0, -1.0), VertexType.TWOADJ)
    assert [xy(p) for p in w.adj_points()] == [(5.0, 2.0)]
    assert [xy(p) for p in w.two_adj_points()] == [(5.0, -1.0)]
    assert len(w.cl_points()) == 2


def test_graph_copy_is_independent() -> None:
    w = make_weave(x_fiber(0.0, (0.0, 10.0)), y_fiber(5.0, (-1.0, 2.0)))
    dup = w.graph.copy()
    dup.clear_vertex(4)
    dup.set_vertex_type(0, VertexType.INT)
    assert dup.num_edges() == 0
    assert w.graph.num_edges() == 4
    assert w.graph.vertex_type(0) == VertexType.CL
    with pytest.raises(MalformedTopologyError):
        dup.add_edge(1, 1)


def test_weave_summary_string() -> None:
    w = make_weave(x_fiber(0.0, (0.0, 10.0)), y_fiber(5.0, (-1.0, 2.0)), x_fiber(3.0))
    text = str(w)
    assert "3 fibers" in text
    assert "1 X-fibers" in text
    assert "1 Y-fibers" in text
    assert "5 vertices (4 CL)" in text
    assert "4 edges" in text
