"""
Connected-component splitting of a weave graph.

A weave over a surface with islands or pockets falls apart into several
independent regions.  Each region is traced into its own set of tool
path loops, so the graph is split into one sub-graph per connected
component.  Components are labelled in order of their lowest vertex
handle, which makes the numbering deterministic for identical input.
Each returned sub-graph is a fresh vertex-induced copy; the source
graph is not modified.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import List, Tuple

from .weave_graph import WeaveGraph

logger = logging.getLogger(__name__)


def connected_components(graph: WeaveGraph) -> Tuple[int, List[int]]:
    """Label every vertex with its component number.

    Returns:
        A tuple ``(count, labels)`` where ``labels[v]`` is the component
        of vertex ``v``.  Isolated vertices form components of their own.
    """
    labels = [-1] * graph.num_vertices()
    count = 0
    for start in graph.vertices():
        if labels[start] != -1:
            continue
        labels[start] = count
        queue = deque([start])
        while queue:
            v = queue.popleft()
            for w in graph.neighbors(v):
                if labels[w] == -1:
                    labels[w] = count
                    queue.append(w)
        count += 1
    return count, labels


def split_components(graph: WeaveGraph) -> List[WeaveGraph]:
    """Return one induced sub-graph per connected component of ``graph``."""
    count, labels = connected_components(graph)
    members: List[List[int]] = [[] for _ in range(count)]
    for v, label in enumerate(labels):
        members[label].append(v)
    parts = [graph.induced_subgraph(vs) for vs in members]
    logger.info("Weave split into %d components", count)
    return parts
