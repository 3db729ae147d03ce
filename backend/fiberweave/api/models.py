"""
Pydantic data models for the weave data contract.

These models describe fibers handed to the weave as plain data and the
results handed back to downstream consumers.  Keeping the schemas in one
place makes the contract explicit and lets callers validate and
serialise weave data with the usual pydantic machinery.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class WeavePoint(BaseModel):
    """A single 3D position."""

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")
    z: float = Field(..., description="Z coordinate")


class IntervalInput(BaseModel):
    """A contact interval, in fiber parameters."""

    lower: float = Field(..., description="Fiber parameter of the lower end-point")
    upper: float = Field(..., description="Fiber parameter of the upper end-point")


class FiberInput(BaseModel):
    """A sampled scan-line with its contact intervals."""

    p1: WeavePoint = Field(..., description="Start point (anchor) of the fiber")
    p2: WeavePoint = Field(..., description="End point of the fiber")
    intervals: List[IntervalInput] = Field(
        default_factory=list, description="Contact intervals along the fiber"
    )


class WeaveEdge(BaseModel):
    """An edge of the weave graph given by its end-point positions."""

    p1: WeavePoint = Field(..., description="First end-point")
    p2: WeavePoint = Field(..., description="Second end-point")


class WeaveLoop(BaseModel):
    """An ordered, implicitly closed loop of contact points."""

    points: List[WeavePoint] = Field(..., description="Loop points in traversal order")


class WeaveResponse(BaseModel):
    """Everything a downstream consumer needs from one weave."""

    clPoints: List[WeavePoint] = Field(..., description="Cutter-location (interval end) points")
    intPoints: List[WeavePoint] = Field(..., description="Internal crossing points")
    edges: List[WeaveEdge] = Field(..., description="Structural weave edges")
    auxiliaryEdges: List[WeaveEdge] = Field(
        default_factory=list, description="Capping edges, separate from the structural weave"
    )
    loops: List[WeaveLoop] = Field(
        default_factory=list, description="Closed loops from face traversal"
    )
    numVertices: int = Field(..., description="Total number of graph vertices")
    numEdges: int = Field(..., description="Total number of graph edges")
