"""
Point primitive for the weave services.

Fibers, intervals and graph vertices all exchange positions as
:class:`Point` values.  A point is an immutable 3-tuple of floats with
the handful of vector helpers the weave needs: addition, subtraction,
scaling, length and normalisation.  Positions are hashable so they can
be used as dictionary keys in tests and exports.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Point:
    """A position in 3D space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, s: float) -> "Point":
        return Point(self.x * s, self.y * s, self.z * s)

    __rmul__ = __mul__

    def norm(self) -> float:
        """Return the Euclidean length of the point seen as a vector."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> "Point":
        """Return a unit vector in the direction of this point.

        Raises:
            ValueError: If the vector has zero length.
        """
        length = self.norm()
        if length == 0.0:
            raise ValueError("cannot normalise a zero-length vector")
        return Point(self.x / length, self.y / length, self.z / length)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)
