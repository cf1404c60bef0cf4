"""
Solid pipe pieces emitted during growth.

Segments are stored as capsules (a swept sphere along the centerline) and turn
markers as spheres. Both expose `contains` and `distance_to_point` so the
spatial index can treat them uniformly.
"""

from dataclasses import dataclass
import numpy as np
from .types import Point3D, Direction3D, ColorRGB


def point_to_segment_distance(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    """Minimum distance from point `p` to the segment `a`-`b`."""
    v = b - a
    length_sq = np.dot(v, v)

    if length_sq < 1e-12:
        return float(np.linalg.norm(p - a))

    t = np.clip(np.dot(p - a, v) / length_sq, 0.0, 1.0)
    closest = a + t * v
    return float(np.linalg.norm(p - closest))


def segment_to_segment_distance(
    p1: np.ndarray,
    q1: np.ndarray,
    p2: np.ndarray,
    q2: np.ndarray,
) -> float:
    """
    Minimum distance between segments `p1`-`q1` and `p2`-`q2`.

    Closest-point computation from Ericson, "Real-Time Collision Detection",
    section 5.1.9, including the degenerate (zero-length) cases.
    """
    eps = 1e-12
    d1 = q1 - p1
    d2 = q2 - p2
    r = p1 - p2
    a = np.dot(d1, d1)
    e = np.dot(d2, d2)
    f = np.dot(d2, r)

    if a <= eps and e <= eps:
        return float(np.linalg.norm(p1 - p2))

    if a <= eps:
        s = 0.0
        t = np.clip(f / e, 0.0, 1.0)
    else:
        c = np.dot(d1, r)
        if e <= eps:
            t = 0.0
            s = np.clip(-c / a, 0.0, 1.0)
        else:
            b = np.dot(d1, d2)
            denom = a * e - b * b
            if denom > eps:
                s = np.clip((b * f - c * e) / denom, 0.0, 1.0)
            else:
                s = 0.0
            t = (b * s + f) / e
            if t < 0.0:
                t = 0.0
                s = np.clip(-c / a, 0.0, 1.0)
            elif t > 1.0:
                t = 1.0
                s = np.clip((b - c) / a, 0.0, 1.0)

    c1 = p1 + d1 * s
    c2 = p2 + d2 * t
    return float(np.linalg.norm(c1 - c2))


@dataclass
class Segment:
    """Straight cylindrical piece of a pipe between two points."""

    pipe_id: int
    start: Point3D
    end: Point3D
    radius: float
    color: ColorRGB

    def length(self) -> float:
        return self.start.distance_to(self.end)

    def direction(self) -> Direction3D:
        """Get overall direction from start to end."""
        return Direction3D(
            self.end.x - self.start.x,
            self.end.y - self.start.y,
            self.end.z - self.start.z,
        )

    def midpoint(self) -> Point3D:
        return Point3D(
            (self.start.x + self.end.x) / 2.0,
            (self.start.y + self.end.y) / 2.0,
            (self.start.z + self.end.z) / 2.0,
        )

    def axis(self):
        """Centerline endpoints as numpy arrays."""
        return self.start.to_array(), self.end.to_array()

    def distance_to_point(self, point: np.ndarray) -> float:
        """Distance from `point` to the centerline."""
        a, b = self.axis()
        return point_to_segment_distance(point, a, b)

    def contains(self, point: np.ndarray, margin: float = 0.0) -> bool:
        return self.distance_to_point(point) <= self.radius + margin

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "kind": "segment",
            "pipe_id": self.pipe_id,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "radius": self.radius,
            "color": self.color.to_dict(),
        }


@dataclass
class TurnMarker:
    """Spherical joint piece marking a direction change."""

    pipe_id: int
    center: Point3D
    radius: float
    color: ColorRGB

    def axis(self):
        c = self.center.to_array()
        return c, c

    def distance_to_point(self, point: np.ndarray) -> float:
        return float(np.linalg.norm(point - self.center.to_array()))

    def contains(self, point: np.ndarray, margin: float = 0.0) -> bool:
        return self.distance_to_point(point) <= self.radius + margin

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "kind": "turn",
            "pipe_id": self.pipe_id,
            "center": self.center.to_dict(),
            "radius": self.radius,
            "color": self.color.to_dict(),
        }
