"""
Containment box for pipe growth.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np
from .types import Point3D


@dataclass
class BoxDomain:
    """Axis-aligned rectangular box."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float
    z_min: float
    z_max: float

    def __post_init__(self):
        """Validate box dimensions."""
        if self.x_min >= self.x_max:
            raise ValueError(f"x_min ({self.x_min}) must be less than x_max ({self.x_max})")
        if self.y_min >= self.y_max:
            raise ValueError(f"y_min ({self.y_min}) must be less than y_max ({self.y_max})")
        if self.z_min >= self.z_max:
            raise ValueError(f"z_min ({self.z_min}) must be less than z_max ({self.z_max})")

    @classmethod
    def from_extents(cls, size: Tuple[float, float, float]) -> "BoxDomain":
        """
        Create the origin-centred box with full extents `size`.

        A point is inside when ``|coordinate| <= extent / 2`` on every axis.
        """
        sx, sy, sz = (float(s) for s in size)
        for axis, s in zip("xyz", (sx, sy, sz)):
            if s <= 0:
                raise ValueError(f"Boundary extent along {axis} must be positive, got {s}")
        return cls(
            x_min=-sx / 2, x_max=sx / 2,
            y_min=-sy / 2, y_max=sy / 2,
            z_min=-sz / 2, z_max=sz / 2,
        )

    @property
    def size(self) -> Tuple[float, float, float]:
        return (
            self.x_max - self.x_min,
            self.y_max - self.y_min,
            self.z_max - self.z_min,
        )

    def contains(self, point: Point3D) -> bool:
        """Check if point is inside box (faces included)."""
        return (
            self.x_min <= point.x <= self.x_max and
            self.y_min <= point.y <= self.y_max and
            self.z_min <= point.z <= self.z_max
        )

    def sample_points(
        self,
        n_points: int,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> np.ndarray:
        """Sample random points uniformly inside box."""
        if rng is None:
            rng = np.random.default_rng(seed)

        x = rng.uniform(self.x_min, self.x_max, n_points)
        y = rng.uniform(self.y_min, self.y_max, n_points)
        z = rng.uniform(self.z_min, self.z_max, n_points)

        return np.column_stack([x, y, z])

    def get_bounds(self) -> tuple:
        """Get bounding box (min_x, max_x, min_y, max_y, min_z, max_z)."""
        return (
            self.x_min, self.x_max,
            self.y_min, self.y_max,
            self.z_min, self.z_max,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "type": "box",
            "x_min": self.x_min,
            "x_max": self.x_max,
            "y_min": self.y_min,
            "y_max": self.y_max,
            "z_min": self.z_min,
            "z_max": self.z_max,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BoxDomain":
        """Create from dictionary."""
        return cls(
            x_min=d["x_min"],
            x_max=d["x_max"],
            y_min=d["y_min"],
            y_max=d["y_max"],
            z_min=d["z_min"],
            z_max=d["z_max"],
        )
