"""
Geometric primitive types for pipe growth.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np


@dataclass
class Point3D:
    """3D point in space."""

    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        """Convert to numpy array."""
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Point3D":
        """Create from numpy array."""
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to tuple."""
        return (self.x, self.y, self.z)

    @classmethod
    def from_tuple(cls, t: Tuple[float, float, float]) -> "Point3D":
        """Create from tuple."""
        return cls(float(t[0]), float(t[1]), float(t[2]))

    def offset(self, direction: "Direction3D", distance: float) -> "Point3D":
        """Point reached by moving `distance` along `direction`."""
        return Point3D(
            self.x + direction.dx * distance,
            self.y + direction.dy * distance,
            self.z + direction.dz * distance,
        )

    def distance_to(self, other: "Point3D") -> float:
        """Compute Euclidean distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return float(np.sqrt(dx**2 + dy**2 + dz**2))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, d: dict) -> "Point3D":
        """Create from dictionary."""
        return cls(d["x"], d["y"], d["z"])


@dataclass
class Direction3D:
    """3D direction vector (unit vector)."""

    dx: float
    dy: float
    dz: float

    def __post_init__(self):
        """Normalize on creation."""
        self.normalize()

    def normalize(self) -> None:
        """Normalize to unit length."""
        length = np.sqrt(self.dx**2 + self.dy**2 + self.dz**2)
        if length < 1e-10:
            raise ValueError("Cannot normalize zero-length vector")
        self.dx = float(self.dx / length)
        self.dy = float(self.dy / length)
        self.dz = float(self.dz / length)

    def negated(self) -> "Direction3D":
        """Direction pointing the opposite way."""
        return Direction3D(-self.dx, -self.dy, -self.dz)

    def to_array(self) -> np.ndarray:
        """Convert to numpy array."""
        return np.array([self.dx, self.dy, self.dz], dtype=float)

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to tuple."""
        return (self.dx, self.dy, self.dz)

    @classmethod
    def from_tuple(cls, t: Tuple[float, float, float]) -> "Direction3D":
        """Create from tuple (will be normalized)."""
        return cls(t[0], t[1], t[2])

    def dot(self, other: "Direction3D") -> float:
        """Compute dot product with another direction."""
        return self.dx * other.dx + self.dy * other.dy + self.dz * other.dz


# forward, back, left, right, up, down
AXIS_DIRECTIONS: Tuple[Direction3D, ...] = (
    Direction3D(0.0, 0.0, 1.0),
    Direction3D(0.0, 0.0, -1.0),
    Direction3D(-1.0, 0.0, 0.0),
    Direction3D(1.0, 0.0, 0.0),
    Direction3D(0.0, 1.0, 0.0),
    Direction3D(0.0, -1.0, 0.0),
)

FORWARD = AXIS_DIRECTIONS[0]


@dataclass
class ColorRGB:
    """RGB color with channels in [0, 1]."""

    r: float
    g: float
    b: float

    def __post_init__(self):
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Color channel {name}={value} outside [0, 1]")

    def is_near_black(self, threshold: float = 0.2) -> bool:
        """True when every channel falls below `threshold`."""
        return self.r < threshold and self.g < threshold and self.b < threshold

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)

    @classmethod
    def from_tuple(cls, t: Tuple[float, float, float]) -> "ColorRGB":
        return cls(float(t[0]), float(t[1]), float(t[2]))

    def to_rgba8(self) -> Tuple[int, int, int, int]:
        """8-bit RGBA, as used for mesh vertex colors."""
        return (
            int(round(self.r * 255)),
            int(round(self.g * 255)),
            int(round(self.b * 255)),
            255,
        )

    def to_hex(self) -> str:
        r, g, b, _ = self.to_rgba8()
        return f"#{r:02x}{g:02x}{b:02x}"

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b}

    @classmethod
    def from_dict(cls, d: dict) -> "ColorRGB":
        return cls(d["r"], d["g"], d["b"])
