"""
Configuration dataclasses for pipe growers and pipe pools.

Units: all spatial parameters share the scene's length unit. Speed is in
segments per second.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Optional, Tuple
from ..core.types import ColorRGB


@dataclass
class PipeConfig:
    """Configuration for a single pipe grower."""

    maximum_pipe_turns: int = 200  # turns before the pipe finishes
    minimum_stretch_distance: float = 3.0
    maximum_stretch_distance: float = 10.0
    speed: float = 1.0  # segments per second
    pipe_radius: float = 0.5
    turn_sphere_radius: float = 0.7
    turn_frequency: int = 5  # segments between scheduled turns
    pipe_color: Optional[ColorRGB] = None  # auto-selected when None

    boundary_size: Tuple[float, float, float] = (60.0, 30.0, 60.0)  # full extents, origin-centred
    start_position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    initial_direction: Tuple[float, float, float] = (0.0, 0.0, 1.0)

    max_blocked_turns: int = 32  # consecutive collision turns before giving up
    darkness_threshold: float = 0.2

    @property
    def clearance(self) -> float:
        """Thickness used when sweeping the next segment through the scene."""
        return max(self.pipe_radius, self.turn_sphere_radius)

    def with_overrides(self, **changes) -> "PipeConfig":
        """Copy with selected fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        d = {f.name: getattr(self, f.name) for f in fields(self)}
        d["pipe_color"] = self.pipe_color.to_dict() if self.pipe_color else None
        for key in ("boundary_size", "start_position", "initial_direction"):
            d[key] = list(d[key])
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "PipeConfig":
        """Create from dictionary; missing keys keep their defaults."""
        kwargs = dict(d)
        if kwargs.get("pipe_color") is not None:
            kwargs["pipe_color"] = ColorRGB.from_dict(kwargs["pipe_color"])
        for key in ("boundary_size", "start_position", "initial_direction"):
            if key in kwargs:
                kwargs[key] = tuple(kwargs[key])
        return cls(**kwargs)


@dataclass
class PoolConfig:
    """Configuration for a pool of concurrently growing pipes."""

    desired_active_pipe_count: int = 1
    max_pipes_on_screen: int = 7
    min_pipe_turns: int = 100
    max_pipe_turns: int = 200
    pipe_speed: float = 1.0
    boundary_size: Tuple[float, float, float] = (60.0, 30.0, 60.0)

    history_limit: Optional[int] = 64  # None keeps every finished pipe
    start_attempts: int = 50  # tries to find a free start point

    pipe: PipeConfig = field(default_factory=PipeConfig)

    @property
    def target_active_count(self) -> int:
        return min(self.desired_active_pipe_count, self.max_pipes_on_screen)

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization."""
        return {
            "desired_active_pipe_count": self.desired_active_pipe_count,
            "max_pipes_on_screen": self.max_pipes_on_screen,
            "min_pipe_turns": self.min_pipe_turns,
            "max_pipe_turns": self.max_pipe_turns,
            "pipe_speed": self.pipe_speed,
            "boundary_size": list(self.boundary_size),
            "history_limit": self.history_limit,
            "start_attempts": self.start_attempts,
            "pipe": self.pipe.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PoolConfig":
        """Create from dictionary; missing keys keep their defaults."""
        kwargs = dict(d)
        if "pipe" in kwargs:
            kwargs["pipe"] = PipeConfig.from_dict(kwargs["pipe"])
        if "boundary_size" in kwargs:
            kwargs["boundary_size"] = tuple(kwargs["boundary_size"])
        return cls(**kwargs)
