import pytest
import numpy as np

from pipes_lib.core.types import Point3D, ColorRGB
from pipes_lib.core.geometry import TurnMarker
from pipes_lib.params.config import PipeConfig, PoolConfig
from pipes_lib.spatial.grid_index import SpatialIndex


class EventLog:
    """Listener recording every effect a grower or pool emits."""

    def __init__(self):
        self.events = []

    def on_segment(self, segment):
        self.events.append(("segment", segment))

    def on_turn(self, marker):
        self.events.append(("turn", marker))

    def on_release(self, pipe_id):
        self.events.append(("release", pipe_id))

    def on_reset(self):
        self.events.append(("reset", None))

    def kinds(self):
        return [kind for kind, _ in self.events]


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def spatial_index():
    return SpatialIndex(cell_size=4.0)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def huge_box_config():
    """Short pipes in a box too large to ever reach."""
    return PipeConfig(
        maximum_pipe_turns=6,
        minimum_stretch_distance=3.0,
        maximum_stretch_distance=6.0,
        turn_frequency=2,
        speed=1000.0,
        boundary_size=(1000.0, 1000.0, 1000.0),
    )


@pytest.fixture
def fast_pool_config():
    """Pool of quick, short pipes."""
    return PoolConfig(
        desired_active_pipe_count=2,
        max_pipes_on_screen=2,
        min_pipe_turns=2,
        max_pipe_turns=4,
        pipe_speed=2000.0,
        boundary_size=(40.0, 40.0, 40.0),
        pipe=PipeConfig(
            minimum_stretch_distance=3.0,
            maximum_stretch_distance=5.0,
            turn_frequency=2,
            max_blocked_turns=8,
        ),
    )


@pytest.fixture
def slow_pool_config():
    """Pool whose pipes sleep long between segments, so they stay active."""
    return PoolConfig(
        desired_active_pipe_count=3,
        max_pipes_on_screen=3,
        min_pipe_turns=50,
        max_pipe_turns=60,
        pipe_speed=0.01,
        boundary_size=(60.0, 30.0, 60.0),
    )


@pytest.fixture
def enclosing_markers():
    """Foreign markers 2 units from the origin on every side but -z."""
    grey = ColorRGB(0.5, 0.5, 0.5)
    centers = [(2, 0, 0), (-2, 0, 0), (0, 2, 0), (0, -2, 0), (0, 0, 2)]
    return [
        TurnMarker(pipe_id=99, center=Point3D(*c), radius=0.5, color=grey)
        for c in centers
    ]
