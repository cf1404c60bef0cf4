"""
Pipes Library - procedural pipe growth in a bounded 3D volume

Growers extend pipes one axis-aligned segment at a time, turning when a
segment would leave the boundary box or hit existing geometry, and every few
segments on schedule. A pool keeps a target number of growers running
concurrently on an asyncio event loop and replaces each one as it finishes.

Key Features:
- One shared spatial index, so pipes avoid each other as well as themselves
- Explicit state machine per pipe (synchronous `step`, paced `start`)
- Bounded enclosure handling: a boxed-in pipe finishes instead of spinning
- Listener seam for renderers, with a trimesh export adapter

Example Usage:
    import asyncio
    from pipes_lib import PipePool, get_preset
    from pipes_lib.adapters import MeshRecorder

    recorder = MeshRecorder()
    pool = PipePool(get_preset("sparse_debug"), listeners=[recorder], seed=7)
    asyncio.run(pool.run(total_pipes=4))

    mesh = recorder.to_trimesh()
"""

__version__ = "0.1.0"

from .core.types import Point3D, Direction3D, ColorRGB, AXIS_DIRECTIONS
from .core.geometry import Segment, TurnMarker
from .core.domain import BoxDomain
from .core.result import PipeState, FinishReason, ErrorCode, PipeReport

from .spatial.grid_index import SpatialQueryService, SpatialIndex

from .params.config import PipeConfig, PoolConfig
from .params.presets import get_preset, list_presets
from .params.validation import validate_pipe_config, validate_pool_config

from .ops.growth import PipeGrower, StepOutcome, choose_direction, random_pastel_color
from .ops.pool import PipePool

__all__ = [
    "Point3D",
    "Direction3D",
    "ColorRGB",
    "AXIS_DIRECTIONS",
    "Segment",
    "TurnMarker",
    "BoxDomain",
    "PipeState",
    "FinishReason",
    "ErrorCode",
    "PipeReport",
    "SpatialQueryService",
    "SpatialIndex",
    "PipeConfig",
    "PoolConfig",
    "get_preset",
    "list_presets",
    "validate_pipe_config",
    "validate_pool_config",
    "PipeGrower",
    "StepOutcome",
    "choose_direction",
    "random_pastel_color",
    "PipePool",
]
