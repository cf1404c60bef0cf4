"""Core data structures for pipe growth."""

from .types import Point3D, Direction3D, ColorRGB, AXIS_DIRECTIONS, FORWARD
from .geometry import Segment, TurnMarker
from .domain import BoxDomain
from .result import PipeState, FinishReason, ErrorCode, PipeReport

__all__ = [
    "Point3D",
    "Direction3D",
    "ColorRGB",
    "AXIS_DIRECTIONS",
    "FORWARD",
    "Segment",
    "TurnMarker",
    "BoxDomain",
    "PipeState",
    "FinishReason",
    "ErrorCode",
    "PipeReport",
]
