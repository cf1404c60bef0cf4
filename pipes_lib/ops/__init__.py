"""Growth and pool operations."""

from .growth import PipeGrower, StepOutcome, choose_direction, random_pastel_color
from .pool import PipePool

__all__ = [
    "PipeGrower",
    "StepOutcome",
    "choose_direction",
    "random_pastel_color",
    "PipePool",
]
