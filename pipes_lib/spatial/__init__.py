"""Spatial indexing shared by all pipes for collision queries."""

from .grid_index import SpatialQueryService, SpatialIndex

__all__ = ["SpatialQueryService", "SpatialIndex"]
