"""
Adapters connecting emitted pipe pieces to rendering and export tools.
"""

from .mesh_adapter import MeshRecorder, to_trimesh

__all__ = [
    "MeshRecorder",
    "to_trimesh",
]
