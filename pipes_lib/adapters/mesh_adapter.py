"""
Adapter from emitted pipe pieces to trimesh.Trimesh.

`MeshRecorder` is a listener that mirrors what a renderer keeps on screen;
`to_trimesh` turns pieces into a single mesh for export or preview.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence
import logging
import numpy as np
import trimesh
from ..core.geometry import Segment, TurnMarker

logger = logging.getLogger(__name__)


class MeshRecorder:
    """
    Listener that keeps the pieces of every live pipe, in emission order.

    Released pipes are dropped, as a renderer would destroy their objects.
    """

    def __init__(self):
        self.segments: Dict[int, List[Segment]] = defaultdict(list)
        self.turns: Dict[int, List[TurnMarker]] = defaultdict(list)
        self.events: List[tuple] = []

    def on_segment(self, segment: Segment) -> None:
        self.segments[segment.pipe_id].append(segment)
        self.events.append(("segment", segment.pipe_id, segment))

    def on_turn(self, marker: TurnMarker) -> None:
        self.turns[marker.pipe_id].append(marker)
        self.events.append(("turn", marker.pipe_id, marker))

    def on_release(self, pipe_id: int) -> None:
        self.segments.pop(pipe_id, None)
        self.turns.pop(pipe_id, None)
        self.events.append(("release", pipe_id, None))

    def on_reset(self) -> None:
        self.segments.clear()
        self.turns.clear()
        self.events.append(("reset", None, None))

    @property
    def pipe_ids(self) -> List[int]:
        return sorted(set(self.segments) | set(self.turns))

    def all_segments(self) -> List[Segment]:
        return [s for pipe_id in sorted(self.segments) for s in self.segments[pipe_id]]

    def all_turns(self) -> List[TurnMarker]:
        return [t for pipe_id in sorted(self.turns) for t in self.turns[pipe_id]]

    def to_trimesh(self, radial_resolution: int = 8) -> Optional[trimesh.Trimesh]:
        return to_trimesh(self.all_segments(), self.all_turns(), radial_resolution)


def to_trimesh(
    segments: Sequence[Segment],
    turns: Sequence[TurnMarker] = (),
    radial_resolution: int = 8,
    sphere_subdivisions: int = 1,
    min_segment_length: float = 1e-6,
) -> Optional[trimesh.Trimesh]:
    """
    Build one mesh from pipe pieces.

    Parameters
    ----------
    segments : sequence of Segment
        Straight pieces, rendered as cylinders
    turns : sequence of TurnMarker
        Joints, rendered as icospheres
    radial_resolution : int
        Number of vertices around each cylinder
    sphere_subdivisions : int
        Icosphere subdivision level for joints
    min_segment_length : float
        Skip segments shorter than this

    Returns
    -------
    trimesh.Trimesh or None
        Concatenated mesh with per-vertex colors, None if nothing to draw
    """
    meshes = []

    for segment in segments:
        start, end = segment.axis()
        if np.linalg.norm(end - start) < min_segment_length:
            continue
        mesh = _create_cylinder_mesh(start, end, segment.radius, radial_resolution)
        mesh.visual.vertex_colors = segment.color.to_rgba8()
        meshes.append(mesh)

    for marker in turns:
        sphere = trimesh.creation.icosphere(subdivisions=sphere_subdivisions, radius=marker.radius)
        sphere.apply_translation(marker.center.to_array())
        sphere.visual.vertex_colors = marker.color.to_rgba8()
        meshes.append(sphere)

    if not meshes:
        logger.debug("No pieces to convert")
        return None

    combined = trimesh.util.concatenate(meshes)
    logger.debug("Built mesh from %d components (%d faces)", len(meshes), len(combined.faces))
    return combined


def _create_cylinder_mesh(
    start: np.ndarray,
    end: np.ndarray,
    radius: float,
    radial_resolution: int = 8,
) -> trimesh.Trimesh:
    """Cylinder of `radius` whose axis runs from `start` to `end`."""
    direction = end - start
    length = np.linalg.norm(direction)
    direction = direction / length

    cylinder = trimesh.creation.cylinder(
        radius=radius,
        height=length,
        sections=radial_resolution,
    )

    z_axis = np.array([0.0, 0.0, 1.0])
    if np.allclose(direction, -z_axis):
        cylinder.apply_transform(trimesh.transformations.rotation_matrix(np.pi, [1, 0, 0]))
    elif not np.allclose(direction, z_axis):
        rotation_axis = np.cross(z_axis, direction)
        rotation_axis = rotation_axis / np.linalg.norm(rotation_axis)
        angle = np.arccos(np.clip(np.dot(z_axis, direction), -1, 1))
        cylinder.apply_transform(trimesh.transformations.rotation_matrix(angle, rotation_axis))

    cylinder.apply_translation((start + end) / 2)
    return cylinder
