"""
Tests for the trimesh adapter.
"""

import asyncio
import pytest
import numpy as np

trimesh = pytest.importorskip("trimesh")

from pipes_lib.core.types import Point3D, ColorRGB
from pipes_lib.core.geometry import Segment, TurnMarker
from pipes_lib.adapters.mesh_adapter import MeshRecorder, to_trimesh
from pipes_lib.ops.growth import PipeGrower
from pipes_lib.ops.pool import PipePool
from pipes_lib.params.presets import sparse_debug
from pipes_lib.spatial.grid_index import SpatialIndex

RED = ColorRGB(1.0, 0.0, 0.0)


@pytest.mark.parametrize("end", [(0, 0, 5), (0, 0, -5), (5, 0, 0), (0, -5, 0)])
def test_cylinder_follows_segment(end):
    seg = Segment(0, Point3D(0, 0, 0), Point3D(*end), 0.5, RED)
    mesh = to_trimesh([seg], radial_resolution=16)

    axis = np.array(end, dtype=float) / 5.0
    along = mesh.vertices @ axis
    radial = np.linalg.norm(mesh.vertices - np.outer(along, axis), axis=1)

    assert along.min() == pytest.approx(0.0, abs=1e-6)
    assert along.max() == pytest.approx(5.0, abs=1e-6)
    assert radial.max() == pytest.approx(0.5, abs=1e-6)


def test_joint_sphere_and_colors():
    marker = TurnMarker(0, Point3D(2, 2, 2), 0.7, RED)
    mesh = to_trimesh([], [marker])

    np.testing.assert_allclose(mesh.centroid, [2, 2, 2], atol=1e-2)
    assert np.all(mesh.visual.vertex_colors[:, :3] == [255, 0, 0])


def test_nothing_to_draw():
    assert to_trimesh([]) is None

    tiny = Segment(0, Point3D(0, 0, 0), Point3D(0, 0, 1e-9), 0.5, RED)
    assert to_trimesh([tiny]) is None


def test_recorder_follows_grower_and_release():
    recorder = MeshRecorder()
    grower = PipeGrower(
        sparse_debug().pipe.with_overrides(maximum_pipe_turns=4),
        SpatialIndex(),
        pipe_id=3,
        rng=np.random.default_rng(0),
        listeners=[recorder],
    )
    grower.grow()

    assert recorder.pipe_ids == [3]
    assert recorder.all_segments() == grower.segments
    assert recorder.all_turns() == grower.turns
    assert isinstance(recorder.to_trimesh(), trimesh.Trimesh)

    grower.release()
    assert recorder.pipe_ids == []
    assert recorder.events[-1] == ("release", 3, None)


def test_recorder_cleared_on_pool_reset():
    recorder = MeshRecorder()

    async def main():
        pool = PipePool(sparse_debug(), listeners=[recorder], seed=4)
        await asyncio.wait_for(pool.run(total_pipes=3), timeout=30)
        ids_after_run = recorder.pipe_ids
        pool.reset(restart=False)
        return ids_after_run

    ids_after_run = asyncio.run(main())

    assert ids_after_run == [0, 1, 2]
    assert recorder.pipe_ids == []
    assert recorder.to_trimesh() is None
    assert recorder.events[-1] == ("reset", None, None)
