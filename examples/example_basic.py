"""
Basic example of growing pipes with a pool.

This example demonstrates:
1. Running a pool of concurrent pipes until a fixed number have finished
2. Reading the completion reports
3. Exporting everything that was drawn as a mesh
"""

import asyncio
import logging

from pipes_lib import PipePool, get_preset
from pipes_lib.adapters import MeshRecorder

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

recorder = MeshRecorder()
pool = PipePool(get_preset("sparse_debug"), listeners=[recorder], seed=7)

print("Growing pipes...")
reports = asyncio.run(pool.run(total_pipes=6))

print("\n=== Pipe Reports ===")
for report in reports:
    print(
        f"Pipe {report.pipe_id}: {report.reason.value}, "
        f"{report.turn_count}/{report.max_turns} turns, {report.segment_count} segments"
    )
print(f"Pool: {pool.stats()}")

mesh = recorder.to_trimesh()
if mesh is not None:
    mesh.export("pipes.glb")
    print(f"Exported {len(mesh.faces)} faces to pipes.glb")
