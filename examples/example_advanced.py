"""
Advanced example driving growers and the pool by hand.

This example demonstrates:
1. Stepping a single grower through its state machine
2. Changing speed and pausing a live pool
3. Resetting the scene and starting over
"""

import asyncio
import logging

import numpy as np

from pipes_lib import PipeConfig, PipeGrower, PipePool, SpatialIndex, StepOutcome, get_preset
from pipes_lib.adapters import MeshRecorder

logging.basicConfig(level=logging.INFO)

print("Stepping one pipe...")
index = SpatialIndex(cell_size=5.0)
grower = PipeGrower(
    PipeConfig(maximum_pipe_turns=12, boundary_size=(30.0, 30.0, 30.0)),
    index,
    rng=np.random.default_rng(1),
)
outcomes = []
while (outcome := grower.step()) is not StepOutcome.FINISHED:
    outcomes.append(outcome.value)
print(f"Outcomes: {outcomes}")
print(f"Report: {grower.report.to_dict()}")


async def live_pool():
    recorder = MeshRecorder()
    pool = PipePool(get_preset("dense"), listeners=[recorder], seed=3)

    runner = asyncio.create_task(pool.run())
    await asyncio.sleep(2.0)

    print("Speeding up...")
    pool.set_speed(20.0)
    await asyncio.sleep(1.0)

    print("Pausing...")
    pool.pause()
    pieces = len(pool.spatial_index)
    await asyncio.sleep(0.5)
    print(f"Pieces while paused: {pieces} -> {len(pool.spatial_index)}")
    pool.resume()

    print("Resetting...")
    pool.reset()
    await asyncio.sleep(1.0)
    print(f"After reset: {pool.stats()}")

    runner.cancel()
    try:
        await runner
    except asyncio.CancelledError:
        pass
    return recorder


recorder = asyncio.run(live_pool())
print(f"Pipes still recorded: {recorder.pipe_ids}")
