"""
Pool management: keep a target number of pipes growing at once.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Sequence

import numpy as np

from ..core.types import Point3D
from ..core.domain import BoxDomain
from ..core.result import PipeReport
from ..params.config import PoolConfig
from ..params.validation import require_valid
from ..spatial.grid_index import SpatialQueryService, SpatialIndex
from .growth import PipeGrower

logger = logging.getLogger(__name__)


class PipePool:
    """
    Maintains up to ``desired_active_pipe_count`` concurrently growing pipes,
    never more than ``max_pipes_on_screen``, and replaces each pipe as soon
    as it finishes.

    All growers share one spatial index. Methods that spawn pipes must be
    called from inside a running asyncio event loop.

    Listeners are handed to every grower (see `PipeGrower`) and may also
    define ``on_reset()``, called after `reset()` has dropped every pipe.
    """

    def __init__(
        self,
        config: Optional[PoolConfig] = None,
        spatial_index: Optional[SpatialQueryService] = None,
        listeners: Optional[Sequence[object]] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize pool.

        Parameters
        ----------
        config : PoolConfig, optional
            Pool configuration, validated here (raises ValueError)
        spatial_index : SpatialQueryService, optional
            Shared occupancy; a SpatialIndex sized to the stretch range if None
        listeners : sequence, optional
            Receivers of segment/turn/release/reset effects
        seed : int, optional
            Random seed for deterministic pools
        """
        if config is None:
            config = PoolConfig()
        require_valid(config)

        self.config = config
        self.domain = BoxDomain.from_extents(config.boundary_size)
        if spatial_index is None:
            spatial_index = SpatialIndex(cell_size=max(config.pipe.maximum_stretch_distance, 1.0))
        self.spatial_index = spatial_index
        self.listeners = list(listeners or [])
        self.rng = np.random.default_rng(seed)
        self._next_pipe_id = 0

        self.active: Dict[int, PipeGrower] = {}
        self.history: Deque[PipeGrower] = deque(maxlen=config.history_limit)

        self.speed = config.pipe_speed
        self.spawned_count = 0
        self.finished_count = 0
        self.spawn_budget: Optional[int] = None

        self._paused = False
        self._filling = False
        self._closed = False
        self._idle: Optional[asyncio.Event] = None
        self._refill_handle: Optional[asyncio.Handle] = None

    def __repr__(self) -> str:
        return (
            f"PipePool(active={len(self.active)}, history={len(self.history)}, "
            f"spawned={self.spawned_count}, finished={self.finished_count})"
        )

    @property
    def active_ids(self) -> List[int]:
        return list(self.active.keys())

    @property
    def finished_ids(self) -> List[int]:
        return [grower.pipe_id for grower in self.history]

    def ensure_desired_concurrency(self) -> List[int]:
        """
        Spawn growers until the target count (bounded by the cap) is active.

        Returns
        -------
        list of int
            IDs of the pipes spawned by this call
        """
        if self._filling or self._closed:
            return []

        new_ids = []
        self._filling = True
        try:
            for _ in range(self._open_slots()):
                grower = self._spawn()
                if grower is None:
                    break
                new_ids.append(grower.pipe_id)
        finally:
            self._filling = False

        # pipes that finished inside their first step left slots open
        if new_ids and self._open_slots() > 0 and self._refill_handle is None:
            self._refill_handle = asyncio.get_running_loop().call_soon(self._deferred_refill)

        self._check_idle()
        return new_ids

    def _open_slots(self) -> int:
        gap = self.config.target_active_count - len(self.active)
        if self.spawn_budget is not None:
            gap = min(gap, self.spawn_budget - self.spawned_count)
        return max(gap, 0)

    def _deferred_refill(self) -> None:
        self._refill_handle = None
        self.ensure_desired_concurrency()

    def _cancel_refill(self) -> None:
        if self._refill_handle is not None:
            self._refill_handle.cancel()
            self._refill_handle = None

    def _spawn(self) -> Optional[PipeGrower]:
        start = self._pick_start_position()
        if start is None:
            logger.warning(
                "No free start position after %d attempts; deferring spawn",
                self.config.start_attempts,
            )
            return None

        pipe_id = self._next_pipe_id
        self._next_pipe_id += 1
        max_turns = int(self.rng.integers(
            self.config.min_pipe_turns, self.config.max_pipe_turns, endpoint=True,
        ))
        pipe_config = self.config.pipe.with_overrides(
            maximum_pipe_turns=max_turns,
            speed=self.speed,
            boundary_size=tuple(self.config.boundary_size),
            start_position=start.to_tuple(),
        )

        grower = PipeGrower(
            pipe_config,
            self.spatial_index,
            pipe_id=pipe_id,
            rng=np.random.default_rng(self.rng.integers(0, 2**63 - 1)),
            listeners=self.listeners,
            on_finished=self.on_pipe_finished,
        )
        if self._paused:
            grower.pause()

        self.active[pipe_id] = grower
        self.spawned_count += 1
        logger.info(
            "Spawning pipe %d at %s with %d turns (%d active)",
            pipe_id, start.to_tuple(), max_turns, len(self.active),
        )
        grower.start()
        return grower

    def _pick_start_position(self) -> Optional[Point3D]:
        """The template start when free, else a random free point in the box."""
        clearance = self.config.pipe.clearance
        preferred = Point3D.from_tuple(self.config.pipe.start_position)
        if self.domain.contains(preferred) and not self.spatial_index.is_occupied(preferred, clearance):
            return preferred

        samples = self.domain.sample_points(self.config.start_attempts, rng=self.rng)
        for row in samples:
            point = Point3D.from_array(row)
            if not self.spatial_index.is_occupied(point, clearance):
                return point
        return None

    def on_pipe_finished(self, pipe_id: int) -> None:
        """Completion notification from a grower: recycle and refill."""
        grower = self.active.pop(pipe_id, None)
        if grower is None:
            return

        # the evicted pipe is released so listeners drop it
        if self.history.maxlen is not None and len(self.history) == self.history.maxlen:
            if self.history:
                self.history[0].release()
            else:
                grower.release()
        self.history.append(grower)
        self.finished_count += 1

        report = grower.report
        if report is None or report.is_success():
            logger.info("Pipe %d finished; %d still active", pipe_id, len(self.active))
        else:
            logger.warning("Pipe %d stopped early: %s", pipe_id, report.message)

        self.ensure_desired_concurrency()
        self._check_idle()

    def reset(self, restart: bool = True) -> List[int]:
        """
        Cancel every active pipe, drop all geometry and history.

        Parameters
        ----------
        restart : bool
            Refill the pool afterwards (needs a running event loop)

        Returns
        -------
        list of int
            IDs spawned by the restart
        """
        self._cancel_refill()
        cancelled = len(self.active)
        for grower in list(self.active.values()):
            grower.cancel()
        for grower in self.history:
            grower.release()

        self.active.clear()
        self.history.clear()
        self.spatial_index.clear()
        self.spawned_count = 0
        self.finished_count = 0
        self._closed = False

        for listener in self.listeners:
            handler = getattr(listener, "on_reset", None)
            if handler is not None:
                handler()

        logger.info("Reset pipes (%d cancelled)", cancelled)
        if restart:
            return self.ensure_desired_concurrency()
        self._check_idle()
        return []

    def set_speed(self, speed: float) -> None:
        """Change the pacing of every active pipe and of future pipes."""
        if not speed > 0:
            raise ValueError(f"speed must be > 0, got {speed}")
        self.speed = speed
        for grower in self.active.values():
            grower.set_speed(speed)

    def pause(self) -> None:
        self._paused = True
        for grower in self.active.values():
            grower.pause()

    def resume(self) -> None:
        self._paused = False
        for grower in self.active.values():
            grower.resume()

    def is_paused(self) -> bool:
        return self._paused

    def _check_idle(self) -> None:
        if (
            self._idle is not None
            and not self.active
            and not self._filling
            and self._refill_handle is None
        ):
            self._idle.set()

    async def run(self, total_pipes: Optional[int] = None) -> List[PipeReport]:
        """
        Fill the pool and keep it filled.

        Parameters
        ----------
        total_pipes : int, optional
            Stop spawning after this many pipes and return once they have all
            finished. Runs until cancelled when None.

        Returns
        -------
        list of PipeReport
            Reports of the pipes still held in history
        """
        self.spawn_budget = total_pipes
        self._closed = False
        self._idle = asyncio.Event()
        try:
            self.ensure_desired_concurrency()
            await self._idle.wait()
        except asyncio.CancelledError:
            self.close()
            raise
        finally:
            self._idle = None
            self.spawn_budget = None

        return [grower.report for grower in self.history]

    def close(self) -> None:
        """Cancel all active pipes and stop spawning; history is kept."""
        self._closed = True
        self._cancel_refill()
        for grower in list(self.active.values()):
            grower.cancel()
            self.active.pop(grower.pipe_id, None)

    def stats(self) -> dict:
        """Summary of the pool for logging and inspection."""
        reasons: Dict[str, int] = {}
        for grower in self.history:
            if grower.report is not None:
                key = grower.report.reason.value
                reasons[key] = reasons.get(key, 0) + 1
        return {
            "active": len(self.active),
            "history": len(self.history),
            "spawned": self.spawned_count,
            "finished": self.finished_count,
            "pieces": len(self.spatial_index),
            "finish_reasons": reasons,
        }
