"""
Pipe growth: one grower advances one pipe through the shared scene.

A grower is an explicit state machine. `step()` performs one iteration of the
growth loop synchronously; `start()` drives it as an asyncio task paced at
`1 / speed` seconds per advancing step.
"""

import asyncio
import colorsys
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence
import numpy as np
from ..core.types import Point3D, Direction3D, ColorRGB, AXIS_DIRECTIONS
from ..core.geometry import Segment, TurnMarker
from ..core.domain import BoxDomain
from ..core.result import PipeState, FinishReason, ErrorCode, PipeReport
from ..params.config import PipeConfig
from ..params.validation import require_valid
from ..spatial.grid_index import SpatialQueryService

logger = logging.getLogger(__name__)


class StepOutcome(Enum):
    """Result of a single growth iteration."""
    ADVANCED = "advanced"
    BLOCKED = "blocked"
    FINISHED = "finished"


def choose_direction(last_direction: Direction3D, rng: np.random.Generator) -> Direction3D:
    """
    Pick a new axis direction uniformly, never reversing `last_direction`.

    Parameters
    ----------
    last_direction : Direction3D
        Direction of the last advancing step
    rng : np.random.Generator
        Random source

    Returns
    -------
    Direction3D
        One of the five remaining axis directions
    """
    reverse = last_direction.negated()
    candidates = [d for d in AXIS_DIRECTIONS if d != reverse]
    return candidates[int(rng.integers(len(candidates)))]


def random_pastel_color(
    rng: np.random.Generator,
    darkness_threshold: float = 0.2,
    max_attempts: int = 100,
) -> ColorRGB:
    """
    Sample a light, saturated color, rejecting near-black draws.

    Hue is uniform, saturation and value are drawn from [0.5, 1].
    """
    for _ in range(max_attempts):
        h = rng.uniform(0.0, 1.0)
        s = rng.uniform(0.5, 1.0)
        v = rng.uniform(0.5, 1.0)
        color = ColorRGB(*colorsys.hsv_to_rgb(h, s, v))
        if not color.is_near_black(darkness_threshold):
            return color

    # full value always has one channel at 1.0
    return ColorRGB(*colorsys.hsv_to_rgb(rng.uniform(0.0, 1.0), 1.0, 1.0))


class PipeGrower:
    """
    Grows one pipe segment by segment.

    The grower owns the Segments and TurnMarkers it emits until `release()`.
    Every emitted piece is registered in the shared spatial index before any
    listener hears about it.

    Listeners are plain objects; any of ``on_segment(segment)``,
    ``on_turn(marker)`` and ``on_release(pipe_id)`` they define is called.
    """

    def __init__(
        self,
        config: PipeConfig,
        spatial_index: SpatialQueryService,
        pipe_id: int = 0,
        rng: Optional[np.random.Generator] = None,
        listeners: Optional[Sequence[object]] = None,
        on_finished: Optional[Callable[[int], None]] = None,
    ):
        """
        Initialize grower.

        Parameters
        ----------
        config : PipeConfig
            Pipe configuration, validated here (raises ValueError)
        spatial_index : SpatialQueryService
            Scene-wide occupancy shared with every other grower
        pipe_id : int
            Identity carried by every emitted piece and by the completion
            notification
        rng : np.random.Generator, optional
            Random source (fresh unseeded generator if None)
        listeners : sequence, optional
            Receivers of segment/turn/release effects
        on_finished : callable, optional
            Called once with `pipe_id` when the pipe finishes
        """
        require_valid(config)

        self.config = config
        self.pipe_id = pipe_id
        self.spatial_index = spatial_index
        self.rng = rng if rng is not None else np.random.default_rng()
        self.listeners = list(listeners or [])
        self._on_finished = on_finished

        self.domain = BoxDomain.from_extents(config.boundary_size)
        self.speed = config.speed
        self.max_turns = config.maximum_pipe_turns
        self.color = config.pipe_color or random_pastel_color(self.rng, config.darkness_threshold)

        self.position = Point3D.from_tuple(config.start_position)
        self.last_direction = Direction3D.from_tuple(config.initial_direction)
        self.direction = choose_direction(self.last_direction, self.rng)

        self.segment_count = 0  # since last turn
        self.turn_count = 0
        self.blocked_turns = 0  # consecutive, reset by every advancing step
        self.scheduled_turn_count = 0
        self.collision_turn_count = 0
        self.boundary_turn_count = 0

        self.state = PipeState.IDLE
        self.segments: List[Segment] = []
        self.turns: List[TurnMarker] = []
        self.released = False

        self.report: Optional[PipeReport] = None
        self._task: Optional[asyncio.Task] = None
        self._finished_future: Optional[asyncio.Future] = None
        self._paused = False
        self._resume_event = asyncio.Event()
        self._resume_event.set()

    def __repr__(self) -> str:
        return (
            f"PipeGrower(id={self.pipe_id}, state={self.state.value}, "
            f"turns={self.turn_count}/{self.max_turns}, segments={len(self.segments)})"
        )

    # live parameters

    def set_speed(self, speed: float) -> None:
        """Change pacing; takes effect at the next suspension."""
        if not speed > 0:
            raise ValueError(f"speed must be > 0, got {speed}")
        self.speed = speed

    def set_max_turns(self, max_turns: int) -> None:
        """
        Change the turn budget mid-flight.

        A budget below the turns already taken is raised to the current turn
        count, so the pipe finishes at its next step.
        """
        if max_turns < 0:
            raise ValueError(f"max_turns must be >= 0, got {max_turns}")
        if max_turns < self.turn_count:
            logger.debug(
                "Pipe %d: max_turns %d below current turn count %d, clamping",
                self.pipe_id, max_turns, self.turn_count,
            )
            max_turns = self.turn_count
        self.max_turns = max_turns

    def is_generating(self) -> bool:
        return self.state == PipeState.GENERATING

    def is_finished(self) -> bool:
        return self.state == PipeState.FINISHED

    def is_paused(self) -> bool:
        return self._paused

    def pause(self) -> None:
        """Hold the pacing loop at its next suspension point."""
        self._paused = True
        self._resume_event.clear()

    def resume(self) -> None:
        self._paused = False
        self._resume_event.set()

    # growth loop

    def step(self) -> StepOutcome:
        """
        Perform one iteration of the growth loop.

        Returns
        -------
        StepOutcome
            ADVANCED when a segment was emitted, BLOCKED when the candidate
            segment was rejected and a turn was made in place, FINISHED when
            the pipe is (now) finished.
        """
        if self.state == PipeState.FINISHED:
            return StepOutcome.FINISHED
        self.state = PipeState.GENERATING

        if self.turn_count >= self.max_turns:
            self._finish(FinishReason.COMPLETED)
            return StepOutcome.FINISHED

        cfg = self.config
        distance = float(self.rng.uniform(cfg.minimum_stretch_distance, cfg.maximum_stretch_distance))
        target = self.position.offset(self.direction, distance)

        if not self.domain.contains(target):
            self.boundary_turn_count += 1
            return self._blocked_turn(ErrorCode.OUTSIDE_DOMAIN)

        if self.spatial_index.query_ray(
            self.position, self.direction, distance,
            radius=cfg.clearance, owner=self.pipe_id,
        ):
            self.collision_turn_count += 1
            return self._blocked_turn(ErrorCode.COLLISION_BLOCKED)

        self._emit_segment(target)
        # a listener may have cancelled the pipe
        if self.state == PipeState.FINISHED:
            return StepOutcome.FINISHED
        self.position = target
        self.last_direction = self.direction
        self.segment_count += 1
        self.blocked_turns = 0

        if self.segment_count >= cfg.turn_frequency:
            self.scheduled_turn_count += 1
            self._turn()

        if self.state == PipeState.FINISHED:
            return StepOutcome.FINISHED
        if self.turn_count >= self.max_turns:
            self._finish(FinishReason.COMPLETED)
            return StepOutcome.FINISHED
        return StepOutcome.ADVANCED

    def _blocked_turn(self, code: ErrorCode) -> StepOutcome:
        logger.debug(
            "Pipe %d: %s at %s heading %s",
            self.pipe_id, code.value, self.position.to_tuple(), self.direction.to_tuple(),
        )
        self.blocked_turns += 1
        self._turn()

        if self.state == PipeState.FINISHED:
            return StepOutcome.FINISHED
        if self.turn_count >= self.max_turns:
            self._finish(FinishReason.COMPLETED)
            return StepOutcome.FINISHED
        if self.blocked_turns >= self.config.max_blocked_turns:
            self._finish(
                FinishReason.ENCLOSED,
                message=f"No free direction after {self.blocked_turns} attempts",
            )
            return StepOutcome.FINISHED
        return StepOutcome.BLOCKED

    def _turn(self) -> None:
        """Pick a new direction and mark the joint at the current position."""
        if self.state == PipeState.FINISHED:
            return
        self.direction = choose_direction(self.last_direction, self.rng)
        marker = TurnMarker(
            pipe_id=self.pipe_id,
            center=self.position,
            radius=self.config.turn_sphere_radius,
            color=self.color,
        )
        self.spatial_index.register(marker)
        self.turns.append(marker)
        self.turn_count += 1
        self.segment_count = 0
        self._notify("on_turn", marker)

    def _emit_segment(self, target: Point3D) -> None:
        if self.state == PipeState.FINISHED:
            return
        segment = Segment(
            pipe_id=self.pipe_id,
            start=self.position,
            end=target,
            radius=self.config.pipe_radius,
            color=self.color,
        )
        self.spatial_index.register(segment)
        self.segments.append(segment)
        self._notify("on_segment", segment)

    def _notify(self, event: str, *args) -> None:
        for listener in self.listeners:
            handler = getattr(listener, event, None)
            if handler is not None:
                handler(*args)

    def grow(self) -> PipeReport:
        """Run the loop to completion synchronously, without pacing."""
        while self.step() is not StepOutcome.FINISHED:
            pass
        return self.report

    # scheduling

    def start(self) -> asyncio.Task:
        """
        Begin growing as a task on the running event loop.

        The first step runs immediately so the pipe occupies its start
        position before any other grower moves.
        """
        if self._task is not None or self.state == PipeState.FINISHED:
            raise RuntimeError(f"Pipe {self.pipe_id} has already been started")

        loop = asyncio.get_running_loop()
        self._finished_future = loop.create_future()

        outcome = self.step()
        self._task = loop.create_task(self._drive(outcome), name=f"pipe-{self.pipe_id}")
        return self._task

    async def run(self) -> PipeReport:
        """Grow to completion on the current task, pacing between steps."""
        return await self._drive(None)

    async def _drive(self, outcome: Optional[StepOutcome]) -> PipeReport:
        try:
            if outcome is None:
                outcome = self.step()
            while outcome is not StepOutcome.FINISHED:
                await self._pace(outcome)
                outcome = self.step()
        except asyncio.CancelledError:
            self._finish(FinishReason.CANCELLED, notify=False)
            raise
        except Exception as e:
            logger.exception("Pipe %d failed while growing", self.pipe_id)
            self._finish(FinishReason.FAILED, message=f"{type(e).__name__}: {e}")
        finally:
            if self.report is not None and self.report.reason == FinishReason.CANCELLED:
                self.release()
        return self.report

    async def _pace(self, outcome: StepOutcome) -> None:
        while self._paused:
            await self._resume_event.wait()
        if outcome is StepOutcome.ADVANCED:
            await asyncio.sleep(1.0 / self.speed)
        else:
            # blocked turns do not pace, but still yield to other growers
            await asyncio.sleep(0)

    async def wait(self) -> PipeReport:
        """Wait for the started pipe to finish."""
        if self._finished_future is None:
            raise RuntimeError(f"Pipe {self.pipe_id} was never started")
        return await asyncio.shield(self._finished_future)

    def end(self) -> None:
        """Finish now, notifying completion as if the turn budget were spent."""
        self._finish(FinishReason.COMPLETED, message="Ended early")
        self._cancel_task()

    def cancel(self) -> None:
        """
        Stop growing without notifying completion and release geometry.

        Safe to call in any state; a finished pipe only releases.
        """
        self._on_finished = None
        self._cancel_task()
        self._finish(FinishReason.CANCELLED, notify=False)
        self.release()

    def _cancel_task(self) -> None:
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    def release(self) -> None:
        """Drop owned pieces and tell listeners to destroy them."""
        if self.released:
            return
        self.released = True
        self.segments = []
        self.turns = []
        self._notify("on_release", self.pipe_id)

    def _finish(self, reason: FinishReason, message: str = "", notify: bool = True) -> None:
        if self.report is not None:
            return

        self.state = PipeState.FINISHED
        self._resume_event.set()
        self.report = PipeReport(
            pipe_id=self.pipe_id,
            reason=reason,
            turn_count=self.turn_count,
            segment_count=len(self.segments),
            max_turns=self.max_turns,
            message=message or f"Pipe {self.pipe_id} {reason.value}",
            metadata={
                "final_position": self.position.to_tuple(),
                "color": self.color.to_hex(),
                "scheduled_turns": self.scheduled_turn_count,
                "collision_turns": self.collision_turn_count,
                "boundary_turns": self.boundary_turn_count,
            },
        )
        if reason == FinishReason.ENCLOSED:
            self.report.add_warning(self.report.message, ErrorCode.ENCLOSED)
        elif reason == FinishReason.FAILED:
            self.report.add_warning(self.report.message)

        logger.info(
            "Pipe %d finished (%s): %d turns, %d segments",
            self.pipe_id, reason.value, self.turn_count, len(self.segments),
        )

        if self._finished_future is not None and not self._finished_future.done():
            self._finished_future.set_result(self.report)

        callback, self._on_finished = self._on_finished, None
        if notify and callback is not None:
            callback(self.pipe_id)
