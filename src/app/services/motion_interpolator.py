from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from src.domain.algorithms.interpolation import interpolate_frames
from src.domain.algorithms.interpolation import progress as progress_fraction
from src.domain.models.realtime import AnimationFrame, Snapshot

logger = logging.getLogger(__name__)

SnapshotPairSource = Callable[[], tuple[Snapshot, Snapshot]]
FrameSink = Callable[[tuple[AnimationFrame, ...]], "Awaitable[None] | None"]


@dataclass(slots=True)
class MotionInterpolator:
    """Turns consecutive snapshots into smooth per-frame positions.

    Progress is measured on this object's own clock from the moment a new
    (previous, current) pair is first observed, and is clamped to [0, 1].
    """

    window_s: float = 30.0
    clock: Callable[[], float] = time.monotonic

    _pair: tuple[Snapshot, Snapshot] | None = field(default=None, init=False)
    _baseline: float = field(default=0.0, init=False)

    def observe(self, previous: Snapshot, current: Snapshot) -> bool:
        """Track a snapshot pair; return True if it is new and progress restarted."""

        if self._pair is not None:
            old_previous, old_current = self._pair
            if current is old_current or current == old_current:
                if previous is old_previous or previous == old_previous:
                    return False

        self._pair = (previous, current)
        self._baseline = self.clock()
        return True

    def progress(self, now: float | None = None) -> float:
        if self._pair is None:
            return 0.0
        at = self.clock() if now is None else now
        return progress_fraction(at - self._baseline, self.window_s)

    def frames(self, now: float | None = None) -> tuple[AnimationFrame, ...]:
        if self._pair is None:
            return ()
        previous, current = self._pair
        return interpolate_frames(previous, current, self.progress(now))


@dataclass(slots=True)
class FrameLoop:
    """Cooperative render loop feeding interpolated frames to a sink.

    Pulls the latest snapshot pair from `source` each tick, so snapshots may
    arrive at any cadence independent of the frame rate.
    """

    interpolator: MotionInterpolator
    source: SnapshotPairSource
    sink: FrameSink
    fps: float = 30.0

    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> tuple[AnimationFrame, ...]:
        previous, current = self.source()
        self.interpolator.observe(previous, current)
        frames = self.interpolator.frames()
        result = self.sink(frames)
        if inspect.isawaitable(result):
            await result
        return frames

    async def _run_forever(self) -> None:
        delay = 1.0 / self.fps if self.fps > 0 else 0.0
        while True:
            try:
                await self.tick()
            except Exception:
                logger.exception("Frame sink failed")
            await asyncio.sleep(delay)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run_forever(), name="frame-loop")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("Stopped frame loop")
