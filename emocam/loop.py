"""
Detection loop: polls the video sink on a fixed period and feeds the detector.

States:
  IDLE       no polling task
  POLLING    task scheduled, waiting for the next tick
  IN_FLIGHT  a detection call is outstanding

Ticks never overlap. When a detection call overruns the period, the missed
ticks are skipped rather than queued. A detector call still running after
stop() keeps blocking new dispatches until its worker thread returns.
"""
# emocam/loop.py
from __future__ import annotations
from enum import Enum
from typing import Callable, Optional
import asyncio
import contextlib
import logging

from emocam.models import Detection

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    IN_FLIGHT = "in_flight"


class DetectionLoop:
    def __init__(self,
                 interval: float,
                 sink,
                 overlay,
                 detector,
                 on_result: Callable[[Optional[Detection]], None],
                 expression_min_confidence: float = 0.1):
        self.interval = float(interval)
        self.sink = sink
        self.overlay = overlay
        self.detector = detector
        self.on_result = on_result
        self.expression_min_confidence = expression_min_confidence
        self.state = LoopState.IDLE
        self.ticks = 0
        self.skipped = 0
        self.max_in_flight = 0
        self._in_flight = 0
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ---- lifecycle ----
    def start(self) -> None:
        """Begin polling; an existing polling task is cancelled first."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._generation += 1
        self.state = LoopState.POLLING
        self._task = asyncio.get_running_loop().create_task(self._run(self._generation))
        logger.debug(f"[loop] polling every {self.interval:.3f}s (generation={self._generation})")

    async def stop(self) -> None:
        """Cancel polling and wait for the task; no result is applied afterwards."""
        self._generation += 1
        task, self._task = self._task, None
        self.state = LoopState.IDLE
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.debug("[loop] polling stopped")

    async def _run(self, generation: int) -> None:
        clock = asyncio.get_running_loop()
        while generation == self._generation:
            started = clock.time()
            try:
                await self.tick(generation)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("[loop] tick failed; continuing")
            elapsed = clock.time() - started
            if elapsed > self.interval:
                missed = int(elapsed // self.interval)
                self.skipped += missed
                logger.debug(f"[loop] tick took {elapsed:.3f}s, skipping {missed} tick(s)")
            await asyncio.sleep(self.interval - (elapsed % self.interval))

    # ---- one tick ----
    @property
    def busy(self) -> bool:
        """A detector call is still running, possibly left over from before a stop()."""
        return self._in_flight > 0

    def _dispatch(self, frame) -> asyncio.Future:
        fut = asyncio.get_running_loop().run_in_executor(None, self.detector.detect, frame)
        self._in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self._in_flight)

        def _done(f: asyncio.Future) -> None:
            self._in_flight -= 1
            if not f.cancelled():
                # mark retrieved; a tick abandoned by stop() never awaits it
                f.exception()

        fut.add_done_callback(_done)
        return fut

    async def tick(self, generation: Optional[int] = None) -> None:
        if generation is None:
            generation = self._generation

        frame = self.sink.read()
        if frame is None:
            # Device has no data yet; retried next tick
            return
        if self.busy:
            self.skipped += 1
            return
        self.ticks += 1
        h, w = frame.shape[:2]
        self.overlay.match_dimensions(w, h)

        self.state = LoopState.IN_FLIGHT
        fut = self._dispatch(frame.copy())
        try:
            # Cancelling the tick must not mark the worker as finished
            detection = await asyncio.shield(fut)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("[loop] detection failed; treating tick as a miss")
            detection = None
        finally:
            if self.state == LoopState.IN_FLIGHT:
                self.state = LoopState.POLLING if self.running else LoopState.IDLE

        if generation != self._generation:
            return

        self.overlay.clear()
        if detection is None:
            self.on_result(None)
            return

        resized = detection.resize(self.overlay.width, self.overlay.height)
        self.overlay.draw_detection(resized)
        self.overlay.draw_expressions(resized, self.expression_min_confidence)
        self.on_result(resized)
