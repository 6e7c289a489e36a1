"""
Sampling Scheduler - Pulls frames on a fixed period and feeds a session
"""

import asyncio
import contextlib
import logging
from typing import Any, Optional

from .exceptions import FrameNotReadyError
from .perception.frame_quality import check_frame_ready
from .perception.port import FrameSource, PerceptionPort, Sample

logger = logging.getLogger(__name__)


class SamplingScheduler:
    """
    Drives one session's sampling loop.

    Cycles never overlap: the next tick is only awaited after the current
    cycle's perception calls return. Ticks missed while a cycle overran are
    dropped, not replayed. Any failure inside a cycle skips that sample.

    After stop() returns no further sample reaches the session.
    """

    def __init__(
        self,
        session: Any,
        frame_source: FrameSource,
        perception: PerceptionPort,
        period: float = 2.0,
        min_brightness: float = 5.0,
    ):
        if period <= 0:
            raise ValueError("Sampling period must be greater than 0")
        self.session = session
        self.period = period
        self.min_brightness = min_brightness
        self.ticks_dropped = 0
        self._frame_source = frame_source
        self._perception = perception
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._stopped:
            raise RuntimeError("Scheduler has been stopped")
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Sampling started for session {self.session.id} every {self.period:.2f}s")

    async def stop(self) -> None:
        """Stop sampling and wait until the loop has exited"""
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        logger.info(f"Sampling stopped for session {self.session.id}")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while not self._stopped:
            await self.sample_once()

            next_tick += self.period
            now = loop.time()
            if now > next_tick:
                missed = int((now - next_tick) // self.period) + 1
                self.ticks_dropped += missed
                next_tick += missed * self.period
                logger.debug(f"Sampling cycle overran, dropped {missed} tick(s)")

            await asyncio.sleep(next_tick - now)

    async def sample_once(self) -> bool:
        """
        Run one evaluation cycle.

        Returns:
            True if a sample reached the session
        """
        if self._stopped or not self.session.is_active:
            return False

        loop = asyncio.get_running_loop()
        try:
            # Capture devices block on read
            frame = await loop.run_in_executor(None, self._frame_source.read)
            quality = check_frame_ready(frame, self.min_brightness)
            if not quality["is_ready"]:
                raise FrameNotReadyError(",".join(quality["issues"]))

            faces = await self._perception.estimate_faces(frame)
            objects = await self._perception.detect_objects(frame)
        except Exception as e:
            self.session.record_skipped(f"{type(e).__name__}: {e}")
            return False

        # stop() may have been requested while perception was running
        if self._stopped or not self.session.is_active:
            return False

        self.session.process_sample(Sample(faces=tuple(faces), objects=tuple(objects)))
        return True
