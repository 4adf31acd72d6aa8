from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from .models import Timing

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerService(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioTimers:
    """
    Timer service backed by the running asyncio loop. Callbacks run on the loop
    thread, serialized with transcript handling.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)


@dataclass
class ManualTimer:
    due_ms: int
    seq: int
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback regardless of cancellation, like an already queued timer."""
        self.fired = True
        self.callback()


@dataclass
class ManualTimers:
    """
    Virtual clock for deterministic runs. Nothing fires until `advance()` is
    called; every handle ever created stays inspectable in `timers`.
    """

    now_ms: int = 0
    timers: List[ManualTimer] = field(default_factory=list)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(due_ms=self.now_ms + delay_ms, seq=len(self.timers), callback=callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, delta_ms: int) -> int:
        """Move the clock forward, firing due timers in order. Returns how many fired."""
        target = self.now_ms + delta_ms
        fired = 0
        while True:
            due = [t for t in self.pending() if t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due_ms, t.seq))
            self.now_ms = timer.due_ms
            timer.fire()
            fired += 1
        self.now_ms = target
        return fired


class PacingTarget(Protocol):
    @property
    def timing(self) -> Timing:
        ...

    def render_current(self) -> None:
        ...

    def has_next(self) -> bool:
        ...

    def advance(self) -> None:
        ...


class Scheduler:
    """
    Auto-advance engine. Renders the next chunk `overlap_ms` after the current
    one starts, for as long as auto-advance is on and chunks remain.

    Every start/stop bumps `token`; a scheduled callback only acts if the token
    it captured is still current, so a stale timer can never render.
    """

    def __init__(self, target: PacingTarget, timers: TimerService):
        self.target = target
        self.timers = timers
        self.token = 0
        self.auto_advancing = False
        self.resume_pending = False
        self._handle: Optional[TimerHandle] = None

    @property
    def active(self) -> bool:
        return self.auto_advancing or self.resume_pending

    def start(self, auto_advance: bool = True) -> None:
        self._invalidate()
        self.auto_advancing = auto_advance
        self.resume_pending = False
        self.target.render_current()
        self._schedule_next()

    def stop(self) -> None:
        self._invalidate()
        if self.auto_advancing or self.resume_pending:
            logger.info("Auto-advance stopped")
        self.auto_advancing = False
        self.resume_pending = False

    def reschedule_after_speed_change(self, delay_ms: int) -> None:
        """Stop now and start again from the same chunk after `delay_ms`."""
        self.stop()
        if delay_ms <= 0:
            self.start()
            return
        self.resume_pending = True
        token = self.token
        self._handle = self.timers.call_later(delay_ms, lambda: self._on_resume(token))

    def _invalidate(self) -> None:
        self.token += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule_next(self) -> None:
        if not self.auto_advancing:
            return
        if not self.target.has_next():
            self.auto_advancing = False
            logger.info("Auto-advance reached the last chunk")
            return
        token = self.token
        self._handle = self.timers.call_later(self.target.timing.overlap_ms, lambda: self._on_tick(token))

    def _on_tick(self, token: int) -> None:
        if token != self.token:
            logger.debug("Discarding stale tick (token %s, current %s)", token, self.token)
            return
        self._handle = None
        self.target.advance()
        self.target.render_current()
        self._schedule_next()

    def _on_resume(self, token: int) -> None:
        if token != self.token:
            logger.debug("Discarding stale resume (token %s, current %s)", token, self.token)
            return
        self._handle = None
        self.start()
