"""Per-participant turn countdown.

The scheduler never reads wall-clock time itself. It asks a :class:`Clock`
for a repeating callback and reacts to each tick, so tests can drive it with
:class:`ManualClock` and a live front end can use :class:`AsyncioClock`.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from src.auction_manager.config import TICK_INTERVAL_SECONDS, TURN_SECONDS

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class TimerHandle:
    """Cancellation handle for a repeating timer. ``cancel()`` is idempotent."""

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None):
        self._on_cancel = on_cancel
        self.cancelled = False

    def cancel(self):
        if self.cancelled:
            return
        self.cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()


class Clock:
    """Port for scheduling a repeating callback."""

    def schedule_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> TimerHandle:
        raise NotImplementedError


class ManualClock(Clock):
    """Clock driven by explicit ``advance()`` calls (synthetic ticks)."""

    def __init__(self):
        self._timers: List[tuple] = []

    @property
    def active_timers(self) -> int:
        return sum(1 for handle, _ in self._timers if not handle.cancelled)

    def schedule_repeating(self, interval, callback):
        handle = TimerHandle()
        self._timers.append((handle, callback))
        return handle

    def advance(self, ticks: int = 1):
        """Fire every live timer once per tick.

        Timers created or cancelled by a callback take effect from the next
        tick onward.
        """
        for _ in range(ticks):
            self._timers = [(h, cb) for h, cb in self._timers if not h.cancelled]
            for handle, callback in list(self._timers):
                if not handle.cancelled:
                    callback()


class AsyncioClock(Clock):
    """Real-time clock on an asyncio event loop (``loop.call_later``)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule_repeating(self, interval, callback):
        loop = self._loop or asyncio.get_running_loop()
        pending = {}

        def _fire():
            if handle.cancelled:
                return
            callback()
            if not handle.cancelled:
                pending["timer"] = loop.call_later(interval, _fire)

        def _cancel():
            timer = pending.pop("timer", None)
            if timer is not None:
                timer.cancel()

        handle = TimerHandle(on_cancel=_cancel)
        pending["timer"] = loop.call_later(interval, _fire)
        return handle


class TurnScheduler:
    """Round-robin turn countdown with Idle / Running / Paused states.

    Turns advance on timeout, explicit pass, or a placed bid; all three go
    through :meth:`advance` so the post-conditions are identical.
    """

    def __init__(
        self,
        clock: Clock,
        turn_seconds: int = TURN_SECONDS,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        on_advance: Optional[Callable[[int], None]] = None,
        on_tick: Optional[Callable[[], None]] = None,
    ):
        self.clock = clock
        self.turn_seconds = turn_seconds
        self.tick_interval = tick_interval
        self.on_advance = on_advance
        self.on_tick = on_tick
        self.state = SchedulerState.IDLE
        self.participant_count = 0
        self.current_index = 0
        self.remaining = turn_seconds
        self._timer: Optional[TimerHandle] = None

    @property
    def is_running(self) -> bool:
        return self.state == SchedulerState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self.state == SchedulerState.PAUSED

    @property
    def is_idle(self) -> bool:
        return self.state == SchedulerState.IDLE

    def open(self, participant_count: int):
        """Start a fresh countdown at turn 0. Stays Idle with no participants."""
        self.close()
        self.participant_count = participant_count
        self.current_index = 0
        self.remaining = self.turn_seconds
        if participant_count <= 0:
            logger.debug("No participants, scheduler stays idle")
            return
        self._restart_timer()

    def tick(self):
        """One elapsed time unit. Ignored unless Running."""
        if not self.is_running:
            return
        self.remaining -= 1
        if self.remaining <= 0:
            logger.debug("Turn %d timed out", self.current_index)
            self.advance()
        if self.on_tick is not None:
            self.on_tick()

    def advance(self):
        """Hand the turn to the next participant and restart the countdown."""
        if self.is_idle:
            return
        self.current_index = (self.current_index + 1) % self.participant_count
        self.remaining = self.turn_seconds
        self._restart_timer()
        logger.debug("Turn passed to index %d", self.current_index)
        if self.on_advance is not None:
            self.on_advance(self.current_index)

    def pause(self):
        if self.is_running:
            self.state = SchedulerState.PAUSED

    def resume(self):
        if self.is_paused:
            self.state = SchedulerState.RUNNING

    def toggle_pause(self) -> bool:
        """Flip between Running and Paused. Returns the new paused flag."""
        if self.is_running:
            self.pause()
        else:
            self.resume()
        return self.is_paused

    def close(self):
        """Cancel the timer and go Idle. Safe to call repeatedly."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.state = SchedulerState.IDLE

    def set_participant_count(
        self, participant_count: int, removed_index: Optional[int] = None
    ):
        """Keep the turn index valid after participants join or leave.

        ``removed_index`` is the list position of a participant who just left;
        when it sits before the current turn the index shifts down with it so
        the same participant keeps the turn.
        """
        if self.is_idle:
            self.participant_count = participant_count
            return
        if participant_count <= 0:
            self.close()
            self.participant_count = 0
            self.current_index = 0
            return
        self.participant_count = participant_count
        if removed_index is not None and removed_index < self.current_index:
            self.current_index -= 1
            return
        if removed_index == self.current_index:
            self.remaining = self.turn_seconds
        if self.current_index >= participant_count:
            self.current_index = 0
            self.remaining = self.turn_seconds

    def _restart_timer(self):
        # A restarted countdown always runs, even if the previous turn was paused.
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.clock.schedule_repeating(self.tick_interval, self.tick)
        self.state = SchedulerState.RUNNING
