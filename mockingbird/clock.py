"""
Virtual clock for fake timers.

While fake timers are active, set_timeout/set_interval register Timer
records here instead of on the event loop, and time only moves when a
test advances it. All values are milliseconds.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Set, Tuple

from .errors import TimerLoopError

logger = logging.getLogger(__name__)


def _wall_time_ms() -> float:
    return time.time() * 1000


@dataclass(eq=False)
class Timer:
    """A pending fake timer.

    Attributes:
        id: Unique for the whole run, allocated in insertion order
        callback: Function fired when the timer is due
        due_time: Virtual time (ms) at which the timer fires
        is_interval: Whether the timer re-arms after firing
        period: Re-arm period for intervals
        args: Positional arguments passed to the callback
    """

    id: int
    callback: Callable[..., Any]
    due_time: float
    is_interval: bool = False
    period: float = 0
    args: Tuple[Any, ...] = field(default_factory=tuple)


class VirtualClock:
    """Deterministic timer scheduling and fake-time advancement."""

    def __init__(
        self,
        report: Optional[Callable[[str], None]] = None,
        loop_limit: int = 100_000,
    ):
        """
        Initialize VirtualClock.

        Args:
            report: Sink for callback error messages (defaults to the logger)
            loop_limit: Maximum timers fired by run_all_timers
        """
        self._report = report or logger.warning
        self.loop_limit = loop_limit
        self.active = False
        self.now: float = 0
        self.base_time: float = 0
        self._timers: List[Timer] = []
        self._next_id = 1
        self._tasks: Set[asyncio.Future] = set()

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def install(self) -> None:
        """Enable fake timers, resetting virtual time and anchoring wall time."""
        self.active = True
        self.now = 0
        self.base_time = _wall_time_ms()
        self._timers = []
        logger.debug("Fake timers enabled")

    def uninstall(self) -> None:
        """Disable fake timers and discard every pending timer."""
        self.active = False
        self._timers = []
        logger.debug("Fake timers disabled")

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule(
        self,
        callback: Callable[..., Any],
        delay: float = 0,
        is_interval: bool = False,
        args: Tuple[Any, ...] = (),
    ) -> int:
        """Register a timer due at now + delay and return its id."""
        delay = max(delay or 0, 0)
        if is_interval:
            # A zero period would re-arm forever inside one advance call
            delay = max(delay, 1)

        timer_id = self._next_id
        self._next_id += 1
        self._timers.append(
            Timer(
                id=timer_id,
                callback=callback,
                due_time=self.now + delay,
                is_interval=is_interval,
                period=delay if is_interval else 0,
                args=tuple(args),
            )
        )
        return timer_id

    def cancel(self, timer_id: int) -> None:
        """Remove a pending timer; unknown ids are ignored."""
        self._timers = [t for t in self._timers if t.id != timer_id]

    @property
    def timer_count(self) -> int:
        return len(self._timers)

    def get_timer_count(self) -> int:
        return self.timer_count

    def clear_all_timers(self) -> None:
        self._timers = []

    # ------------------------------------------------------------------
    # Advancement
    # ------------------------------------------------------------------

    def advance_by_time(self, ms: float) -> None:
        """Fire every timer due within the next `ms` and land exactly on now + ms.

        Timers scheduled by a firing callback are eligible in the same pass
        when they fall inside the window.
        """
        if not self._check_active("advance_timers_by_time"):
            return

        target = self.now + ms
        while True:
            timer = self._next_due(target)
            if timer is None:
                break
            self._fire(timer)

        self.now = target

    def advance_to_next_timer(self, steps: int = 1) -> None:
        """Advance by the minimal positive delta to the soonest pending timer, `steps` times.

        A timer that is already due is not fired here.
        """
        if not self._check_active("advance_timers_to_next_timer"):
            return

        for _ in range(steps):
            if not self._timers:
                return
            soonest = min(self._timers, key=lambda t: (t.due_time, t.id))
            delta = soonest.due_time - self.now
            if delta <= 0:
                # Timers already due are left for advance_by_time or run_*_timers
                return
            self.advance_by_time(delta)

    def run_only_pending_timers(self) -> None:
        """Fire the timers pending right now, ignoring any they schedule."""
        if not self._check_active("run_only_pending_timers"):
            return

        snapshot = sorted(self._timers, key=lambda t: (t.due_time, t.id))
        for timer in snapshot:
            if timer not in self._timers:
                continue
            self._fire(timer)

    def run_all_timers(self) -> None:
        """Fire timers in due order until none are pending.

        Raises:
            TimerLoopError: If more than loop_limit timers fire
        """
        if not self._check_active("run_all_timers"):
            return

        for _ in range(self.loop_limit):
            if not self._timers:
                return
            self._fire(min(self._timers, key=lambda t: (t.due_time, t.id)))

        if self._timers:
            raise TimerLoopError(
                f"Aborting after running {self.loop_limit} timers, "
                f"assuming an infinite loop!"
            )

    def _next_due(self, target: float) -> Optional[Timer]:
        due = [t for t in self._timers if t.due_time <= target]
        if not due:
            return None
        return min(due, key=lambda t: (t.due_time, t.id))

    def _fire(self, timer: Timer) -> None:
        self.now = max(self.now, timer.due_time)
        self.invoke(timer.callback, timer.args)

        # The callback may have cancelled its own timer
        if timer not in self._timers:
            return
        if timer.is_interval:
            timer.due_time += timer.period
        else:
            self._timers.remove(timer)

    def invoke(self, callback: Callable[..., Any], args: Tuple[Any, ...] = ()) -> None:
        """Call a timer callback, reporting what it raises.

        An awaitable result (an `async def` callback) is scheduled on the
        running event loop and its errors are reported when it finishes.
        """
        try:
            result = callback(*args)
        except Exception as e:
            self._report(f"Error in timer callback: {e}")
            return
        if not inspect.isawaitable(result):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(result):
                result.close()
            self._report("Error in timer callback: async callback fired outside an event loop")
            return

        task = asyncio.ensure_future(result, loop=loop)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._report(f"Error in timer callback: {error}")

    def _check_active(self, operation: str) -> bool:
        if not self.active:
            logger.warning(
                f"{operation} was called but fake timers are not enabled; "
                f"call jest.use_fake_timers() first"
            )
        return self.active

    # ------------------------------------------------------------------
    # Time source
    # ------------------------------------------------------------------

    def current_time_ms(self) -> float:
        """Epoch milliseconds, virtual while fake timers are active."""
        if self.active:
            return self.base_time + self.now
        return _wall_time_ms()

    def set_system_time(self, value: Any) -> None:
        """Make the clock-aware time source report `value` from now on."""
        if isinstance(value, datetime):
            value = value.timestamp() * 1000
        self.base_time = float(value) - self.now


class TimeSource:
    """Clock-aware replacement for `Date` handed to snippets.

    Calling it with no argument gives the current (virtual) time; any
    explicit argument bypasses the virtual clock entirely.

    Example:
        >>> Date()                      # virtual "now" while fake timers run
        >>> Date(0)                     # 1970-01-01T00:00:00+00:00
        >>> Date("2024-05-01T12:00:00")
        >>> Date.now()                  # epoch milliseconds
    """

    def __init__(self, clock: VirtualClock):
        self._clock = clock

    def __call__(self, *args: Any) -> datetime:
        if not args:
            return self._from_ms(self._clock.current_time_ms())
        if len(args) > 1:
            return datetime(*args, tzinfo=timezone.utc)

        value = args[0]
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            parsed = datetime.fromisoformat(value)
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        return self._from_ms(float(value))

    def now(self) -> int:
        return int(self._clock.current_time_ms())

    @staticmethod
    def _from_ms(ms: float) -> datetime:
        return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class _RealInterval:
    """Repeating timer on the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, period: float, fire: Callable[[], None]):
        self._loop = loop
        self._period = period
        self._fire = fire
        self._handle = loop.call_later(period, self._tick)

    def _tick(self) -> None:
        self._handle = self._loop.call_later(self._period, self._tick)
        self._fire()

    def cancel(self) -> None:
        self._handle.cancel()


class TimerApi:
    """set_timeout/set_interval bindings routed to the virtual clock when active."""

    def __init__(self, clock: VirtualClock):
        self.clock = clock

    def set_timeout(self, callback: Callable[..., Any], delay: float = 0, *args: Any):
        if self.clock.active:
            return self.clock.schedule(callback, delay, False, args)
        loop = asyncio.get_running_loop()
        return loop.call_later(max(delay, 0) / 1000, self.clock.invoke, callback, args)

    def set_interval(self, callback: Callable[..., Any], delay: float = 0, *args: Any):
        if self.clock.active:
            return self.clock.schedule(callback, delay, True, args)
        loop = asyncio.get_running_loop()
        return _RealInterval(
            loop, max(delay, 1) / 1000, lambda: self.clock.invoke(callback, args)
        )

    def clear_timeout(self, handle: Any) -> None:
        if handle is None:
            return
        if isinstance(handle, int):
            self.clock.cancel(handle)
        elif hasattr(handle, "cancel"):
            handle.cancel()

    clear_interval = clear_timeout
