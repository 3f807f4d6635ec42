"""Debounced call coalescing on the event loop."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

from teamwatch.logging import get_logger

log = get_logger("broadcast")


class DebouncedEmitter:
    """Delays a callback until calls stop arriving for ``delay`` seconds.

    Every call cancels the pending timer and schedules a new one with the
    new call's arguments, so a burst of calls yields a single callback
    invocation carrying the arguments of the last call. The callback may be
    a plain function or a coroutine function.

    Example:
        emit = DebouncedEmitter(gateway.publish_task_changed, 0.3, name="tasks")
        emit(task_a, "change")
        emit(task_b, "change")   # only task_b is delivered
    """

    def __init__(self, callback: Callable[..., Any], delay: float, name: str = "") -> None:
        self._callback = callback
        self._delay = max(0.0, delay)
        self.name = name or getattr(callback, "__name__", "debounced")

        self._timer: asyncio.Task[None] | None = None
        # Deliveries already past their quiet period; not cancelled by new calls
        self._delivering: set[asyncio.Task[None]] = set()
        self.fire_count = 0

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a call is waiting for its quiet period to elapse."""
        return self._timer is not None and not self._timer.done()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        """Schedule the callback, replacing any pending call.

        Must be called from within a running event loop.
        """
        self.cancel()
        self._timer = asyncio.create_task(
            self._fire_later(args, kwargs), name=f"debounce:{self.name}"
        )

    async def _fire_later(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        await asyncio.sleep(self._delay)

        task = asyncio.current_task()
        if self._timer is task:
            self._timer = None
        if task is not None:
            self._delivering.add(task)
        try:
            result = self._callback(*args, **kwargs)
            if inspect.isawaitable(result):
                await result
            self.fire_count += 1
        except Exception:
            log.exception("Debounced %s callback failed", self.name)
        finally:
            if task is not None:
                self._delivering.discard(task)

    def cancel(self) -> bool:
        """Discard the pending call, if any.

        Returns:
            True if a pending call was discarded
        """
        timer, self._timer = self._timer, None
        if timer is None or timer.done():
            return False
        timer.cancel()
        return True

    async def wait_idle(self) -> None:
        """Wait until no call is pending or being delivered."""
        while self.pending or self._delivering:
            tasks = [t for t in (self._timer, *self._delivering) if t is not None]
            await asyncio.gather(*tasks, return_exceptions=True)
