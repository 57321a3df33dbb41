"""Debounce scheduler - one cancellable timer per key."""

import asyncio
import inspect
from collections.abc import Callable, Hashable
from typing import Any

from vibeguard.utils.logging import logger

log = logger.bind(component="scheduler")

Action = Callable[[], Any]


class DebounceScheduler:
    """Runs an action once input for its key has been quiet for ``delay`` seconds.

    ``schedule()`` cancels any pending timer for the key before arming a new
    one, so a continuous stream of calls defers the action until the stream
    pauses. Actions may be plain callables or coroutine functions; coroutines
    run as tasks owned by the scheduler. Errors raised by actions are logged
    and never propagate to the caller.

    Must be used from within a running event loop.
    """

    def __init__(self):
        self._timers: dict[Hashable, tuple[asyncio.TimerHandle, Action]] = {}
        self._tasks: set[asyncio.Task] = set()
        self._disposed = False
        self._stats = {"scheduled": 0, "fired": 0, "cancelled": 0, "failed": 0}

    def schedule(self, key: Hashable, delay: float, action: Action) -> bool:
        """Arm (or re-arm) the timer for ``key``. Returns False once disposed."""
        if self._disposed:
            log.debug(f"Ignoring schedule for {key}: scheduler disposed")
            return False

        self.cancel(key)
        loop = asyncio.get_running_loop()
        handle = loop.call_later(max(delay, 0.0), self._fire, key)
        self._timers[key] = (handle, action)
        self._stats["scheduled"] += 1
        return True

    def run_now(self, key: Hashable, action: Action) -> asyncio.Task | None:
        """Cancel any pending timer for ``key`` and run ``action`` immediately."""
        if self._disposed:
            return None
        self.cancel(key)
        return self._run(key, action)

    def flush(self, key: Hashable) -> asyncio.Task | None:
        """Fire the pending action for ``key`` now instead of waiting."""
        entry = self._timers.pop(key, None)
        if entry is None:
            return None
        handle, action = entry
        handle.cancel()
        return self._run(key, action)

    def cancel(self, key: Hashable) -> bool:
        entry = self._timers.pop(key, None)
        if entry is None:
            return False
        entry[0].cancel()
        self._stats["cancelled"] += 1
        return True

    def cancel_all(self) -> int:
        keys = list(self._timers)
        for key in keys:
            self.cancel(key)
        return len(keys)

    def rearm(self, delay: float) -> int:
        """Restart every pending timer with a new delay, keeping its action."""
        pending = [(key, action) for key, (_, action) in self._timers.items()]
        for key, action in pending:
            self.schedule(key, delay, action)
        return len(pending)

    def is_pending(self, key: Hashable) -> bool:
        return key in self._timers

    @property
    def pending(self) -> list[Hashable]:
        return list(self._timers)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def get_stats(self) -> dict[str, int]:
        stats = dict(self._stats)
        stats["pending"] = len(self._timers)
        stats["running"] = len(self._tasks)
        return stats

    async def drain(self) -> None:
        """Wait for every action task started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        """Cancel all pending timers and running action tasks."""
        if self._disposed:
            return
        self._disposed = True
        self.cancel_all()
        for task in list(self._tasks):
            task.cancel()
        log.debug("Debounce scheduler disposed")

    def __len__(self) -> int:
        return len(self._timers)

    def _fire(self, key: Hashable) -> None:
        entry = self._timers.pop(key, None)
        if entry is None or self._disposed:
            return
        self._run(key, entry[1])

    def _run(self, key: Hashable, action: Action) -> asyncio.Task | None:
        self._stats["fired"] += 1
        try:
            result = action()
        except Exception as e:
            self._stats["failed"] += 1
            log.opt(exception=e).error(f"Scheduled action for {key} failed")
            return None

        if not inspect.isawaitable(result):
            return None

        task = asyncio.ensure_future(result)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._task_done(key, t))
        return task

    def _task_done(self, key: Hashable, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._stats["failed"] += 1
            log.opt(exception=error).error(f"Scheduled action for {key} failed")
