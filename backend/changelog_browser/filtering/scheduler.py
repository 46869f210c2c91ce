"""Cancellable deferred callbacks.

Each timer purpose in the engine (search debounce, the second render phase,
scrolling, ...) owns a TaskSlot. Scheduling into a slot cancels whatever was
pending there, so at most one task per purpose is ever outstanding.
"""

import asyncio
import heapq
import itertools
from abc import ABC
from abc import abstractmethod
from collections.abc import Callable

from changelog_browser.utils.logger import setup_logger

logger = setup_logger()


class ScheduledTask(ABC):
    @abstractmethod
    def cancel(self) -> None: ...

    @property
    @abstractmethod
    def cancelled(self) -> bool: ...


class Scheduler(ABC):
    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        ...


class TaskSlot:
    """Holds at most one pending task."""

    def __init__(self, scheduler: Scheduler, name: str) -> None:
        self._scheduler = scheduler
        self.name = name
        self._task: ScheduledTask | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.cancel()

        def _run() -> None:
            self._task = None
            callback()

        self._task = self._scheduler.call_later(delay_ms, _run)

    def cancel(self) -> bool:
        """Cancel the pending task. Returns whether there was one."""
        if self._task is None:
            return False
        self._task.cancel()
        self._task = None
        return True


class TaskGroup:
    """Any number of pending tasks that are always cancelled together."""

    def __init__(self, scheduler: Scheduler, name: str) -> None:
        self._scheduler = scheduler
        self.name = name
        self._tasks: set[ScheduledTask] = set()

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> None:
        task: ScheduledTask | None = None

        def _run() -> None:
            self._tasks.discard(task)  # type: ignore[arg-type]
            callback()

        task = self._scheduler.call_later(delay_ms, _run)
        self._tasks.add(task)

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()


class _AsyncioTask(ScheduledTask):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Runs callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTask(loop.call_later(delay_ms / 1000, callback))


class _ManualTask(ScheduledTask):
    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Virtual clock; callbacks only run when time is advanced.

    Used to render a page in one go on the server and to drive the engine
    step by step in tests.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: list[tuple[int, int, _ManualTask]] = []
        self._sequence = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledTask:
        task = _ManualTask(self.now_ms + max(0, delay_ms), callback)
        heapq.heappush(self._queue, (task.due_ms, next(self._sequence), task))
        return task

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, delay_ms: int) -> int:
        """Move the clock forward, running everything that falls due.

        Tasks scheduled by callbacks run too if they fall inside the window.
        Returns the number of callbacks run.
        """
        target = self.now_ms + delay_ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due_ms, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now_ms = due_ms
            task.callback()
            ran += 1
        self.now_ms = target
        return ran

    def run_all(self, max_callbacks: int = 10_000) -> int:
        ran = 0
        while self._queue:
            due_ms, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self.now_ms = max(self.now_ms, due_ms)
            task.callback()
            ran += 1
            if ran >= max_callbacks:
                logger.warning(f"ManualScheduler.run_all stopped after {ran} callbacks")
                break
        return ran
