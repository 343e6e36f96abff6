"""Debounce aggregator collapsing media-group file events into one batch."""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Generic, List, Optional, Set, TypeVar

from common.logging_config import get_logger
from registry.config import (
    MEDIA_GROUP_MAX_FILES,
    MEDIA_GROUP_MAX_WAIT_SECONDS,
    MEDIA_GROUP_WINDOW_SECONDS,
)

logger = get_logger(__name__)

T = TypeVar("T")

FlushHandler = Callable[[str, List[T]], Awaitable[None]]


@dataclass
class PendingGroup(Generic[T]):
    """
    Events collected so far for one group key.

    Attributes:
        key: Group key supplied by the transport
        started_at: Event-loop time of the first arrival
        events: Events in arrival order
        mailbox: One tick per arrival, consumed by the group's actor task
        closed: Set once the group is detached from pending state
    """
    key: str
    started_at: float
    events: List[T] = field(default_factory=list)
    mailbox: "asyncio.Queue[None]" = field(default_factory=asyncio.Queue)
    closed: bool = False
    task: Optional["asyncio.Task[None]"] = None


class MediaGroupAggregator(Generic[T]):
    """
    Groups events sharing a key and hands each group to a flush handler once.

    Each pending group is served by its own actor task that waits on the
    group's mailbox. Every arrival resets the debounce window, so the window
    measures the gap between arrivals rather than total group duration. A
    group is also flushed as soon as it reaches max_group_size events or has
    been open for max_wait seconds; later events with the same key then start
    a new group.
    """

    def __init__(
        self,
        on_flush: FlushHandler,
        window: float = MEDIA_GROUP_WINDOW_SECONDS,
        max_group_size: Optional[int] = MEDIA_GROUP_MAX_FILES,
        max_wait: Optional[float] = MEDIA_GROUP_MAX_WAIT_SECONDS,
    ):
        """
        Args:
            on_flush: Coroutine called with (group_key, events) once per group
            window: Debounce window in seconds
            max_group_size: Flush immediately at this many events (None disables)
            max_wait: Flush a group this many seconds after its first event (None disables)
        """
        if window <= 0:
            raise ValueError("window must be positive")
        self.on_flush = on_flush
        self.window = window
        self.max_group_size = max_group_size
        self.max_wait = max_wait
        self._pending: Dict[str, PendingGroup[T]] = {}
        self._tasks: Set["asyncio.Task[None]"] = set()

    @property
    def pending_keys(self) -> List[str]:
        return list(self._pending)

    def submit(self, group_key: str, event: T) -> None:
        """
        Add an event to its group, creating the group on first sight.

        Must be called from within the running event loop.
        """
        group = self._pending.get(group_key)
        if group is None:
            loop = asyncio.get_running_loop()
            group = PendingGroup(key=group_key, started_at=loop.time())
            self._pending[group_key] = group
            group.task = loop.create_task(self._run_group(group))
            self._tasks.add(group.task)
            group.task.add_done_callback(self._tasks.discard)
            logger.debug(f"Opened media group {group_key}")

        group.events.append(event)
        if self.max_group_size is not None and len(group.events) >= self.max_group_size:
            logger.info(f"Media group {group_key} reached {len(group.events)} file(s), flushing early")
            self._detach(group)
        group.mailbox.put_nowait(None)

    async def aclose(self, flush: bool = True) -> None:
        """
        Shut down: flush (or drop) every pending group and wait for handlers.

        Args:
            flush: Hand pending groups to the flush handler instead of dropping them
        """
        for group in list(self._pending.values()):
            self._detach(group)
            if flush:
                group.mailbox.put_nowait(None)
            elif group.task is not None:
                logger.warning(f"Dropping media group {group.key} with {len(group.events)} file(s)")
                group.task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _detach(self, group: PendingGroup[T]) -> None:
        group.closed = True
        if self._pending.get(group.key) is group:
            del self._pending[group.key]

    def _next_timeout(self, group: PendingGroup[T]) -> float:
        timeout = self.window
        if self.max_wait is not None:
            remaining = group.started_at + self.max_wait - asyncio.get_running_loop().time()
            timeout = min(timeout, remaining)
        return timeout

    async def _run_group(self, group: PendingGroup[T]) -> None:
        while not group.closed:
            timeout = self._next_timeout(group)
            if timeout <= 0:
                logger.info(f"Media group {group.key} open for {self.max_wait}s, flushing")
                break
            try:
                await asyncio.wait_for(group.mailbox.get(), timeout=timeout)
            except asyncio.TimeoutError:
                if group.mailbox.empty():
                    break

        self._detach(group)
        logger.info(f"Flushing media group {group.key} with {len(group.events)} file(s)")
        try:
            await self.on_flush(group.key, list(group.events))
        except Exception as e:
            logger.error(f"Failed to process media group {group.key}: {e}", exc_info=True)
