"""In-process event bus.

Services publish a `SystemEvent` after every state change
(representation decisions, quotation numbers, rate provider failures).
Delivery happens on a background worker so audit writes never sit on a
request's critical path, and a failing handler is logged, not propagated.

Usage:
    from quotedesk.events import emit

    await emit(SystemEvent(
        event_type=EventType.QUOTATION_CREATED,
        entity_id=str(quotation.id),
        data={"number": quotation.number},
    ))
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from quotedesk.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[SystemEvent], Coroutine[Any, Any, None]]

# Key for handlers that receive every event type
ALL_EVENTS = None


class EventBus:
    """Queue plus one worker task; handlers are grouped by event type."""

    def __init__(self) -> None:
        self._handlers: dict[EventType | None, list[EventHandler]] = defaultdict(list)
        self._queue: asyncio.Queue[SystemEvent] | None = None
        self._worker: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def subscribe(self, handler: EventHandler, event_types: Iterable[EventType] | None = None) -> None:
        keys: list[EventType | None] = [ALL_EVENTS] if event_types is None else list(event_types)
        for key in keys:
            self._handlers[key].append(handler)
        logger.info(
            "Subscribed %s to %s",
            getattr(handler, "__name__", repr(handler)),
            "all events" if event_types is None else [k.value for k in keys if k is not None],
        )

    def unsubscribe(self, handler: EventHandler) -> None:
        for handlers in self._handlers.values():
            while handler in handlers:
                handlers.remove(handler)

    def handlers_for(self, event_type: EventType) -> list[EventHandler]:
        return [*self._handlers.get(ALL_EVENTS, []), *self._handlers.get(event_type, [])]

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(self._queue))
        logger.info("Event bus started (%d handlers)", sum(len(h) for h in self._handlers.values()))

    async def publish(self, event: SystemEvent) -> None:
        """Enqueue `event`. A bus that was never started starts on first use."""
        if not self.running:
            await self.start()
        assert self._queue is not None
        await self._queue.put(event)
        logger.debug("Event %s queued (entity=%s)", event.event_type.value, event.entity_id)

    async def stop(self) -> None:
        """Deliver everything already queued, then stop the worker."""
        if self._queue is not None and self.running:
            await self._queue.join()
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
        self._worker = None
        self._queue = None
        logger.info("Event bus stopped")

    async def _run(self, queue: asyncio.Queue[SystemEvent]) -> None:
        while True:
            event = await queue.get()
            try:
                await self._deliver(event)
            finally:
                queue.task_done()

    async def _deliver(self, event: SystemEvent) -> None:
        handlers = self.handlers_for(event.event_type)
        if not handlers:
            return
        results = await asyncio.gather(*(h(event) for h in handlers), return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    "Handler %s failed on %s: %s",
                    getattr(handler, "__name__", repr(handler)),
                    event.event_type.value,
                    result,
                )


bus = EventBus()


# ── Module-level API ─────────────────────────────────────────────────


def subscribe(handler: EventHandler, event_types: Iterable[EventType] | None = None) -> None:
    """Register `handler` for every event, or only for `event_types`."""
    bus.subscribe(handler, event_types)


def unsubscribe(handler: EventHandler) -> None:
    bus.unsubscribe(handler)


async def emit(event: SystemEvent) -> None:
    await bus.publish(event)


async def start_event_system() -> None:
    """Start the worker. Called from the FastAPI lifespan."""
    await bus.start()


async def stop_event_system() -> None:
    """Drain queued events and stop the worker."""
    await bus.stop()
