"""Broadcast event channel — route enter/leave notifications.

Every route owns two channels (``on_enter`` and ``on_leave``). Listeners
attach and detach independently; nothing is replayed to late subscribers.

Two ways to consume a channel:

- ``listen(callback)``: synchronous callbacks, called in subscription
  order by ``publish()``. Return values are handed back to the publisher,
  which is how leave listeners cast asynchronous votes.
- ``stream()``: an async iterator backed by its own anyio memory stream,
  for consumers that live in their own task.

Free-threading safety:
    - Published events are frozen dataclasses (immutable, safe to share)
    - The subscriber sets are guarded by a Lock and copied before dispatch
"""

import logging
import threading
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import anyio
from anyio.streams.memory import MemoryObjectSendStream

logger = logging.getLogger("trellis.channel")

T = TypeVar("T")


@dataclass(slots=True, eq=False)
class Subscription:
    """Handle returned by ``EventChannel.listen()``."""

    _cancel: Callable[[], None] = field(repr=False)
    active: bool = True

    def cancel(self) -> None:
        """Detach the listener. Safe to call more than once."""
        if self.active:
            self.active = False
            self._cancel()


class EventChannel(Generic[T]):
    """Broadcast channel for a single event type.

    Usage::

        channel: EventChannel[RouteEvent] = EventChannel()
        sub = channel.listen(lambda event: print(event.path))
        channel.publish(RouteEvent("/users/42", {"id": "42"}))
        sub.cancel()
    """

    __slots__ = ("_listeners", "_lock", "_streams")

    def __init__(self) -> None:
        self._listeners: list[Callable[[T], object]] = []
        self._streams: set[MemoryObjectSendStream[T]] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners) + len(self._streams)

    def listen(self, callback: Callable[[T], object]) -> Subscription:
        """Attach *callback*. It sees only events published from now on."""
        with self._lock:
            self._listeners.append(callback)

        def _remove() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return Subscription(_remove)

    def publish(self, event: T) -> list[object]:
        """Deliver *event* to every listener and stream subscriber.

        Returns the non-``None`` values returned by listeners. A listener
        that raises is logged and skipped so it cannot break the others.
        """
        with self._lock:
            listeners = list(self._listeners)
            streams = set(self._streams)

        results: list[object] = []
        for callback in listeners:
            try:
                result = callback(event)
            except Exception:
                logger.exception("Listener %r failed for %r", callback, event)
                continue
            if result is not None:
                results.append(result)

        for send in streams:
            try:
                send.send_nowait(event)
            except anyio.WouldBlock:
                # Drop event for slow consumers rather than blocking
                pass
            except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                with self._lock:
                    self._streams.discard(send)
        return results

    async def stream(self, max_buffer: int = 256) -> AsyncIterator[T]:
        """Subscribe as an async iterator.

        The subscription is registered when iteration starts and cleaned
        up when the iterator exits or the channel is closed.
        """
        send, receive = anyio.create_memory_object_stream[T](max_buffer)
        with self._lock:
            self._streams.add(send)
        try:
            async with receive:
                async for event in receive:
                    yield event
        finally:
            with self._lock:
                self._streams.discard(send)
            send.close()

    def close(self) -> None:
        """End every stream subscription. Callback listeners are kept."""
        with self._lock:
            streams = set(self._streams)
            self._streams.clear()
        for send in streams:
            send.close()
