"""
oishine_backoffice.realtime.broadcaster

In-process publish/subscribe for status events.

Responsibilities:
- Track topic -> connection memberships (a connection may join many topics).
- Fan a published payload out to every current subscriber of its topic.
- Deliver through one FIFO outbox per connection so each subscriber sees a
  topic's events in publish order.
- Isolate failures: a broken or slow connection is dropped without affecting
  other subscribers, and its owner is told through the `on_drop` hook.
- Re-check guarded memberships (the admin feed) before every delivery, so a
  member that no longer qualifies stops receiving events.

Threading model: all methods must be called from the event loop thread. The
membership maps are only touched while holding `_lock`; sends happen in the
per-connection worker task, never under the lock.

There is no buffering for absent subscribers and no replay. Fan-out across
processes is not supported; every subscriber must be connected to this process.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from oishine_backoffice.observability.logging import get_logger

log = get_logger(__name__)

# Returns None while the member may keep the topic, otherwise the denial message.
Guard = Callable[[], Awaitable[str | None]]
# Called with the drop reason ("slow_consumer" / "send_failed").
DropHook = Callable[[str], Awaitable[None]]

GUARD_FAILED_MESSAGE = "Internal server error"


class Connection(Protocol):
    """
    Anything that can push a JSON message to one client (Starlette's WebSocket fits).
    """

    async def send_json(self, data: Any) -> None: ...


@dataclass(frozen=True, slots=True)
class StatusEvent:
    topic: str
    payload: Any
    timestamp: datetime

    def to_message(self) -> dict[str, Any]:
        return {
            "type": "event",
            "topic": self.topic,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(slots=True)
class _Outbox:
    connection: Connection
    queue: asyncio.Queue[dict[str, Any]]
    task: asyncio.Task[None] | None = None
    topics: set[str] = field(default_factory=set)
    guards: dict[str, Guard] = field(default_factory=dict)
    on_drop: DropHook | None = None

    def discard_pending(self) -> None:
        # Keeps Queue.join() from waiting on messages that will never be sent.
        while True:
            try:
                self.queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self.queue.task_done()


class Broadcaster:
    def __init__(self, *, outbox_size: int = 256) -> None:
        self._outbox_size = outbox_size
        self._lock = threading.Lock()
        # Keyed by id(connection): WebSocket objects are not hashable. The outbox
        # holds a reference, so an id cannot be reused while registered.
        self._outboxes: dict[int, _Outbox] = {}
        self._topics: dict[str, set[int]] = {}
        self._hook_tasks: set[asyncio.Task[None]] = set()

    # -- membership -------------------------------------------------------

    def register(self, connection: Connection, *, on_drop: DropHook | None = None) -> None:
        """
        Attach a delivery worker to `connection` without joining any topic.

        `on_drop` runs (as a task) once if the broadcaster itself drops the
        connection, so the owner can close the underlying transport.
        """

        with self._lock:
            self._ensure_outbox(connection).on_drop = on_drop

    def is_registered(self, connection: Connection) -> bool:
        with self._lock:
            return id(connection) in self._outboxes

    def subscribe(self, connection: Connection, topic: str, *, guard: Guard | None = None) -> bool:
        """
        Join `topic`. Returns False when the connection was already a member.

        With a `guard`, every event on `topic` is held until the guard approves
        it; a denial revokes the membership and the connection gets an error
        message in place of the event.
        """

        with self._lock:
            outbox = self._ensure_outbox(connection)
            if topic in outbox.topics:
                return False
            outbox.topics.add(topic)
            if guard is not None:
                outbox.guards[topic] = guard
            self._topics.setdefault(topic, set()).add(id(connection))
        log.debug("realtime_subscribed", topic=topic, guarded=guard is not None)
        return True

    def unsubscribe(self, connection: Connection, topic: str) -> bool:
        """
        Leave `topic`. Leaving a topic never joined (or leaving twice) is a no-op.
        """

        with self._lock:
            outbox = self._outboxes.get(id(connection))
            if outbox is None or topic not in outbox.topics:
                return False
            outbox.topics.discard(topic)
            outbox.guards.pop(topic, None)
            self._forget_membership(id(connection), topic)
        log.debug("realtime_unsubscribed", topic=topic)
        return True

    def disconnect(self, connection: Connection) -> None:
        """
        Remove every membership of `connection` and stop its worker. Idempotent.
        """

        outbox = self._remove(id(connection))
        if outbox is not None:
            self._stop(outbox)

    def topics_of(self, connection: Connection) -> frozenset[str]:
        with self._lock:
            outbox = self._outboxes.get(id(connection))
            return frozenset(outbox.topics) if outbox is not None else frozenset()

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._topics.get(topic, ()))

    # -- delivery ---------------------------------------------------------

    def publish(self, topic: str, payload: Any) -> int:
        """
        Fire-and-forget fan-out. Returns the number of deliveries scheduled; zero
        subscribers means the event is dropped.
        """

        event = StatusEvent(topic=topic, payload=payload, timestamp=datetime.now(UTC))
        with self._lock:
            targets = [self._outboxes[key] for key in self._topics.get(topic, ())]

        message = event.to_message()
        scheduled = 0
        for outbox in targets:
            if self._offer(outbox, message):
                scheduled += 1
        log.info("realtime_published", topic=topic, subscribers=len(targets), scheduled=scheduled)
        return scheduled

    def send_direct(self, connection: Connection, message: dict[str, Any]) -> bool:
        """
        Queue a control message (ack/error) behind any events already queued.

        Returns False, without registering anything, for a connection that is not
        (or no longer) registered.
        """

        with self._lock:
            outbox = self._outboxes.get(id(connection))
        if outbox is None:
            return False
        return self._offer(outbox, message)

    async def flush(self) -> None:
        """
        Wait until every currently queued message has been sent (or discarded).
        """

        with self._lock:
            queues = [outbox.queue for outbox in self._outboxes.values()]
        await asyncio.gather(*(q.join() for q in queues))

    async def close(self) -> None:
        with self._lock:
            outboxes = list(self._outboxes.values())
            self._outboxes.clear()
            self._topics.clear()
        tasks = [o.task for o in outboxes if o.task is not None]
        for outbox in outboxes:
            outbox.on_drop = None
            self._stop(outbox)
        tasks.extend(self._hook_tasks)
        await asyncio.gather(*tasks, return_exceptions=True)

    # -- internals --------------------------------------------------------

    def _ensure_outbox(self, connection: Connection) -> _Outbox:
        # Caller holds the lock.
        outbox = self._outboxes.get(id(connection))
        if outbox is None:
            outbox = _Outbox(connection=connection, queue=asyncio.Queue(maxsize=self._outbox_size))
            outbox.task = asyncio.get_running_loop().create_task(self._pump(outbox))
            self._outboxes[id(connection)] = outbox
        return outbox

    def _forget_membership(self, key: int, topic: str) -> None:
        # Caller holds the lock.
        members = self._topics.get(topic)
        if members is None:
            return
        members.discard(key)
        if not members:
            del self._topics[topic]

    def _remove(self, key: int) -> _Outbox | None:
        with self._lock:
            outbox = self._outboxes.pop(key, None)
            if outbox is None:
                return None
            for topic in outbox.topics:
                self._forget_membership(key, topic)
            outbox.topics.clear()
            outbox.guards.clear()
        return outbox

    def _stop(self, outbox: _Outbox) -> None:
        if outbox.task is not None and outbox.task is not asyncio.current_task():
            outbox.task.cancel()
        outbox.discard_pending()

    def _drop(self, outbox: _Outbox, reason: str, **fields: Any) -> None:
        log.warning("realtime_subscriber_dropped", reason=reason, **fields)
        self.disconnect(outbox.connection)
        hook, outbox.on_drop = outbox.on_drop, None
        if hook is not None:
            task = asyncio.get_running_loop().create_task(self._run_drop_hook(hook, reason))
            self._hook_tasks.add(task)
            task.add_done_callback(self._hook_tasks.discard)

    async def _run_drop_hook(self, hook: DropHook, reason: str) -> None:
        try:
            await hook(reason)
        except Exception as e:
            log.warning("realtime_drop_hook_failed", reason=reason, error=str(e))

    def _offer(self, outbox: _Outbox, message: dict[str, Any]) -> bool:
        try:
            outbox.queue.put_nowait(message)
        except asyncio.QueueFull:
            self._drop(outbox, "slow_consumer")
            return False
        return True

    async def _screen(self, outbox: _Outbox, message: dict[str, Any]) -> dict[str, Any] | None:
        if message.get("type") != "event":
            return message
        topic = message["topic"]
        with self._lock:
            member = topic in outbox.topics
            guard = outbox.guards.get(topic)
        if not member:
            # Left or revoked after this event was queued.
            return None
        if guard is None:
            return message

        try:
            denied = await guard()
        except Exception:
            log.exception("realtime_guard_failed", topic=topic)
            denied = GUARD_FAILED_MESSAGE
        if denied is None:
            return message
        self.unsubscribe(outbox.connection, topic)
        log.info("realtime_membership_revoked", topic=topic)
        return {"type": "error", "topic": topic, "error": denied}

    async def _pump(self, outbox: _Outbox) -> None:
        while True:
            message = await outbox.queue.get()
            try:
                outgoing = await self._screen(outbox, message)
                if outgoing is not None:
                    await outbox.connection.send_json(outgoing)
            except Exception as e:
                self._drop(outbox, "send_failed", error=str(e))
                return
            finally:
                outbox.queue.task_done()


# --- Module Notes -----------------------------------------------------------
# The app keeps one Broadcaster on `app.state.broadcaster`, created with the app
# and closed in the lifespan shutdown.
