"""Publish/subscribe channel for window events."""

from collections import deque
from collections.abc import Callable
import itertools
import threading

from window_beacon.logging import get_logger
from window_beacon.window_tracking.data import WindowEvent

logger = get_logger("window_beacon.monitor")

EventCallback = Callable[[WindowEvent], None]
Unsubscribe = Callable[[], None]


class EventQueue:
    """Bounded buffer of events for consumers that drain at their own pace.

    When full, the oldest event is discarded to make room, so publishing
    never waits on the consumer.
    """

    def __init__(self, maxsize: int) -> None:
        if maxsize <= 0:
            msg = "Queue size must be positive"
            raise ValueError(msg)
        self._events: deque[WindowEvent] = deque(maxlen=maxsize)
        self._condition = threading.Condition()
        self.dropped_count = 0
        self.unsubscribe: Unsubscribe = lambda: None

    def put(self, event: WindowEvent) -> None:
        with self._condition:
            if len(self._events) == self._events.maxlen:
                self.dropped_count += 1
            self._events.append(event)
            self._condition.notify()

    def get(self, timeout: float | None = None) -> WindowEvent | None:
        """Pop the oldest event, waiting up to ``timeout`` seconds for one."""
        with self._condition:
            if not self._condition.wait_for(lambda: self._events, timeout=timeout):
                return None
            return self._events.popleft()

    def drain(self) -> list[WindowEvent]:
        with self._condition:
            events = list(self._events)
            self._events.clear()
            return events

    def __len__(self) -> int:
        with self._condition:
            return len(self._events)


class EventChannel:
    """Synchronous broadcast of events to the current subscribers."""

    def __init__(self) -> None:
        self._subscribers: dict[int, EventCallback] = {}
        self._ids = itertools.count()
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, callback: EventCallback) -> Unsubscribe:
        """Register ``callback`` and return a handle that removes it again.

        The handle may be called any number of times.
        """
        with self._lock:
            token = next(self._ids)
            self._subscribers[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def subscribe_queue(self, maxsize: int = 256) -> EventQueue:
        queue = EventQueue(maxsize)
        queue.unsubscribe = self.subscribe(queue.put)
        return queue

    def publish(self, event: WindowEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers.values())

        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:  # noqa: BLE001
                logger.error("Error in window event subscriber: %s", e)
