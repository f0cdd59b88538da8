"""WindowEventMonitor - polls the window source and broadcasts lifecycle events."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from threading import Event, Lock, Thread, get_ident

from window_beacon.logging import get_logger
from window_beacon.monitor.channel import EventCallback, EventChannel, EventQueue
from window_beacon.monitor.differ import diff_snapshots
from window_beacon.window_tracking.data import (
    Snapshot,
    WindowEvent,
    WindowEventType,
)
from window_beacon.window_tracking.matcher import resolve_focused_window
from window_beacon.window_tracking.parser import EMPTY_LIST_TOKENS, parse_window_list
from window_beacon.window_tracking.window_source import (
    AppleScriptWindowSource,
    WindowSource,
    WindowSourceError,
)

logger = get_logger("window_beacon.monitor")

DEFAULT_POLL_INTERVAL_MS = 1000
STOP_JOIN_TIMEOUT_SECONDS = 5.0


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class MonitorConfig:
    """Configuration for the window event monitor."""

    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS


class WindowEventMonitor:
    """Detects window lifecycle changes by diffing successive snapshots.

    On ``start()`` a baseline snapshot is captured without emitting events,
    then a background thread ticks every ``poll_interval_ms``. Each tick
    reads and parses the window list, diffs it against the retained
    snapshot, samples the focused window, and broadcasts the resulting
    events to subscribers before replacing the retained snapshot.

    Ticks never overlap. A tick whose window list cannot be read or parsed
    is skipped and the retained snapshot is kept, so a transient failure
    never shows up as every window closing.
    """

    def __init__(
        self,
        source: WindowSource | None = None,
        config: MonitorConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        channel: EventChannel | None = None,
    ) -> None:
        """Initialize the monitor in the stopped state.

        Args:
            source: Where window lists come from. Defaults to AppleScript.
            config: Polling configuration.
            clock: Returns the current time; defaults to UTC wall clock.
            channel: Event channel subscribers are attached to.
        """
        self._source = source or AppleScriptWindowSource()
        self._config = config or MonitorConfig()
        self._clock = clock or _utc_now
        self._channel = channel or EventChannel()
        self._last_error_msg: str | None = None

        self._snapshot: Snapshot | None = None
        self._is_running = False
        self._tick_count = 0

        self._poll_thread: Thread | None = None
        self._stop_event = Event()
        self._wake_event = Event()
        self._state_lock = Lock()
        self._tick_lock = Lock()
        self._tick_owner: int | None = None

        logger.info("WindowEventMonitor initialized")

    @property
    def last_error_msg(self) -> str | None:
        """Return the last error message, if any."""
        return self._last_error_msg

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def poll_interval_ms(self) -> int:
        return self._config.poll_interval_ms

    @property
    def tick_count(self) -> int:
        """Return the number of ticks that produced a snapshot."""
        return self._tick_count

    @property
    def has_baseline(self) -> bool:
        return self._snapshot is not None

    @property
    def channel(self) -> EventChannel:
        return self._channel

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a callback for every emitted event; returns an unsubscribe handle."""
        return self._channel.subscribe(callback)

    def subscribe_queue(self, maxsize: int = 256) -> EventQueue:
        return self._channel.subscribe_queue(maxsize)

    def set_poll_interval(self, ms: int) -> None:
        """Change the polling interval.

        A running monitor restarts its wait with the new interval; the
        retained snapshot is untouched.

        Args:
            ms: New interval in milliseconds (must be positive).
        """
        if ms <= 0:
            msg = "Poll interval must be positive"
            logger.error(msg)
            self._last_error_msg = msg
            raise ValueError(msg)

        old_interval = self._config.poll_interval_ms
        self._config = replace(self._config, poll_interval_ms=ms)
        if self._is_running:
            self._wake_event.set()
        logger.info("Poll interval changed from %dms to %dms", old_interval, ms)

    def start(self) -> None:
        """Capture the baseline snapshot and start polling in the background."""
        with self._state_lock:
            if self._is_running:
                logger.warning("Window event monitor is already running")
                return

            with self._tick_lock:
                self._snapshot = self._capture_baseline()
                self._is_running = True

            # One stop/wake pair per poll thread; a thread from an earlier run
            # keeps its own stop signal set.
            self._stop_event = Event()
            self._wake_event = Event()
            self._poll_thread = Thread(
                target=self._poll_loop,
                args=(self._stop_event, self._wake_event),
                name="window-event-monitor",
                daemon=True,
            )
            self._poll_thread.start()

        logger.info(
            "Window event monitor started (interval %dms)",
            self._config.poll_interval_ms,
        )

    def stop(self) -> None:
        """Stop polling.

        Once this returns no further events are emitted. A tick already in
        progress is allowed to finish first.
        """
        with self._state_lock:
            if not self._is_running:
                logger.debug("Window event monitor is not running")
                return

            self._is_running = False
            self._stop_event.set()
            self._wake_event.set()

            thread = self._poll_thread
            self._poll_thread = None
            if thread is not None and thread.ident != get_ident():
                thread.join(timeout=STOP_JOIN_TIMEOUT_SECONDS)
                if thread.is_alive():
                    logger.warning("Poll thread still finishing a tick after stop")

            # Wait out a tick running on another thread.
            if self._tick_owner != get_ident():
                with self._tick_lock:
                    pass

        logger.info("Window event monitor stopped")

    def poll_once(self) -> list[WindowEvent]:
        """Run a single tick now and return the events it emitted.

        Returns an empty list when the monitor is stopped or another tick is
        still in progress.
        """
        if not self._tick_lock.acquire(blocking=False):
            logger.debug("Tick already in progress, skipping")
            return []

        try:
            if not self._is_running:
                return []
            self._tick_owner = get_ident()
            return self._tick()
        except Exception as e:  # noqa: BLE001
            error_msg = f"Error in window monitor tick: {e}"
            logger.error(error_msg)
            self._last_error_msg = error_msg
            return []
        finally:
            self._tick_owner = None
            self._tick_lock.release()

    def get_status(self) -> dict[str, object]:
        return {
            "is_running": self._is_running,
            "poll_interval_ms": self._config.poll_interval_ms,
            "tick_count": self._tick_count,
            "has_baseline": self.has_baseline,
            "subscriber_count": self._channel.subscriber_count,
            "last_error_msg": self._last_error_msg,
        }

    def _poll_loop(self, stop_event: Event, wake_event: Event) -> None:
        """Background loop; a wake without stop means the interval changed."""
        while not stop_event.is_set():
            woken = wake_event.wait(self._config.poll_interval_ms / 1000)
            if stop_event.is_set():
                break
            if woken:
                wake_event.clear()
                continue
            self.poll_once()

    def _capture_baseline(self) -> Snapshot | None:
        try:
            snapshot = self._capture_snapshot()
        except Exception as e:  # noqa: BLE001
            self._record_error(f"Error capturing baseline snapshot: {e}")
            return None

        if snapshot is not None:
            logger.info(
                "Baseline snapshot captured with %d windows", len(snapshot.windows)
            )
        return snapshot

    def _capture_snapshot(self) -> Snapshot | None:
        captured_at = self._clock()
        try:
            raw = self._source.read_window_list()
        except WindowSourceError as e:
            self._record_error(f"Window list unavailable: {e}")
            return None

        windows = parse_window_list(raw)
        if not windows and raw.strip() not in EMPTY_LIST_TOKENS:
            self._record_error("Window list could not be parsed")
            return None
        return Snapshot(windows=tuple(windows), captured_at=captured_at)

    def _tick(self) -> list[WindowEvent]:
        current = self._capture_snapshot()
        if current is None:
            logger.warning("Skipping tick, keeping previous snapshot")
            return []

        previous = self._snapshot
        if previous is None:
            logger.info(
                "Baseline snapshot captured with %d windows", len(current.windows)
            )
            events: list[WindowEvent] = []
        else:
            events = diff_snapshots(previous, current)

        focused_event = self._focused_event(current)
        if focused_event is not None:
            events.append(focused_event)

        for event in events:
            logger.debug(
                "Window %s: %s (%s)", event.type, event.window.id, event.window.title
            )
            self._channel.publish(event)

        self._snapshot = current
        self._tick_count += 1
        return events

    def _focused_event(self, snapshot: Snapshot) -> WindowEvent | None:
        try:
            focused = self._source.read_focused_window()
        except WindowSourceError as e:
            self._record_error(f"Focused window unavailable: {e}")
            return None
        except Exception as e:  # noqa: BLE001
            self._record_error(f"Error reading focused window: {e}")
            return None

        if focused is None:
            return None
        return WindowEvent(
            type=WindowEventType.FOCUSED,
            window=resolve_focused_window(focused, snapshot.windows),
            timestamp=snapshot.captured_at,
        )

    def _record_error(self, error_msg: str) -> None:
        logger.error(error_msg)
        self._last_error_msg = error_msg
