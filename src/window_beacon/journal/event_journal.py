"""EventJournal - records window events to a JSONL file as they are emitted."""

from pathlib import Path

from window_beacon.journal.jsonl_writer import JSONLWriter
from window_beacon.logging import get_logger
from window_beacon.window_tracking.data import WindowEvent, WindowRecord

logger = get_logger("window_beacon.journal")


def window_to_dict(window: WindowRecord) -> dict[str, object]:
    bounds = window.bounds
    return {
        "id": window.id,
        "title": window.title,
        "app_name": window.app_name,
        "pid": window.pid,
        "bounds": {
            "x": bounds.x,
            "y": bounds.y,
            "width": bounds.width,
            "height": bounds.height,
        },
    }


def event_to_dict(event: WindowEvent) -> dict[str, object]:
    return {
        "type": event.type,
        "timestamp": event.timestamp,
        "window": window_to_dict(event.window),
    }


class EventJournal:
    """Subscriber that appends every event it receives to a JSONL file.

    Write failures are logged and counted; they never propagate back into
    the monitor's tick.
    """

    def __init__(self, path: Path | str, writer: JSONLWriter | None = None) -> None:
        self._writer = writer or JSONLWriter(path)
        self.written_count = 0
        self.failed_count = 0

    @property
    def file_path(self) -> Path:
        return self._writer.file_path

    def __call__(self, event: WindowEvent) -> None:
        try:
            self._writer.write(event_to_dict(event))
        except OSError as e:
            self.failed_count += 1
            logger.error("Dropped %s event for %s: %s", event.type, event.window.id, e)
            return
        self.written_count += 1
