from datetime import datetime

from window_beacon.window_tracking.data import (
    Snapshot,
    WindowEvent,
    WindowEventType,
    WindowRecord,
)


def diff_snapshots(
    previous: Snapshot, current: Snapshot, timestamp: datetime | None = None
) -> list[WindowEvent]:
    """Compare two snapshots by window id and describe what changed.

    Windows are walked in ``current`` order: unknown ids become ``created``,
    known ids may produce ``moved`` and/or ``resized``. Ids that disappeared
    become ``closed`` carrying their last known record, in ``previous`` order.

    Args:
        previous: The retained snapshot.
        current: The snapshot just captured.
        timestamp: Event time; defaults to ``current.captured_at``.

    Returns:
        The lifecycle events, without any focus events.
    """
    when = timestamp or current.captured_at
    previous_by_id = previous.by_id()
    current_ids = {window.id for window in current.windows}
    events: list[WindowEvent] = []

    def emit(event_type: WindowEventType, window: WindowRecord) -> None:
        events.append(WindowEvent(type=event_type, window=window, timestamp=when))

    for window in current.windows:
        before = previous_by_id.get(window.id)
        if before is None:
            emit(WindowEventType.CREATED, window)
            continue

        if (window.bounds.x, window.bounds.y) != (before.bounds.x, before.bounds.y):
            emit(WindowEventType.MOVED, window)
        if window.bounds.size != before.bounds.size:
            emit(WindowEventType.RESIZED, window)

    for window_id, window in previous_by_id.items():
        if window_id not in current_ids:
            emit(WindowEventType.CLOSED, window)

    return events
