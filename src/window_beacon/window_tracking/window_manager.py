"""WindowManager: on-demand window queries for API consumers."""

from window_beacon.logging import get_logger
from window_beacon.window_tracking.data import WindowIdentifier, WindowRecord
from window_beacon.window_tracking.matcher import match_window, resolve_focused_window
from window_beacon.window_tracking.parser import parse_window_list
from window_beacon.window_tracking.window_source import (
    AppleScriptWindowSource,
    WindowSource,
    WindowSourceError,
)

logger = get_logger("window_beacon.window_tracking")


class WindowManager:
    """Answers window queries from a fresh read of the window source.

    Every query is best effort: when the source fails, the failure is
    logged and kept in ``last_error_msg`` and the query returns an empty
    list or None instead of raising.
    """

    def __init__(self, source: WindowSource | None = None) -> None:
        super().__init__()
        self._source = source or AppleScriptWindowSource()
        self.last_error_msg: str | None = None

    def list_windows(self) -> list[WindowRecord]:
        try:
            return parse_window_list(self._source.read_window_list())
        except WindowSourceError as e:
            self._record_error(f"Failed to list windows: {e}")
        except Exception as e:  # noqa: BLE001
            self._record_error(f"Unexpected error listing windows: {e}")
        return []

    def active_window(self) -> WindowRecord | None:
        try:
            focused = self._source.read_focused_window()
        except WindowSourceError as e:
            self._record_error(f"Failed to get active window: {e}")
            return None
        except Exception as e:  # noqa: BLE001
            self._record_error(f"Unexpected error getting active window: {e}")
            return None

        if focused is None:
            return None
        return resolve_focused_window(focused, self.list_windows())

    def windows_by_app(self, app_name: str) -> list[WindowRecord]:
        """Windows whose application name contains ``app_name``, ignoring case."""
        needle = app_name.lower()
        return [w for w in self.list_windows() if needle in w.app_name.lower()]

    def window_by_id(self, window_id: str) -> WindowRecord | None:
        return next((w for w in self.list_windows() if w.id == window_id), None)

    def find_matching_window(
        self, identifier: WindowIdentifier
    ) -> WindowRecord | None:
        return match_window(identifier, self.list_windows())

    def _record_error(self, error_msg: str) -> None:
        logger.error(error_msg)
        self.last_error_msg = error_msg
