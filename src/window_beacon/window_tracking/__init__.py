from window_beacon.window_tracking.data import (
    Position,
    Size,
    Snapshot,
    WindowBounds,
    WindowEvent,
    WindowEventType,
    WindowIdentifier,
    WindowRecord,
)
from window_beacon.window_tracking.matcher import match_window, score_window
from window_beacon.window_tracking.parser import parse_window_list
from window_beacon.window_tracking.window_manager import WindowManager
from window_beacon.window_tracking.window_source import (
    AppleScriptWindowSource,
    WindowSource,
    WindowSourceError,
)

__all__ = [
    "AppleScriptWindowSource",
    "Position",
    "Size",
    "Snapshot",
    "WindowBounds",
    "WindowEvent",
    "WindowEventType",
    "WindowIdentifier",
    "WindowManager",
    "WindowRecord",
    "WindowSource",
    "WindowSourceError",
    "match_window",
    "parse_window_list",
    "score_window",
]
