from collections.abc import Callable, Generator
from datetime import UTC, datetime
import logging
from pathlib import Path

import pytest

from window_beacon.window_tracking.data import WindowBounds, WindowRecord
from window_beacon.window_tracking.window_source import WindowSourceError


@pytest.fixture(autouse=True)
def clear_logger_cache() -> Generator[None, None, None]:
    """Reset component loggers around each test so handlers never leak between tests."""
    from window_beacon import logging as wb_logging

    wb_logging.reset_component_loggers()
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        if logger_name.startswith("window_beacon") or logger_name.startswith("test_"):
            logging.getLogger(logger_name).propagate = True

    yield

    wb_logging.reset_component_loggers()


class ScriptedWindowSource:
    """WindowSource whose answers are set directly by the test.

    Assign an exception to ``window_list`` or ``focused`` to make the next
    reads fail with it.
    """

    def __init__(self, window_list: str | Exception = "{}") -> None:
        self.window_list: str | Exception = window_list
        self.focused: WindowRecord | Exception | None = None
        self.list_reads = 0
        self.focus_reads = 0

    def read_window_list(self) -> str:
        self.list_reads += 1
        if isinstance(self.window_list, Exception):
            raise self.window_list
        return self.window_list

    def read_focused_window(self) -> WindowRecord | None:
        self.focus_reads += 1
        if isinstance(self.focused, Exception):
            raise self.focused
        return self.focused


def render_window_list(*windows: tuple[str, int, str, int, int, int, int]) -> str:
    """Render ``(app, pid, title, x, y, width, height)`` tuples the way ``osascript -ss`` does."""
    records = [
        f'{{procName:"{app}", procID:{pid}, name:"{title}", '
        f"position:{{{x}, {y}}}, size:{{{width}, {height}}}}}"
        for app, pid, title, x, y, width, height in windows
    ]
    return "{" + ", ".join(records) + "}"


@pytest.fixture
def scripted_source() -> ScriptedWindowSource:
    return ScriptedWindowSource()


@pytest.fixture
def source_error() -> WindowSourceError:
    return WindowSourceError("osascript exited with status 1: not allowed assistive access")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)


@pytest.fixture
def sample_window() -> WindowRecord:
    return WindowRecord(
        id="5611-0",
        title="nodejs get list of active windows in mac - Google Search - Google Chrome",
        app_name="Google Chrome",
        pid=5611,
        bounds=WindowBounds(0, 38, 1512, 879),
    )


@pytest.fixture
def temp_log_dir(tmp_path: Path) -> Generator[Path, None, None]:
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    yield log_dir


@pytest.fixture
def window_list_text() -> Callable[..., str]:
    return render_window_list
