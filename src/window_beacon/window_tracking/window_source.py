"""Window sources: where raw window list text comes from.

The monitor and the window manager only depend on the ``WindowSource``
protocol. ``AppleScriptWindowSource`` is the macOS implementation that asks
System Events through ``osascript``.
"""

import subprocess  # noqa: S404
from typing import Protocol

from window_beacon.logging import get_logger
from window_beacon.window_tracking.data import WindowRecord
from window_beacon.window_tracking.parser import parse_window_list

logger = get_logger("window_beacon.window_tracking")

DEFAULT_TIMEOUT_SECONDS = 10.0

WINDOW_LIST_SCRIPT = """
tell application "System Events"
  set allWindows to {}
  set allProcesses to processes whose background only is false
  repeat with proc in allProcesses
    set procName to name of proc
    set procID to unix id of proc
    repeat with win in windows of proc
      set end of allWindows to {procName:procName, procID:procID, name:name of win, position:position of win, size:size of win}
    end repeat
  end repeat
  return allWindows
end tell
"""

FOCUSED_WINDOW_SCRIPT = """
tell application "System Events"
  set frontApp to first application process whose frontmost is true
  if (count of windows of frontApp) is 0 then return {}
  set frontWin to first window of frontApp
  return {procName:name of frontApp, procID:unix id of frontApp, name:name of frontWin, position:position of frontWin, size:size of frontWin}
end tell
"""


class WindowSourceError(RuntimeError):
    """Raised when window information cannot be obtained right now."""


class WindowSource(Protocol):
    def read_window_list(self) -> str:
        """Return the raw window list text, or raise WindowSourceError."""
        ...

    def read_focused_window(self) -> WindowRecord | None:
        """Return the focused window, None if there is none, or raise WindowSourceError."""
        ...


def parse_single_record(text: str) -> WindowRecord | None:
    """Parse output that holds one ``{label:value, ...}`` record, or a list."""
    stripped = text.strip()
    if stripped.startswith("{") and not stripped.startswith("{{"):
        stripped = "{" + stripped + "}"
    windows = parse_window_list(stripped)
    return windows[0] if windows else None


class AppleScriptWindowSource:
    """Reads window information from System Events via ``osascript -ss``.

    Requires the calling process to have Accessibility permission; without
    it ``osascript`` exits non-zero and every read raises WindowSourceError.
    """

    def __init__(
        self,
        executable: str = "osascript",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__()
        self._executable = executable
        self._timeout_seconds = timeout_seconds
        self.last_error_msg: str | None = None

    def read_window_list(self) -> str:
        return self._run_script(WINDOW_LIST_SCRIPT)

    def read_focused_window(self) -> WindowRecord | None:
        return parse_single_record(self._run_script(FOCUSED_WINDOW_SCRIPT))

    def _run_script(self, script: str) -> str:
        try:
            result = subprocess.run(  # noqa: S603
                [self._executable, "-e", script, "-ss"],
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout_seconds,
                check=True,
            )
        except FileNotFoundError as e:
            raise self._fail(f"{self._executable} not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise self._fail(
                f"{self._executable} timed out after {self._timeout_seconds}s"
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise self._fail(
                f"{self._executable} exited with status {e.returncode}: {stderr}"
            ) from e
        except OSError as e:
            raise self._fail(f"Failed to run {self._executable}: {e}") from e
        except ValueError as e:
            raise self._fail(f"Unreadable {self._executable} output: {e}") from e

        return result.stdout.strip()

    def _fail(self, error_msg: str) -> WindowSourceError:
        logger.error(error_msg)
        self.last_error_msg = error_msg
        return WindowSourceError(error_msg)
