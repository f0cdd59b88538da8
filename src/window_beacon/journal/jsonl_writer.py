from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
import json
from pathlib import Path

from window_beacon.logging import get_logger

logger = get_logger("window_beacon.journal")


def _format_timestamp(timestamp: datetime) -> str:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.isoformat()


def to_json_value(value: object) -> object:
    """Convert datetimes, enums, tuples and nested mappings into JSON types."""
    if isinstance(value, datetime):
        return _format_timestamp(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(key): to_json_value(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [to_json_value(item) for item in value]
    return value


class JSONLWriter:
    """Appends entries to a newline-delimited JSON file."""

    def __init__(self, file_path: Path | str) -> None:
        """Initialize the JSONL writer with a file path.

        Args:
            file_path: Path to the JSONL file to append to.
        """
        self._file_path = Path(file_path).expanduser()
        self._last_error_msg: str | None = None
        logger.debug("Initialized JSONLWriter with file path: %s", self._file_path)

    @property
    def last_error_msg(self) -> str | None:
        """Return the last error message, if any."""
        return self._last_error_msg

    @property
    def file_path(self) -> Path:
        return self._file_path

    def write(self, entry: Mapping[str, object]) -> None:
        """Append a single entry as one line, creating the file if needed.

        Raises:
            OSError: If the file cannot be written.
        """
        line = json.dumps(to_json_value(entry), ensure_ascii=False)
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._file_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            error_msg = f"Failed to write to {self._file_path}: {e}"
            logger.error(error_msg)
            self._last_error_msg = error_msg
            raise OSError(error_msg) from e

    def read_entries(self) -> list[dict[str, object]]:
        """Read back every well-formed line; malformed lines are skipped."""
        if not self._file_path.exists():
            return []

        entries: list[dict[str, object]] = []
        with self._file_path.open("r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(
                        "Malformed JSON on line %d of %s", line_number, self._file_path
                    )
        return entries
