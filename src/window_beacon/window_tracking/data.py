from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


@dataclass(frozen=True)
class Position:
    x: int
    y: int


@dataclass(frozen=True)
class Size:
    width: int
    height: int


@dataclass(frozen=True)
class WindowBounds:
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            msg = f"Window size must be non-negative, got {self.width}x{self.height}"
            raise ValueError(msg)

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


@dataclass(frozen=True)
class WindowRecord:
    """One observed window.

    ``id`` is unique within the snapshot that produced the record; whether it
    survives into the next snapshot depends on the id factory used while
    parsing.
    """

    id: str
    title: str
    app_name: str
    pid: int
    bounds: WindowBounds

    def __post_init__(self) -> None:
        if self.pid < 0:
            msg = f"Process identifier must be non-negative, got {self.pid}"
            raise ValueError(msg)


@dataclass(frozen=True)
class WindowIdentifier:
    """Partial window descriptor; unset fields take no part in matching."""

    id: str | None = None
    pid: int | None = None
    title: str | None = None
    app_name: str | None = None
    position: Position | None = None
    size: Size | None = None

    @classmethod
    def from_record(cls, record: WindowRecord) -> "WindowIdentifier":
        return cls(
            pid=record.pid,
            title=record.title,
            app_name=record.app_name,
            position=record.bounds.position,
            size=record.bounds.size,
        )


@dataclass(frozen=True)
class Snapshot:
    windows: tuple[WindowRecord, ...]
    captured_at: datetime

    def by_id(self) -> dict[str, WindowRecord]:
        return {window.id: window for window in self.windows}


class WindowEventType(StrEnum):
    CREATED = "created"
    CLOSED = "closed"
    FOCUSED = "focused"
    MOVED = "moved"
    RESIZED = "resized"


@dataclass(frozen=True)
class WindowEvent:
    type: WindowEventType
    window: WindowRecord
    timestamp: datetime
