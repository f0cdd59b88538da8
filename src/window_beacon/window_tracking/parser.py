"""Parser for System Events window lists.

``osascript`` prints the window list in one of two shapes depending on how
the script was run:

Line blocks, one ``key: value`` per line and a blank line between windows::

    procName: Terminal
    procID: 5678
    name: bash - Terminal
    position: {50, 100}
    size: {600, 400}

Or a single AppleScript list of records (the ``-ss`` form)::

    {{procName:"Finder", procID:610, name:"GitHub", position:{249, 151}, size:{920, 436}}, ...}

Window titles in the second form are arbitrary text, so quotes, commas and
braces inside a string literal never count as structure.
"""

from dataclasses import dataclass
import re
from typing import Protocol

from window_beacon.logging import get_logger
from window_beacon.window_tracking.data import WindowBounds, WindowRecord
from window_beacon.window_tracking.identity import (
    WindowIdFactory,
    assign_window_ids,
    ordinal_window_id,
)

logger = get_logger("window_beacon.window_tracking")

DEFAULT_APP_NAME = "Unknown"
DEFAULT_TITLE = "Untitled"
MISSING_VALUE = "missing value"

EMPTY_LIST_TOKENS = frozenset({"", "{}"})

_NESTED_SIGNATURE = re.compile(r"^\{\s*\{")
_PAIR = re.compile(r"^\{\s*(-?\d+)\s*,\s*(-?\d+)\s*\}$")
_ESCAPED_CHAR = re.compile(r'\\(["\\])')


@dataclass(frozen=True)
class WindowAttributes:
    """A fully resolved attribute group, ready to become a WindowRecord."""

    app_name: str
    pid: int
    title: str
    bounds: WindowBounds


class WindowListGrammar(Protocol):
    name: str

    def matches(self, text: str) -> bool: ...

    def extract(self, text: str) -> list[WindowAttributes]: ...


def parse_pid(value: str) -> int | None:
    value = value.strip()
    if not value.isdecimal():
        return None
    return int(value)


def parse_pair(value: str) -> tuple[int, int] | None:
    match = _PAIR.match(value.strip())
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def parse_size(value: str) -> tuple[int, int] | None:
    pair = parse_pair(value)
    if pair is None or pair[0] < 0 or pair[1] < 0:
        return None
    return pair


def unquote(value: str) -> str:
    """Strip AppleScript string quotes and decode ``\\"`` and ``\\\\``.

    Other backslash sequences (``\\012`` and friends) are left as written.
    """
    value = value.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return _ESCAPED_CHAR.sub(r"\1", value[1:-1])
    return value


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split ``text`` on ``separator`` wherever it sits outside strings and braces.

    Scanning stops at a closing brace that has no matching opener, which is
    how the body of an enclosing ``{...}`` ends. A trailing segment still
    inside an open string or brace when the text runs out is malformed and
    is dropped; complete segments before it are returned.
    """
    segments: list[str] = []
    current: list[str] = []
    depth = 0
    in_string = False
    escaped = False

    for char in text:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                break
            depth -= 1
        elif char == separator and depth == 0:
            segments.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    else:
        if in_string or depth > 0:
            logger.debug(
                "Dropping unterminated segment: %r", "".join(current)[:80]
            )
            return [segment for segment in segments if segment]

    segments.append("".join(current).strip())
    return [segment for segment in segments if segment]


class LineBlockGrammar:
    """``key: value`` lines, windows separated by blank lines.

    A window is emitted as soon as all five keys have parsed; a group that
    is cut short by a blank line or the end of the text is dropped.
    """

    name = "line-block"

    KEYS = ("procName", "procID", "name", "position", "size")

    def matches(self, text: str) -> bool:  # noqa: ARG002, PLR6301
        return True

    def extract(self, text: str) -> list[WindowAttributes]:
        groups: list[WindowAttributes] = []
        pending: dict[str, object] = {}

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                self._discard(pending)
                pending = {}
                continue

            key, sep, value = line.partition(":")
            key = key.strip()
            if not sep or key not in self.KEYS:
                continue

            parsed = self._parse_value(key, value.strip())
            if parsed is None:
                logger.debug("Unparseable %s value: %r", key, value)
                continue
            pending[key] = parsed

            if len(pending) == len(self.KEYS):
                groups.append(self._build(pending))
                pending = {}

        self._discard(pending)
        return groups

    @staticmethod
    def _parse_value(key: str, value: str) -> object | None:
        if key == "procID":
            return parse_pid(value)
        if key == "position":
            return parse_pair(value)
        if key == "size":
            return parse_size(value)
        return value

    @staticmethod
    def _build(fields: dict[str, object]) -> WindowAttributes:
        x, y = fields["position"]  # type: ignore[misc]
        width, height = fields["size"]  # type: ignore[misc]
        return WindowAttributes(
            app_name=str(fields["procName"]),
            pid=int(fields["procID"]),  # type: ignore[call-overload]
            title=str(fields["name"]),
            bounds=WindowBounds(x, y, width, height),
        )

    @staticmethod
    def _discard(pending: dict[str, object]) -> None:
        if pending:
            logger.debug(
                "Dropping incomplete window block with keys: %s", sorted(pending)
            )


class NestedListGrammar:
    """One bracketed list of records: ``{{label:value, ...}, {...}}``.

    Labels are looked up by name, so field order does not matter. A record
    that carries at least one known label is kept and its missing fields
    take default values.
    """

    name = "nested-list"

    LABELS = {
        "procName": "app_name",
        "appName": "app_name",
        "procID": "pid",
        "pid": "pid",
        "name": "title",
        "title": "title",
        "position": "position",
        "size": "size",
    }

    def matches(self, text: str) -> bool:  # noqa: PLR6301
        return _NESTED_SIGNATURE.match(text) is not None

    def extract(self, text: str) -> list[WindowAttributes]:
        groups: list[WindowAttributes] = []
        # Skip the list's opening brace; the splitter stops at its close.
        for segment in split_top_level(text.lstrip()[1:]):
            if not (segment.startswith("{") and segment.endswith("}")):
                logger.debug("Skipping non-record list item: %r", segment[:80])
                continue

            fields = self._read_fields(segment[1:-1])
            if not fields:
                logger.debug("Skipping record without window attributes")
                continue
            groups.append(self._build(fields))
        return groups

    def _read_fields(self, body: str) -> dict[str, str]:
        fields: dict[str, str] = {}
        for item in split_top_level(body):
            label, sep, value = item.partition(":")
            attribute = self.LABELS.get(label.strip().strip("|"))
            if not sep or attribute is None:
                continue
            fields.setdefault(attribute, value.strip())
        return fields

    @staticmethod
    def _text(value: str | None, default: str) -> str:
        if value is None or value == MISSING_VALUE:
            return default
        return unquote(value)

    @classmethod
    def _build(cls, fields: dict[str, str]) -> WindowAttributes:
        pid = parse_pid(fields.get("pid", "")) or 0
        x, y = parse_pair(fields.get("position", "")) or (0, 0)
        width, height = parse_size(fields.get("size", "")) or (0, 0)
        return WindowAttributes(
            app_name=cls._text(fields.get("app_name"), DEFAULT_APP_NAME),
            pid=pid,
            title=cls._text(fields.get("title"), DEFAULT_TITLE),
            bounds=WindowBounds(x, y, width, height),
        )


GRAMMARS: tuple[WindowListGrammar, ...] = (NestedListGrammar(), LineBlockGrammar())


def select_grammar(text: str) -> WindowListGrammar:
    """Pick the grammar whose structural signature fits; line blocks otherwise."""
    return next(grammar for grammar in GRAMMARS if grammar.matches(text))


def parse_window_list(
    text: str, id_factory: WindowIdFactory = ordinal_window_id
) -> list[WindowRecord]:
    """Parse raw window list text into records, in the order they appear.

    Never raises. Empty input, the empty list ``{}``, and text without any
    recognizable window attributes all produce an empty list.
    """
    stripped = text.strip() if text else ""
    if stripped in EMPTY_LIST_TOKENS:
        return []

    grammar = select_grammar(stripped)
    try:
        groups = grammar.extract(stripped)
        ids = assign_window_ids((group.pid for group in groups), id_factory)
        return [
            WindowRecord(
                id=window_id,
                title=group.title,
                app_name=group.app_name,
                pid=group.pid,
                bounds=group.bounds,
            )
            for window_id, group in zip(ids, groups, strict=True)
        ]
    except Exception as e:  # noqa: BLE001
        logger.error("Failed to parse %s window list: %s", grammar.name, e)
        return []
