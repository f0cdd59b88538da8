"""Weighted fuzzy matching of a WindowIdentifier against known windows."""

from collections.abc import Iterable, Sequence

from window_beacon.window_tracking.data import WindowIdentifier, WindowRecord

ID_WEIGHT = 100
PID_WEIGHT = 50
APP_NAME_WEIGHT = 25
TITLE_WEIGHT = 20
POSITION_WEIGHT = 10
SIZE_WEIGHT = 10

PROXIMITY_TOLERANCE = 10


def _near(a: int, b: int) -> bool:
    return abs(a - b) < PROXIMITY_TOLERANCE


def _contains(needle: str, haystack: str) -> bool:
    return needle.lower() in haystack.lower()


def score_window(identifier: WindowIdentifier, window: WindowRecord) -> int:
    """Sum the weights of every identifier field that agrees with ``window``.

    Unset or empty identifier fields add nothing; a score of 0 means the
    window does not match at all.
    """
    score = 0
    bounds = window.bounds

    if identifier.id and identifier.id == window.id:
        score += ID_WEIGHT
    if identifier.pid and identifier.pid == window.pid:
        score += PID_WEIGHT
    if identifier.app_name and _contains(identifier.app_name, window.app_name):
        score += APP_NAME_WEIGHT
    if identifier.title and _contains(identifier.title, window.title):
        score += TITLE_WEIGHT
    if (
        identifier.position is not None
        and _near(bounds.x, identifier.position.x)
        and _near(bounds.y, identifier.position.y)
    ):
        score += POSITION_WEIGHT
    if (
        identifier.size is not None
        and _near(bounds.width, identifier.size.width)
        and _near(bounds.height, identifier.size.height)
    ):
        score += SIZE_WEIGHT

    return score


def rank_windows(
    identifier: WindowIdentifier, candidates: Iterable[WindowRecord]
) -> list[tuple[WindowRecord, int]]:
    """Return ``(window, score)`` for every match, best first.

    Equal scores keep the order the candidates were supplied in.
    """
    scored = [(window, score_window(identifier, window)) for window in candidates]
    matches = [item for item in scored if item[1] > 0]
    matches.sort(key=lambda item: item[1], reverse=True)
    return matches


def match_window(
    identifier: WindowIdentifier, candidates: Iterable[WindowRecord]
) -> WindowRecord | None:
    best: WindowRecord | None = None
    best_score = 0
    for window in candidates:
        score = score_window(identifier, window)
        if score > best_score:
            best, best_score = window, score
    return best


def resolve_focused_window(
    focused: WindowRecord, windows: Sequence[WindowRecord]
) -> WindowRecord:
    """Map a separately queried focused window onto its snapshot record.

    The focused-window query is parsed on its own, so its id carries no
    meaning relative to the full window list. The best match owned by the
    same process stands in for it, looking first among windows whose title
    is exactly the focused title; otherwise the record is returned as is.
    """
    same_process = [window for window in windows if window.pid == focused.pid]
    same_title = [window for window in same_process if window.title == focused.title]
    match = match_window(
        WindowIdentifier.from_record(focused), same_title or same_process
    )
    return match if match is not None else focused
