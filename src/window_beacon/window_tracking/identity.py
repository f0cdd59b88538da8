"""Window identity synthesis.

The window list text carries no persistent handle, so ids are built from
the owning pid plus a disambiguator. Everything downstream (the differ and
the matcher) only relies on ids being equal for the same window across two
consecutive snapshots, so a platform with a real native handle can swap in
its own factory here.
"""

from collections.abc import Callable, Iterable

WindowIdFactory = Callable[[int, int], str]
"""Builds an id from ``(pid, ordinal)`` where ordinal counts earlier windows
with the same pid in the current parse."""


def ordinal_window_id(pid: int, ordinal: int) -> str:
    return f"{pid}-{ordinal}"


def assign_window_ids(
    pids: Iterable[int], id_factory: WindowIdFactory = ordinal_window_id
) -> list[str]:
    """Return one id per pid, numbering repeated pids in order of appearance."""
    seen: dict[int, int] = {}
    ids: list[str] = []
    for pid in pids:
        ordinal = seen.get(pid, 0)
        seen[pid] = ordinal + 1
        ids.append(id_factory(pid, ordinal))
    return ids
