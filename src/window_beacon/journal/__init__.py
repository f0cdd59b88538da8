from window_beacon.journal.event_journal import (
    EventJournal,
    event_to_dict,
    window_to_dict,
)
from window_beacon.journal.jsonl_writer import JSONLWriter

__all__ = [
    "EventJournal",
    "JSONLWriter",
    "event_to_dict",
    "window_to_dict",
]
