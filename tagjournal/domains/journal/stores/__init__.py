"""Event type and journal entry stores (SQL and in-memory)."""

from tagjournal.domains.journal.stores.base import (
    EventTypeRecord,
    EventTypeStore,
    JournalEntryRecord,
    JournalEntryStore,
)
from tagjournal.domains.journal.stores.memory import (
    MemoryBackend,
    MemoryEventTypeStore,
    MemoryJournalEntryStore,
)
from tagjournal.domains.journal.stores.sql import SqlEventTypeStore, SqlJournalEntryStore

__all__ = [
    "EventTypeRecord",
    "EventTypeStore",
    "JournalEntryRecord",
    "JournalEntryStore",
    "MemoryBackend",
    "MemoryEventTypeStore",
    "MemoryJournalEntryStore",
    "SqlEventTypeStore",
    "SqlJournalEntryStore",
]
