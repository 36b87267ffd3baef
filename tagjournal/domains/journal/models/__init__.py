from tagjournal.domains.journal.models.event_type import EventType
from tagjournal.domains.journal.models.journal_entry import JournalEntry

__all__ = ["EventType", "JournalEntry"]
