"""Journal mappers for DTO responses."""

from __future__ import annotations

from tagjournal.domains.journal.schemas.journal_schemas import (
    EventTypeResponse,
    JournalEntryResponse,
)
from tagjournal.domains.journal.stores.base import EventTypeRecord, JournalEntryRecord


def map_event_type(event_type: EventTypeRecord) -> dict:
    return EventTypeResponse(
        id=event_type.id,
        user_id=event_type.user_id,
        name=event_type.name,
        tags=event_type.tags or [],
    ).model_dump(mode="json")


def map_entry(entry: JournalEntryRecord) -> dict:
    return JournalEntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        event_type_id=entry.event_type_id,
        description=entry.description,
        tags=entry.tags or [],
        created_at=entry.created_at.isoformat() if entry.created_at else "",
    ).model_dump(mode="json")
