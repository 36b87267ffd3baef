"""Journal services: event type and journal entry operations scoped to a caller.

``JournalService`` sits between the controllers and the stores. It turns
``None``/``False`` store results into ``NotFound`` and logs rejected writes;
the tag-subset checks themselves run inside the stores, under the event
type's row lock, so they stay atomic with the write they guard.
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from flask import current_app
from pydantic import ValidationError

from tagjournal.core.errors import EventTypeValidation, NotFound, TagsStillUsed
from tagjournal.core.utils.validation import invalid_input
from tagjournal.domains.journal.schemas.journal_schemas import (
    EventTypeData,
    JournalEntryCreate,
    JournalEntryUpdate,
    SearchFilter,
)
from tagjournal.domains.journal.stores.base import (
    EventTypeRecord,
    EventTypeStore,
    JournalEntryRecord,
    JournalEntryStore,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = "journal_service"


class JournalService:
    def __init__(self, event_types: EventTypeStore, entries: JournalEntryStore):
        self.event_types = event_types
        self.entries = entries

    # --- event types ---

    def find_all_event_types(self, user_id: uuid.UUID) -> List[EventTypeRecord]:
        return self.event_types.list(user_id)

    def find_event_type(self, user_id: uuid.UUID, event_type_id: uuid.UUID) -> EventTypeRecord:
        record = self.event_types.get(user_id, event_type_id)
        if record is None:
            raise NotFound()
        return record

    def create_event_type(self, user_id: uuid.UUID, data: EventTypeData) -> uuid.UUID:
        return self.event_types.create(user_id, data.name, data.tags)

    def update_event_type(self, user_id: uuid.UUID, event_type_id: uuid.UUID, data: EventTypeData) -> None:
        try:
            found = self.event_types.rename_and_retag(user_id, event_type_id, data.name, data.tags)
        except TagsStillUsed as exc:
            logger.info("Rejected retag of event type %s: tags %s still used", event_type_id, exc.tags)
            raise
        if not found:
            raise NotFound()

    def delete_event_type(self, user_id: uuid.UUID, event_type_id: uuid.UUID) -> None:
        if not self.event_types.delete(user_id, event_type_id):
            raise NotFound()

    # --- journal entries ---

    def find_journal_entry(self, user_id: uuid.UUID, entry_id: uuid.UUID) -> JournalEntryRecord:
        record = self.entries.get(user_id, entry_id)
        if record is None:
            raise NotFound()
        return record

    def find_journal_entries(self, user_id: uuid.UUID, filter: Optional[SearchFilter] = None) -> List[JournalEntryRecord]:
        # Re-validating catches filters built with model_construct() or mutated after parsing.
        try:
            filter = SearchFilter.model_validate(filter.model_dump()) if filter else SearchFilter()
        except ValidationError as exc:
            raise invalid_input(exc) from exc
        return self.entries.search(user_id, filter)

    def create_journal_entry(self, user_id: uuid.UUID, data: JournalEntryCreate) -> uuid.UUID:
        try:
            return self.entries.create(
                user_id,
                data.event_type_id,
                data.description,
                data.tags,
                data.created_at,
            )
        except EventTypeValidation:
            logger.info("Rejected journal entry for event type %s", data.event_type_id)
            raise

    def update_journal_entry(self, user_id: uuid.UUID, entry_id: uuid.UUID, data: JournalEntryUpdate) -> None:
        try:
            found = self.entries.update(user_id, entry_id, data.description, data.tags)
        except EventTypeValidation:
            logger.info("Rejected update of journal entry %s", entry_id)
            raise
        if not found:
            raise NotFound()

    def delete_journal_entry(self, user_id: uuid.UUID, entry_id: uuid.UUID) -> None:
        if not self.entries.delete(user_id, entry_id):
            raise NotFound()


def init_journal_service(app, service: Optional[JournalService] = None) -> JournalService:
    """Attach the SQL-backed service to the app unless one is supplied."""
    from tagjournal.domains.journal.stores.sql import SqlEventTypeStore, SqlJournalEntryStore

    service = service or JournalService(SqlEventTypeStore(), SqlJournalEntryStore())
    app.extensions[EXTENSION_KEY] = service
    return service


def get_journal_service() -> JournalService:
    return current_app.extensions[EXTENSION_KEY]
