"""SQLAlchemy-backed stores.

Postgres is the production target: ``with_for_update()`` takes the event type
row lock that serializes retags against entry writes. SQLite ignores
``FOR UPDATE`` and serializes writers on its database lock instead.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import cast, func, type_coerce
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tagjournal.core.errors import Conflict, EventTypeInUse
from tagjournal.core.utils.dates import ensure_utc, utcnow
from tagjournal.core.utils.transaction import atomic
from tagjournal.domains.journal.consistency import check_retag, ensure_tags_permitted
from tagjournal.domains.journal.models import EventType, JournalEntry
from tagjournal.domains.journal.schemas.journal_schemas import SearchFilter, SortOrder
from tagjournal.domains.journal.stores.base import (
    EventTypeRecord,
    EventTypeStore,
    JournalEntryRecord,
    JournalEntryStore,
)
from tagjournal.extensions import db

logger = logging.getLogger(__name__)


def _event_type_record(row: EventType) -> EventTypeRecord:
    return EventTypeRecord(id=row.id, user_id=row.user_id, name=row.name, tags=list(row.tags or []))


def _entry_record(row: JournalEntry) -> JournalEntryRecord:
    return JournalEntryRecord(
        id=row.id,
        user_id=row.user_id,
        event_type_id=row.event_type_id,
        description=row.description,
        tags=list(row.tags or []),
        created_at=ensure_utc(row.created_at),
    )


def lock_event_type(session: Session, owner: uuid.UUID, id: uuid.UUID) -> Optional[EventType]:
    """``SELECT ... FOR UPDATE`` the owner's event type row, refreshing any cached copy."""
    return (
        session.query(EventType)
        .filter(EventType.id == id, EventType.user_id == owner)
        .with_for_update()
        .populate_existing()
        .first()
    )


class SqlEventTypeStore(EventTypeStore):
    def __init__(self, session=None):
        self._session = session or db.session

    def get(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[EventTypeRecord]:
        row = self._session.query(EventType).filter(EventType.id == id, EventType.user_id == owner).first()
        return _event_type_record(row) if row else None

    def list(self, owner: uuid.UUID) -> List[EventTypeRecord]:
        rows = self._session.query(EventType).filter(EventType.user_id == owner).order_by(EventType.name).all()
        return [_event_type_record(row) for row in rows]

    def create(self, owner: uuid.UUID, name: str, tags: Sequence[str]) -> uuid.UUID:
        try:
            with atomic(self._session) as session:
                row = EventType(user_id=owner, name=name, tags=list(tags))
                session.add(row)
                session.flush()
                event_type_id = row.id
        except IntegrityError as exc:
            raise Conflict("event type with this name already exists") from exc
        logger.debug("Created event type %s for user %s", event_type_id, owner)
        return event_type_id

    def rename_and_retag(self, owner: uuid.UUID, id: uuid.UUID, name: str, tags: Sequence[str]) -> bool:
        try:
            with atomic(self._session) as session:
                row = lock_event_type(session, owner, id)
                if row is None:
                    return False
                entry_tags = session.query(JournalEntry.tags).filter(JournalEntry.event_type_id == id)
                check_retag(row.tags or [], tags, (entry.tags or [] for entry in entry_tags))
                row.name = name
                row.tags = list(tags)
        except IntegrityError as exc:
            raise Conflict("event type with this name already exists") from exc
        logger.debug("Updated event type %s for user %s", id, owner)
        return True

    def delete(self, owner: uuid.UUID, id: uuid.UUID) -> bool:
        with atomic(self._session) as session:
            row = lock_event_type(session, owner, id)
            if row is None:
                return False
            referenced = (
                session.query(JournalEntry.id).filter(JournalEntry.event_type_id == id).limit(1).first()
            )
            if referenced is not None:
                raise EventTypeInUse()
            session.delete(row)
        logger.debug("Deleted event type %s for user %s", id, owner)
        return True


class SqlJournalEntryStore(JournalEntryStore):
    def __init__(self, session=None):
        self._session = session or db.session

    def get(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[JournalEntryRecord]:
        row = (
            self._session.query(JournalEntry)
            .filter(JournalEntry.id == id, JournalEntry.user_id == owner)
            .first()
        )
        return _entry_record(row) if row else None

    def search(self, owner: uuid.UUID, filter: SearchFilter) -> List[JournalEntryRecord]:
        query = self._session.query(JournalEntry).filter(JournalEntry.user_id == owner)
        if filter.event_type_id is not None:
            query = query.filter(JournalEntry.event_type_id == filter.event_type_id)
        if filter.tags:
            query = query.filter(*self._contains_all_tags(filter.tags))
        if filter.after is not None:
            query = query.filter(JournalEntry.created_at >= filter.after)
        if filter.before is not None:
            query = query.filter(JournalEntry.created_at <= filter.before)
        if filter.sort == SortOrder.DESC:
            query = query.order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
        else:
            query = query.order_by(JournalEntry.created_at.asc(), JournalEntry.id.asc())
        if filter.offset:
            query = query.offset(filter.offset)
        if filter.limit is not None:
            query = query.limit(filter.limit)
        return [_entry_record(row) for row in query.all()]

    def _contains_all_tags(self, tags: Sequence[str]) -> list:
        dialect = self._session.get_bind().dialect.name
        if dialect == "postgresql":
            return [type_coerce(JournalEntry.tags, JSONB).contains(list(tags))]
        # Serialized JSON holds each tag as a quoted string; match it case-sensitively.
        text = cast(JournalEntry.tags, db.Text)
        return [func.instr(text, json.dumps(tag)) > 0 for tag in dict.fromkeys(tags)]

    def create(
        self,
        owner: uuid.UUID,
        event_type_id: uuid.UUID,
        description: Optional[str],
        tags: Sequence[str],
        created_at: Optional[datetime] = None,
    ) -> uuid.UUID:
        with atomic(self._session) as session:
            event_type = lock_event_type(session, owner, event_type_id)
            ensure_tags_permitted(tags, event_type.tags if event_type is not None else None)
            row = JournalEntry(
                user_id=owner,
                event_type_id=event_type_id,
                description=description,
                tags=list(tags),
                created_at=ensure_utc(created_at) or utcnow(),
            )
            session.add(row)
            session.flush()
            entry_id = row.id
        logger.debug("Created journal entry %s for user %s", entry_id, owner)
        return entry_id

    def update(
        self,
        owner: uuid.UUID,
        id: uuid.UUID,
        description: Optional[str],
        tags: Sequence[str],
    ) -> bool:
        with atomic(self._session) as session:
            current = (
                session.query(JournalEntry.event_type_id)
                .filter(JournalEntry.id == id, JournalEntry.user_id == owner)
                .first()
            )
            if current is None:
                return False
            # Lock order is event type first, then entry, same as create.
            event_type = lock_event_type(session, owner, current.event_type_id)
            ensure_tags_permitted(tags, event_type.tags if event_type is not None else None)
            row = (
                session.query(JournalEntry)
                .filter(JournalEntry.id == id, JournalEntry.user_id == owner)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if row is None:
                return False
            row.description = description
            row.tags = list(tags)
        logger.debug("Updated journal entry %s for user %s", id, owner)
        return True

    def delete(self, owner: uuid.UUID, id: uuid.UUID) -> bool:
        with atomic(self._session) as session:
            deleted = (
                session.query(JournalEntry)
                .filter(JournalEntry.id == id, JournalEntry.user_id == owner)
                .delete(synchronize_session=False)
            )
        return deleted > 0


__all__ = ["SqlEventTypeStore", "SqlJournalEntryStore", "lock_event_type"]
