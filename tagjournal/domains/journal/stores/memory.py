"""In-process stores sharing one backend.

Used by unit tests and local experiments. ``MemoryBackend`` keeps the rows
behind a store-wide lock and hands out one ``threading.Lock`` per event type
id, which plays the part of the Postgres row lock: every check-then-act that
involves an event type's tags runs while holding it.
"""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence

from tagjournal.core.errors import Conflict, EventTypeInUse
from tagjournal.core.utils.dates import ensure_utc, utcnow
from tagjournal.domains.journal.consistency import check_retag, ensure_tags_permitted
from tagjournal.domains.journal.schemas.journal_schemas import SearchFilter, SortOrder
from tagjournal.domains.journal.stores.base import (
    EventTypeRecord,
    EventTypeStore,
    JournalEntryRecord,
    JournalEntryStore,
)

logger = logging.getLogger(__name__)


def _copy_event_type(record: EventTypeRecord) -> EventTypeRecord:
    return replace(record, tags=list(record.tags))


def _copy_entry(record: JournalEntryRecord) -> JournalEntryRecord:
    return replace(record, tags=list(record.tags))


class MemoryBackend:
    def __init__(self):
        self.event_types: Dict[uuid.UUID, EventTypeRecord] = {}
        self.entries: Dict[uuid.UUID, JournalEntryRecord] = {}
        # Insertion sequence keeps equal timestamps in a stable order.
        self.entry_seq: Dict[uuid.UUID, int] = {}
        self._seq = itertools.count()
        self._lock = threading.RLock()
        self._row_locks: Dict[uuid.UUID, threading.Lock] = {}

    @contextmanager
    def table(self) -> Iterator["MemoryBackend"]:
        with self._lock:
            yield self

    @contextmanager
    def row_lock(self, event_type_id: uuid.UUID) -> Iterator[None]:
        with self._lock:
            if event_type_id in self.event_types:
                lock = self._row_locks.setdefault(event_type_id, threading.Lock())
            else:
                # Unknown id: the caller finds no row, so nothing is shared.
                lock = threading.Lock()
        with lock:
            yield

    def drop_row_lock(self, event_type_id: uuid.UUID) -> None:
        with self._lock:
            self._row_locks.pop(event_type_id, None)

    def next_seq(self) -> int:
        return next(self._seq)

    def owned_event_type(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[EventTypeRecord]:
        record = self.event_types.get(id)
        if record is None or record.user_id != owner:
            return None
        return record

    def owned_entry(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[JournalEntryRecord]:
        record = self.entries.get(id)
        if record is None or record.user_id != owner:
            return None
        return record


class MemoryEventTypeStore(EventTypeStore):
    def __init__(self, backend: MemoryBackend):
        self._backend = backend

    def get(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[EventTypeRecord]:
        with self._backend.table() as t:
            record = t.owned_event_type(owner, id)
            return _copy_event_type(record) if record else None

    def list(self, owner: uuid.UUID) -> List[EventTypeRecord]:
        with self._backend.table() as t:
            records = [r for r in t.event_types.values() if r.user_id == owner]
        return [_copy_event_type(r) for r in sorted(records, key=lambda r: r.name)]

    def create(self, owner: uuid.UUID, name: str, tags: Sequence[str]) -> uuid.UUID:
        with self._backend.table() as t:
            if any(r.user_id == owner and r.name == name for r in t.event_types.values()):
                raise Conflict("event type with this name already exists")
            record = EventTypeRecord(id=uuid.uuid4(), user_id=owner, name=name, tags=list(tags))
            t.event_types[record.id] = record
        return record.id

    def rename_and_retag(self, owner: uuid.UUID, id: uuid.UUID, name: str, tags: Sequence[str]) -> bool:
        with self._backend.row_lock(id):
            with self._backend.table() as t:
                current = t.owned_event_type(owner, id)
                if current is None:
                    return False
                entry_tags = [list(e.tags) for e in t.entries.values() if e.event_type_id == id]
            check_retag(current.tags, tags, entry_tags)
            with self._backend.table() as t:
                if any(r.user_id == owner and r.name == name and r.id != id for r in t.event_types.values()):
                    raise Conflict("event type with this name already exists")
                t.event_types[id] = replace(current, name=name, tags=list(tags))
        logger.debug("Updated event type %s for user %s", id, owner)
        return True

    def delete(self, owner: uuid.UUID, id: uuid.UUID) -> bool:
        with self._backend.row_lock(id):
            with self._backend.table() as t:
                if t.owned_event_type(owner, id) is None:
                    return False
                if any(e.event_type_id == id for e in t.entries.values()):
                    raise EventTypeInUse()
                del t.event_types[id]
                t.drop_row_lock(id)
        return True


class MemoryJournalEntryStore(JournalEntryStore):
    def __init__(self, backend: MemoryBackend):
        self._backend = backend

    def get(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[JournalEntryRecord]:
        with self._backend.table() as t:
            record = t.owned_entry(owner, id)
            return _copy_entry(record) if record else None

    def search(self, owner: uuid.UUID, filter: SearchFilter) -> List[JournalEntryRecord]:
        required = set(filter.tags)
        with self._backend.table() as t:
            matches = [
                (t.entry_seq[r.id], r)
                for r in t.entries.values()
                if r.user_id == owner
                and (filter.event_type_id is None or r.event_type_id == filter.event_type_id)
                and required.issubset(r.tags)
                and (filter.after is None or r.created_at >= filter.after)
                and (filter.before is None or r.created_at <= filter.before)
            ]
        matches.sort(key=lambda item: (item[1].created_at, item[0]), reverse=filter.sort == SortOrder.DESC)
        records = [r for _, r in matches]
        start = filter.offset or 0
        end = start + filter.limit if filter.limit is not None else None
        return [_copy_entry(r) for r in records[start:end]]

    def create(
        self,
        owner: uuid.UUID,
        event_type_id: uuid.UUID,
        description: Optional[str],
        tags: Sequence[str],
        created_at: Optional[datetime] = None,
    ) -> uuid.UUID:
        with self._backend.row_lock(event_type_id):
            with self._backend.table() as t:
                event_type = t.owned_event_type(owner, event_type_id)
                ensure_tags_permitted(tags, event_type.tags if event_type is not None else None)
                record = JournalEntryRecord(
                    id=uuid.uuid4(),
                    user_id=owner,
                    event_type_id=event_type_id,
                    description=description,
                    tags=list(tags),
                    created_at=ensure_utc(created_at) or utcnow(),
                )
                t.entries[record.id] = record
                t.entry_seq[record.id] = t.next_seq()
        return record.id

    def update(
        self,
        owner: uuid.UUID,
        id: uuid.UUID,
        description: Optional[str],
        tags: Sequence[str],
    ) -> bool:
        with self._backend.table() as t:
            current = t.owned_entry(owner, id)
        if current is None:
            return False
        with self._backend.row_lock(current.event_type_id):
            with self._backend.table() as t:
                event_type = t.owned_event_type(owner, current.event_type_id)
                ensure_tags_permitted(tags, event_type.tags if event_type is not None else None)
                latest = t.owned_entry(owner, id)
                if latest is None:
                    return False
                t.entries[id] = replace(latest, description=description, tags=list(tags))
        return True

    def delete(self, owner: uuid.UUID, id: uuid.UUID) -> bool:
        with self._backend.table() as t:
            if t.owned_entry(owner, id) is None:
                return False
            del t.entries[id]
            t.entry_seq.pop(id, None)
        return True


__all__ = ["MemoryBackend", "MemoryEventTypeStore", "MemoryJournalEntryStore"]
