"""Store contracts for event types and journal entries.

Every method is scoped by ``owner``: a row owned by another user behaves
exactly like a missing row. Mutations that touch the tag-subset invariant
(``rename_and_retag``, entry ``create``/``update``, event type ``delete``) must
run their check and their write as one transaction under the event type's
row lock; see ``tagjournal.domains.journal.consistency``.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from tagjournal.domains.journal.schemas.journal_schemas import SearchFilter


@dataclass(frozen=True)
class EventTypeRecord:
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class JournalEntryRecord:
    id: uuid.UUID
    user_id: uuid.UUID
    event_type_id: uuid.UUID
    description: Optional[str]
    tags: List[str]
    created_at: datetime


class EventTypeStore(ABC):
    @abstractmethod
    def get(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[EventTypeRecord]:
        ...

    @abstractmethod
    def list(self, owner: uuid.UUID) -> List[EventTypeRecord]:
        ...

    @abstractmethod
    def create(self, owner: uuid.UUID, name: str, tags: Sequence[str]) -> uuid.UUID:
        """Insert a new event type; raises ``Conflict`` on a duplicate name."""

    @abstractmethod
    def rename_and_retag(self, owner: uuid.UUID, id: uuid.UUID, name: str, tags: Sequence[str]) -> bool:
        """Apply name and tags, or raise ``TagsStillUsed``; ``False`` if no row matched."""

    @abstractmethod
    def delete(self, owner: uuid.UUID, id: uuid.UUID) -> bool:
        """Delete the event type, or raise ``EventTypeInUse``; ``False`` if no row matched."""


class JournalEntryStore(ABC):
    @abstractmethod
    def get(self, owner: uuid.UUID, id: uuid.UUID) -> Optional[JournalEntryRecord]:
        ...

    @abstractmethod
    def search(self, owner: uuid.UUID, filter: SearchFilter) -> List[JournalEntryRecord]:
        ...

    @abstractmethod
    def create(
        self,
        owner: uuid.UUID,
        event_type_id: uuid.UUID,
        description: Optional[str],
        tags: Sequence[str],
        created_at: Optional[datetime] = None,
    ) -> uuid.UUID:
        """Insert an entry after the subset check; raises ``EventTypeValidation``."""

    @abstractmethod
    def update(
        self,
        owner: uuid.UUID,
        id: uuid.UUID,
        description: Optional[str],
        tags: Sequence[str],
    ) -> bool:
        """Replace description and tags after the subset check; ``False`` if no row matched."""

    @abstractmethod
    def delete(self, owner: uuid.UUID, id: uuid.UUID) -> bool:
        ...


__all__ = [
    "EventTypeRecord",
    "EventTypeStore",
    "JournalEntryRecord",
    "JournalEntryStore",
]
