"""Timestamped journal entry referencing an event type."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Mapped, mapped_column

from tagjournal.domains.journal.models.types import TagList
from tagjournal.extensions import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JournalEntry(db.Model):
    __tablename__ = "journal_entry"
    __table_args__ = (
        db.Index("idx_journal_entry_user_event_type", "user_id", "event_type_id"),
        db.Index("ix_journal_entry_user_created_at", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(db.Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(db.ForeignKey("users.id"), nullable=False)
    event_type_id: Mapped[uuid.UUID] = mapped_column(db.ForeignKey("event_type.id"), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    tags: Mapped[list] = mapped_column(TagList, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
