"""User-defined event category with its tag vocabulary."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Mapped, mapped_column

from tagjournal.domains.journal.models.types import TagList
from tagjournal.extensions import db


class EventType(db.Model):
    __tablename__ = "event_type"
    __table_args__ = (db.UniqueConstraint("user_id", "name", name="uq_event_type_user_name"),)

    id: Mapped[uuid.UUID] = mapped_column(db.Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(db.ForeignKey("users.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    tags: Mapped[list] = mapped_column(TagList, nullable=False, default=list)
