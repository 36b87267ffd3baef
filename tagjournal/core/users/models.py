"""User model."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Mapped, mapped_column

from tagjournal.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(db.Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(db.String(64), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False)
