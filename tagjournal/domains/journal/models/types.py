"""Column types shared by journal models."""

from __future__ import annotations

from sqlalchemy.dialects.postgresql import JSONB

from tagjournal.extensions import db

# Ordered list of tag strings; JSONB on Postgres so containment can use @> / <@.
TagList = db.JSON().with_variant(JSONB(), "postgresql")
