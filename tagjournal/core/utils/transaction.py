"""Scoped transaction helper."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from tagjournal.extensions import db


@contextmanager
def atomic(session: Session | None = None) -> Iterator[Session]:
    """Run a block as one transaction: commit on exit, roll back on any failure.

    Also rolls back on ``BaseException`` (worker shutdown, aborted request) so a
    check-then-act sequence never leaves a half-applied write behind.
    """
    session = session or db.session
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
