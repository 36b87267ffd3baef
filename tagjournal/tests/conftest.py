from __future__ import annotations

from datetime import timedelta

import pytest

from tagjournal import create_app
from tagjournal.core.auth.tokens import issue_token
from tagjournal.core.users.services import create_user
from tagjournal.core.utils.dates import utcnow
from tagjournal.domains.journal.models import EventType, JournalEntry  # noqa: F401
from tagjournal.domains.journal.services.journal_service import JournalService
from tagjournal.domains.journal.stores import (
    MemoryBackend,
    MemoryEventTypeStore,
    MemoryJournalEntryStore,
)
from tagjournal.extensions import db


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")
    config.addinivalue_line("markers", "slow: Slow running tests")


@pytest.fixture()
def app():
    """Per-test app on a fresh in-memory SQLite database."""
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        app.extensions["credential_engine"].shutdown()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


def make_token(app, user_id, now=None) -> str:
    return issue_token(
        user_id,
        now or utcnow(),
        timedelta(seconds=app.config["JWT_EXPIRATION_SECONDS"]),
        app.config["JWT_SECRET_KEY"],
    )


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(app):
    """Seeded user; the password hash is never checked by journal tests."""
    return create_user("journal-user", "not-a-real-hash", "journal-user@example.com")


@pytest.fixture
def other_user(app):
    return create_user("other-user", "not-a-real-hash", "other-user@example.com")


@pytest.fixture
def user_headers(app, user):
    return auth_headers(make_token(app, user.id))


@pytest.fixture
def other_headers(app, other_user):
    return auth_headers(make_token(app, other_user.id))


@pytest.fixture
def memory_backend():
    return MemoryBackend()


@pytest.fixture
def memory_service(memory_backend):
    return JournalService(
        MemoryEventTypeStore(memory_backend),
        MemoryJournalEntryStore(memory_backend),
    )
