"""JournalService: NotFound mapping, filter validation and store delegation."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

pytestmark = pytest.mark.unit

from tagjournal.core.errors import (
    EventTypeInUse,
    EventTypeValidation,
    InvalidInput,
    NotFound,
    TagsStillUsed,
)
from tagjournal.domains.journal.schemas.journal_schemas import (
    EventTypeData,
    JournalEntryCreate,
    JournalEntryUpdate,
    SearchFilter,
)

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def owner():
    return uuid.uuid4()


@pytest.fixture
def stranger():
    return uuid.uuid4()


@pytest.fixture
def run_type(memory_service, owner):
    return memory_service.create_event_type(owner, EventTypeData(name="Run", tags=["a", "b"]))


def test_missing_and_foreign_event_type_look_identical(memory_service, owner, stranger, run_type):
    with pytest.raises(NotFound) as foreign:
        memory_service.find_event_type(stranger, run_type)
    with pytest.raises(NotFound) as missing:
        memory_service.find_event_type(stranger, uuid.uuid4())
    assert foreign.value.to_dict() == missing.value.to_dict()


def test_update_and_delete_unknown_event_type(memory_service, owner):
    data = EventTypeData(name="Nope", tags=[])
    with pytest.raises(NotFound):
        memory_service.update_event_type(owner, uuid.uuid4(), data)
    with pytest.raises(NotFound):
        memory_service.delete_event_type(owner, uuid.uuid4())


def test_entry_lifecycle(memory_service, owner, run_type):
    entry_id = memory_service.create_journal_entry(
        owner, JournalEntryCreate(event_type_id=run_type, description="tempo", tags=["a"], created_at=T0)
    )
    assert memory_service.find_journal_entry(owner, entry_id).tags == ["a"]

    memory_service.update_journal_entry(owner, entry_id, JournalEntryUpdate(description="tempo+", tags=["a", "b"]))
    assert memory_service.find_journal_entry(owner, entry_id).description == "tempo+"

    with pytest.raises(TagsStillUsed):
        memory_service.update_event_type(owner, run_type, EventTypeData(name="Run", tags=["b"]))
    with pytest.raises(EventTypeInUse):
        memory_service.delete_event_type(owner, run_type)

    memory_service.delete_journal_entry(owner, entry_id)
    with pytest.raises(NotFound):
        memory_service.find_journal_entry(owner, entry_id)
    with pytest.raises(NotFound):
        memory_service.delete_journal_entry(owner, entry_id)
    memory_service.delete_event_type(owner, run_type)


def test_update_unknown_entry_is_not_found(memory_service, owner):
    with pytest.raises(NotFound):
        memory_service.update_journal_entry(owner, uuid.uuid4(), JournalEntryUpdate(tags=[]))


def test_entry_with_disallowed_tag(memory_service, owner, run_type):
    with pytest.raises(EventTypeValidation):
        memory_service.create_journal_entry(
            owner, JournalEntryCreate(event_type_id=run_type, tags=["c"])
        )
    assert memory_service.find_journal_entries(owner) == []


def test_inverted_time_bounds_rejected_before_query(memory_service, owner):
    bad = SearchFilter.model_construct(
        event_type_id=None,
        tags=[],
        after=T0 + timedelta(days=1),
        before=T0,
        sort=None,
        offset=None,
        limit=None,
    )
    with pytest.raises(InvalidInput):
        memory_service.find_journal_entries(owner, bad)


def test_limit_over_maximum_rejected(memory_service, owner):
    bad = SearchFilter.model_construct(
        event_type_id=None, tags=[], after=None, before=None, sort=None, offset=None, limit=500
    )
    with pytest.raises(InvalidInput):
        memory_service.find_journal_entries(owner, bad)
